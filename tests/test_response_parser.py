# tests for the model reply parser
# labelled-line parsing, defaults, mood clamping and none sentinels

from innervoice.models.analysis import (
    DEFAULT_EMOTIONAL_TONE,
    DEFAULT_MOTIVATION,
    DEFAULT_REFLECTION,
    DEFAULT_RESPONSE,
)
from innervoice.services.response_parser import count_recognized_labels, parse_analysis_response
from tests.conftest import GOOD_REPLY


class TestParseFullReply:
    """replies that follow the contract"""

    def test_all_fields_parsed(self):
        analysis = parse_analysis_response(GOOD_REPLY)
        assert analysis.emotional_tone == "Calm and content"
        assert analysis.main_emotions == ["happy", "calm"]
        assert analysis.mood_score == 3
        assert analysis.reflection == "You found some peace today."
        assert analysis.response == "That sounds like a lovely day, Deniz."
        assert analysis.question == "What made it feel so calm?"
        assert analysis.suggestion == "Take a walk again tomorrow."
        assert analysis.motivation == "Small moments add up."

    def test_dash_counter_note_is_absent(self):
        analysis = parse_analysis_response(GOOD_REPLY)
        assert analysis.counter_note is None

    def test_chatter_lines_ignored(self):
        raw = "Sure! Let me look at this.\n\nEMOTIONS: sad\nThanks for asking.\nMOOD_SCORE: -2"
        analysis = parse_analysis_response(raw)
        assert analysis.main_emotions == ["sad"]
        assert analysis.mood_score == -2

    def test_markdown_bold_labels(self):
        raw = "**EMOTIONAL_TONE:** Quiet\n**EMOTIONS**: tired, calm"
        analysis = parse_analysis_response(raw)
        assert analysis.emotional_tone == "Quiet"
        assert analysis.main_emotions == ["tired", "calm"]

    def test_labels_case_insensitive(self):
        analysis = parse_analysis_response("emotions: hopeful\nMood_Score: 4")
        assert analysis.main_emotions == ["hopeful"]
        assert analysis.mood_score == 4

    def test_last_value_wins(self):
        analysis = parse_analysis_response("EMOTIONS: sad\nEMOTIONS: happy")
        assert analysis.main_emotions == ["happy"]

    def test_emotions_trimmed_and_empty_dropped(self):
        analysis = parse_analysis_response("EMOTIONS:  sad , , lonely ,")
        assert analysis.main_emotions == ["sad", "lonely"]


class TestMoodScore:
    """mood score extraction and clamping"""

    def test_clamped_high(self):
        assert parse_analysis_response("MOOD_SCORE: 97").mood_score == 5

    def test_clamped_low(self):
        assert parse_analysis_response("MOOD_SCORE: -12").mood_score == -5

    def test_explicit_plus_sign(self):
        assert parse_analysis_response("MOOD_SCORE: +3").mood_score == 3

    def test_integer_prefix(self):
        assert parse_analysis_response("MOOD_SCORE: -2/5").mood_score == -2
        assert parse_analysis_response("MOOD_SCORE: 4.5").mood_score == 4

    def test_non_numeric_is_zero(self):
        assert parse_analysis_response("MOOD_SCORE: quite good").mood_score == 0


class TestOptionalFields:
    """optional fields that say 'nothing'"""

    def test_sentinels_mean_absent(self):
        raw = "QUESTION: none\nCOUNTER_NOTE: Yok\nSUGGESTION: N/A"
        analysis = parse_analysis_response(raw)
        assert analysis.question is None
        assert analysis.counter_note is None
        assert analysis.suggestion is None

    def test_empty_value_means_absent(self):
        assert parse_analysis_response("QUESTION:").question is None


class TestDefaults:
    """missing or unusable replies"""

    def test_text_without_labels_gives_defaults(self):
        analysis = parse_analysis_response("I'm sorry, I can't help with that.")
        assert analysis.emotional_tone == DEFAULT_EMOTIONAL_TONE
        assert analysis.main_emotions == ["neutral"]
        assert analysis.mood_score == 0
        assert analysis.reflection == DEFAULT_REFLECTION
        assert analysis.response == DEFAULT_RESPONSE
        assert analysis.motivation == DEFAULT_MOTIVATION
        assert analysis.question is None

    def test_empty_and_none_input(self):
        assert parse_analysis_response("").main_emotions == ["neutral"]
        assert parse_analysis_response(None).mood_score == 0

    def test_empty_emotions_value_falls_back_to_neutral(self):
        assert parse_analysis_response("EMOTIONS: , ,").main_emotions == ["neutral"]


class TestCountRecognizedLabels:

    def test_counts_contract_lines(self):
        assert count_recognized_labels(GOOD_REPLY) == 9

    def test_zero_for_plain_text(self):
        assert count_recognized_labels("just some words\nand more") == 0
        assert count_recognized_labels(None) == 0
