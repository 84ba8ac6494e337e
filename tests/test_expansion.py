# tests for the long-form expansion
# local render, section layout check and the expansion prompt

from innervoice.models.analysis import AIAnalysis
from innervoice.services.expansion import (
    EXPANSION_PROMPT,
    FOOTER,
    HEADING_COUNTER_NOTE,
    HEADING_MOTIVATION,
    HEADING_NOTE,
    HEADING_QUESTION,
    HEADING_SUGGESTION,
    build_expansion_prompt,
    expansion_headings,
    follows_expansion_layout,
    mood_emoji,
    render_expansion,
)


def full_analysis(**overrides):
    values = dict(
        emotionalTone="Sad and thoughtful",
        mainEmotions=["sad", "lonely"],
        moodScore=-3,
        reflection="You carried a lot today.",
        response="I'm here with you.",
        question="What would help right now?",
        counterNote="Tomorrow may feel lighter.",
        suggestion="Call a friend.",
        motivation="One step at a time.",
    )
    values.update(overrides)
    return AIAnalysis(**values)


class TestRenderExpansion:
    """local template"""

    def test_sections_in_order(self):
        text = render_expansion("A hard day.", full_analysis())
        positions = [text.index(h) for h in expansion_headings(full_analysis())]
        assert positions == sorted(positions)
        assert text.startswith(f"{HEADING_NOTE}\nA hard day.")
        assert text.endswith(FOOTER)

    def test_analysis_block(self):
        text = render_expansion("A hard day.", full_analysis())
        assert "**Emotional Tone:** Sad and thoughtful" in text
        assert "**Main Emotions:** sad, lonely" in text
        assert "**Mood:** 😢 (-3/5)" in text

    def test_motivation_is_quoted(self):
        text = render_expansion("A hard day.", full_analysis())
        assert f'{HEADING_MOTIVATION}\n"One step at a time."' in text

    def test_optional_sections_omitted(self):
        analysis = full_analysis(question=None, counterNote=None, suggestion=None)
        text = render_expansion("A hard day.", analysis)
        assert HEADING_QUESTION not in text
        assert HEADING_COUNTER_NOTE not in text
        assert HEADING_SUGGESTION not in text
        assert HEADING_MOTIVATION in text


class TestMoodEmoji:

    def test_bands(self):
        assert mood_emoji(0) == "😐"
        assert mood_emoji(5) == "😄"
        assert mood_emoji(3) == "😄"
        assert mood_emoji(1) == "😊"
        assert mood_emoji(-1) == "😔"
        assert mood_emoji(-2) == "😔"
        assert mood_emoji(-5) == "😢"


class TestLayoutCheck:
    """validation of model-written expansions"""

    def test_rendered_text_follows_layout(self):
        analysis = full_analysis()
        assert follows_expansion_layout(render_expansion("Note.", analysis), analysis)

    def test_enriched_text_follows_layout(self):
        analysis = full_analysis(question=None, counterNote=None, suggestion=None)
        text = "\n\n".join(f"{h}\nLonger prose here." for h in expansion_headings(analysis))
        assert follows_expansion_layout(text, analysis)

    def test_missing_heading(self):
        analysis = full_analysis()
        text = render_expansion("Note.", analysis).replace(HEADING_SUGGESTION, "## Advice")
        assert not follows_expansion_layout(text, analysis)

    def test_out_of_order(self):
        analysis = full_analysis(question=None, counterNote=None, suggestion=None)
        headings = expansion_headings(analysis)
        text = "\n".join(reversed(headings))
        assert not follows_expansion_layout(text, analysis)

    def test_empty_reply(self):
        assert not follows_expansion_layout("", full_analysis())
        assert not follows_expansion_layout("   \n", full_analysis())


class TestExpansionPrompt:

    def test_prompt_embeds_layout_and_analysis(self):
        analysis = full_analysis()
        prompt = build_expansion_prompt("A hard day.", analysis)
        assert 'ORIGINAL NOTE: "A hard day."' in prompt
        assert "- Emotions: sad, lonely" in prompt
        assert "- Mood score: -3/5" in prompt
        assert render_expansion("A hard day.", analysis) in prompt

    def test_template_variables(self):
        assert set(EXPANSION_PROMPT.input_variables) == {"content", "tone", "emotions", "mood_score", "layout"}

    def test_braces_in_note_are_kept(self):
        prompt = build_expansion_prompt("set {goal} for {tomorrow}", full_analysis())
        assert 'ORIGINAL NOTE: "set {goal} for {tomorrow}"' in prompt
