# response parser: turns the model's labelled-line reply into an analysis
# the reply is untrusted text, so parsing is best-effort and never raises

import logging
import re
from typing import Optional

from innervoice.models.analysis import (
    AIAnalysis,
    DEFAULT_EMOTIONAL_TONE,
    DEFAULT_MOTIVATION,
    DEFAULT_REFLECTION,
    DEFAULT_RESPONSE,
    NEUTRAL_EMOTION,
    clamp_mood_score,
)

logger = logging.getLogger(__name__)

# output contract shared with the prompt builder, in prompt order
LABELS = {
    "EMOTIONAL_TONE": "emotional_tone",
    "EMOTIONS": "main_emotions",
    "MOOD_SCORE": "mood_score",
    "REFLECTION": "reflection",
    "RESPONSE": "response",
    "QUESTION": "question",
    "COUNTER_NOTE": "counter_note",
    "SUGGESTION": "suggestion",
    "MOTIVATION": "motivation",
}

OPTIONAL_FIELDS = {"question", "counter_note", "suggestion"}

# values the model uses to say "nothing here"
NONE_SENTINELS = {"", "-", "none", "yok", "n/a"}

_LABEL_RE = re.compile(r"^(" + "|".join(LABELS) + r")\s*:\s*(.*)$", re.IGNORECASE)
_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")


def _match_label(line: str) -> Optional[tuple[str, str]]:
    """(field name, value) for a recognized line, None otherwise"""
    cleaned = line.replace("**", "").strip()
    match = _LABEL_RE.match(cleaned)
    if not match:
        return None
    return LABELS[match.group(1).upper()], match.group(2).strip()


def _parse_mood_score(value: str) -> int:
    """integer prefix of the value like '+3', '-2/5' or '4.5', 0 if none"""
    match = _INT_PREFIX_RE.match(value)
    if not match:
        return 0
    return clamp_mood_score(int(match.group(1)))


def _parse_emotions(value: str) -> list[str]:
    return [e.strip() for e in value.split(",") if e.strip()]


def count_recognized_labels(raw_text: Optional[str]) -> int:
    """how many labelled lines the reply contains. zero means the reply is unusable."""
    if not raw_text:
        return 0
    return sum(1 for line in str(raw_text).splitlines() if _match_label(line))


def parse_analysis_response(raw_text: Optional[str]) -> AIAnalysis:
    """parse a model reply into a fully populated analysis.

    unrecognized lines are ignored, a label seen twice keeps the last value,
    missing required fields get fixed defaults.
    """
    parsed: dict = {}
    for line in str(raw_text or "").splitlines():
        matched = _match_label(line)
        if matched is None:
            continue
        field, value = matched

        if field == "main_emotions":
            parsed[field] = _parse_emotions(value)
        elif field == "mood_score":
            parsed[field] = _parse_mood_score(value)
        elif field in OPTIONAL_FIELDS:
            if value.lower() in NONE_SENTINELS:
                parsed.pop(field, None)
            else:
                parsed[field] = value
        else:
            parsed[field] = value

    if not parsed:
        logger.debug("Model reply had no recognized labels, using defaults")

    return AIAnalysis(
        emotionalTone=parsed.get("emotional_tone") or DEFAULT_EMOTIONAL_TONE,
        mainEmotions=parsed.get("main_emotions") or [NEUTRAL_EMOTION],
        moodScore=parsed.get("mood_score", 0),
        reflection=parsed.get("reflection") or DEFAULT_REFLECTION,
        response=parsed.get("response") or DEFAULT_RESPONSE,
        question=parsed.get("question"),
        counterNote=parsed.get("counter_note"),
        suggestion=parsed.get("suggestion"),
        motivation=parsed.get("motivation") or DEFAULT_MOTIVATION,
    )
