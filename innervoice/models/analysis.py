# analysis models: structured emotion/mood assessment of a note
# stored on the note as json text, encoded and decoded only through this module

from typing import Optional
from pydantic import BaseModel, Field, field_validator

MOOD_SCORE_MIN = -5
MOOD_SCORE_MAX = 5

NEUTRAL_EMOTION = "neutral"
DEFAULT_EMOTIONAL_TONE = "Neutral"
DEFAULT_REFLECTION = "Thank you for sharing your thoughts."
DEFAULT_RESPONSE = "I hear you. Every feeling matters and deserves a place."
DEFAULT_MOTIVATION = "Every note is a step, and every step is growth."


def clamp_mood_score(value: int) -> int:
    """clamp a mood score into the supported -5..+5 range"""
    return max(MOOD_SCORE_MIN, min(MOOD_SCORE_MAX, int(value)))


class AIAnalysis(BaseModel):
    """result of one analysis pass over a note"""
    emotional_tone: str = Field(DEFAULT_EMOTIONAL_TONE, alias="emotionalTone")
    main_emotions: list[str] = Field(default_factory=lambda: [NEUTRAL_EMOTION], alias="mainEmotions")
    mood_score: int = Field(0, alias="moodScore", description="mood score -5 to +5")
    reflection: str = DEFAULT_REFLECTION
    response: str = DEFAULT_RESPONSE
    question: Optional[str] = None
    counter_note: Optional[str] = Field(None, alias="counterNote")
    suggestion: Optional[str] = None
    motivation: Optional[str] = None

    model_config = {"populate_by_name": True}

    @field_validator("mood_score")
    @classmethod
    def _clamp_mood_score(cls, value: int) -> int:
        return clamp_mood_score(value)

    @field_validator("main_emotions")
    @classmethod
    def _non_empty_emotions(cls, value: list[str]) -> list[str]:
        emotions = [e.strip() for e in value if e and e.strip()]
        return emotions or [NEUTRAL_EMOTION]


def encode_analysis(analysis: AIAnalysis) -> str:
    """serialize an analysis to the json text stored on a note"""
    return analysis.model_dump_json(by_alias=True)


def decode_analysis(raw: str) -> AIAnalysis:
    """parse the json text stored on a note back into an analysis.
    raises pydantic.ValidationError on malformed input."""
    return AIAnalysis.model_validate_json(raw)
