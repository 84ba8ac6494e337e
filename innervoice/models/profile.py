# user profile model: request-scoped input that steers prompt tone
# never stored server-side

from typing import Optional
from pydantic import BaseModel, Field

PERSONA_MODES = ("therapy", "mentor", "friend", "humorous")
DEFAULT_MODE = "friend"


class UserProfile(BaseModel):
    """profile sent by the client with each note"""
    name: Optional[str] = None
    age: Optional[int] = None
    mode: Optional[str] = Field(None, description="therapy | mentor | friend | humorous")
    interests: list[str] = Field(default_factory=list)
    personality_traits: list[str] = Field(default_factory=list, alias="personalityTraits")

    model_config = {"populate_by_name": True}


def resolve_mode(profile: Optional[UserProfile]) -> str:
    """persona mode for a profile, unknown or missing modes become friend"""
    if profile is None or not profile.mode:
        return DEFAULT_MODE
    mode = profile.mode.strip().lower()
    return mode if mode in PERSONA_MODES else DEFAULT_MODE
