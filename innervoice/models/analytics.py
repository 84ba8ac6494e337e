# analytics models: dashboard stats and week-over-week emotion trends
# computed on request from the notes collection

from typing import Literal, Optional
from pydantic import BaseModel, Field


class NotesAnalytics(BaseModel):
    """aggregate stats over the stored notes"""
    total_notes: int = Field(0, alias="totalNotes")
    weekly_average: float = Field(0.0, alias="weeklyAverage")
    most_common_emotion: Optional[str] = Field(None, alias="mostCommonEmotion")
    mood_trend: Literal["up", "down", "stable"] = Field("stable", alias="moodTrend")
    average_mood_score: float = Field(0.0, alias="averageMoodScore")
    streak_days: int = Field(0, alias="streakDays")
    emotion_distribution: dict[str, int] = Field(default_factory=dict, alias="emotionDistribution")
    weekly_activity: list[int] = Field(default_factory=lambda: [0] * 7, alias="weeklyActivity")

    model_config = {"populate_by_name": True}


class EmotionalTrends(BaseModel):
    """emotion tag counts this week vs last week"""
    current_week: dict[str, int] = Field(default_factory=dict, alias="currentWeek")
    last_week: dict[str, int] = Field(default_factory=dict, alias="lastWeek")
    trending: list[str] = Field(default_factory=list)
    declining: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}
