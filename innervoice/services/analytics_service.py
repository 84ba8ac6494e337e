# analytics service: dashboard stats and emotion trends over stored notes
# pure functions of a note list and the current time

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from innervoice.models.analytics import EmotionalTrends, NotesAnalytics
from innervoice.models.note import Note

WEEK = timedelta(days=7)
TREND_MIN_COUNT = 2
TREND_LIMIT = 3
MOOD_TREND_THRESHOLD = 0.5


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _count_tags(notes: Sequence[Note]) -> Counter:
    return Counter(tag for note in notes for tag in note.tags if tag)


def _average_mood(notes: Sequence[Note]) -> Optional[float]:
    """mean mood score of the notes whose analysis can be decoded"""
    scores = []
    for note in notes:
        analysis = note.parsed_analysis()
        if analysis is not None:
            scores.append(analysis.mood_score)
    if not scores:
        return None
    return sum(scores) / len(scores)


def _split_weeks(notes: Sequence[Note], now: datetime) -> tuple[list[Note], list[Note]]:
    """(notes from the last 7 days, notes from the 7 days before that)"""
    current, previous = [], []
    for note in notes:
        age = now - _as_utc(note.created_at)
        if age < WEEK:
            current.append(note)
        elif age < 2 * WEEK:
            previous.append(note)
    return current, previous


def _streak_days(notes: Sequence[Note], now: datetime) -> int:
    """consecutive days with at least one note, ending today"""
    days = {_as_utc(note.created_at).date() for note in notes}
    streak = 0
    day = now.date()
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def compute_analytics(notes: Sequence[Note], now: Optional[datetime] = None) -> NotesAnalytics:
    now = _as_utc(now or datetime.now(timezone.utc))
    current_week, last_week = _split_weeks(notes, now)

    emotion_counts = _count_tags(notes)
    most_common = emotion_counts.most_common(1)

    weekly_activity = [0] * 7
    for note in current_week:
        weekly_activity[_as_utc(note.created_at).weekday()] += 1

    mood_trend = "stable"
    current_mood = _average_mood(current_week)
    previous_mood = _average_mood(last_week)
    if current_mood is not None and previous_mood is not None:
        delta = current_mood - previous_mood
        if delta >= MOOD_TREND_THRESHOLD:
            mood_trend = "up"
        elif delta <= -MOOD_TREND_THRESHOLD:
            mood_trend = "down"

    average_mood = _average_mood(notes)

    return NotesAnalytics(
        totalNotes=len(notes),
        weeklyAverage=round(len(current_week) / 7, 1),
        mostCommonEmotion=most_common[0][0] if most_common else None,
        moodTrend=mood_trend,
        averageMoodScore=round(average_mood, 1) if average_mood is not None else 0.0,
        streakDays=_streak_days(notes, now),
        emotionDistribution=dict(emotion_counts),
        weeklyActivity=weekly_activity,
    )


def compute_trends(notes: Sequence[Note], now: Optional[datetime] = None) -> EmotionalTrends:
    """emotions rising or falling this week compared with last week"""
    now = _as_utc(now or datetime.now(timezone.utc))
    current_week, last_week = _split_weeks(notes, now)
    current = _count_tags(current_week)
    previous = _count_tags(last_week)

    trending, declining = [], []
    for emotion in list(current) + [e for e in previous if e not in current]:
        now_count = current.get(emotion, 0)
        before_count = previous.get(emotion, 0)
        if now_count > before_count and now_count >= TREND_MIN_COUNT:
            trending.append(emotion)
        elif before_count > now_count and before_count >= TREND_MIN_COUNT:
            declining.append(emotion)

    return EmotionalTrends(
        currentWeek=dict(current),
        lastWeek=dict(previous),
        trending=trending[:TREND_LIMIT],
        declining=declining[:TREND_LIMIT],
    )
