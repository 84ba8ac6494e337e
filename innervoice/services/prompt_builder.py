# prompt builder: assembles the analysis instructions sent to gemini
# pure function of note content, profile and recent notes, no io
#
# prompt layout:
#   system: assistant identity, ground rules, persona block for the selected mode
#   human:  user profile, recent notes with relative dates and dominant emotions,
#           today's note, labelled-line output contract

from collections import Counter
from datetime import datetime, timezone
from typing import Optional, Sequence

from langchain_core.prompts import ChatPromptTemplate

from innervoice.models.note import Note
from innervoice.models.profile import UserProfile, resolve_mode

MAX_CONTEXT_NOTES = 5
PREVIEW_LENGTH = 100
TOP_EMOTIONS = 3
DEFAULT_NAME = "friend"

PERSONA_BLOCKS = {
    "therapy": (
        "Be in therapy mode: understanding, supportive and professional. Give a sense of emotional safety.\n"
        "Gently point out patterns you notice in the earlier notes."
    ),
    "mentor": (
        "Be in mentor mode: guiding, wise and experienced. Take a teaching stance.\n"
        "Help the user learn from their past experiences."
    ),
    "friend": (
        "Be in friend mode: warm, relaxed and supportive. Be sincere and understanding.\n"
        "Connect with what the user shared before."
    ),
    "humorous": (
        "Be in playful mode: funny, cheerful and relaxing. Joke where it fits.\n"
        "Highlight the positive sides of the earlier notes."
    ),
}

OUTPUT_CONTRACT = """EMOTIONAL_TONE: [short description of the emotional tone, e.g. "Positive and hopeful", "Sad and thoughtful"]
EMOTIONS: [main emotions separated by commas, e.g. "happy,hopeful" or "sad,lonely,anxious"]
MOOD_SCORE: [mood score as a whole number between -5 and +5, e.g. 2 or -3]
REFLECTION: [a 1-2 sentence reflection that takes the earlier context into account]
RESPONSE: [your reply to the user in {mode} mode, addressing {name} by name and connecting to earlier notes]
QUESTION: [optional: a question that helps the user go deeper]
COUNTER_NOTE: [optional: an alternative point of view]
SUGGESTION: [optional: a constructive suggestion that suits their personality]
MOTIVATION: [a short motivational sentence]"""

# analysis prompt template: inner-voice persona, profile, recent notes, today's entry

ANALYSIS_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """You are InnerVoice, a personal journaling assistant. Act like an inner voice talking with the user.
Empathize and try to understand. Do not judge and do not lecture.
Take the user's earlier notes and emotional history into account and answer in context.

{persona_block}"""),
    ("human", """USER PROFILE:
{profile_block}
{context_section}
TODAY'S JOURNAL ENTRY:
"{content}"

SPECIAL INSTRUCTIONS:
- If today's note carries emotions similar to earlier notes, point out the connection gently
- If there is emotional growth or change, acknowledge it warmly
- If there are recurring patterns, make them visible constructively
- Address the user personally as {name}
- Use the earlier context to offer deeper insight

Reply in exactly the following format, each field on its own line:

""" + OUTPUT_CONTRACT + """

Write every value in the same language the user wrote today's entry in. Keep a sincere, understanding tone."""),
])


def _relative_day(created_at: datetime, now: datetime) -> str:
    """'today', 'yesterday' or 'N days ago' in whole days"""
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    days = int((now - created_at).total_seconds() // 86400)
    if days <= 0:
        return "today"
    if days == 1:
        return "yesterday"
    return f"{days} days ago"


def _preview(content: str) -> str:
    if len(content) > PREVIEW_LENGTH:
        return content[:PREVIEW_LENGTH] + "..."
    return content


def top_emotions(notes: Sequence[Note], n: int = TOP_EMOTIONS) -> list[str]:
    """most frequent tags across the notes, ties keep first-seen order"""
    counts = Counter(tag for note in notes for tag in note.tags if tag)
    return [emotion for emotion, _ in counts.most_common(n)]


def _format_profile(profile: Optional[UserProfile], name: str, mode: str) -> str:
    lines = [f"- Name: {name}"]
    if profile is not None and profile.age:
        lines.append(f"- Age: {profile.age}")
    if profile is not None and profile.interests:
        lines.append(f"- Interests: {', '.join(profile.interests)}")
    if profile is not None and profile.personality_traits:
        lines.append(f"- Personality traits: {', '.join(profile.personality_traits)}")
    lines.append(f"- Inner dialogue mode: {mode} (therapy, mentor, friend, humorous)")
    return "\n".join(lines)


def _format_context(recent_notes: Sequence[Note], now: datetime) -> str:
    """recent notes as relative-dated bullets plus the dominant emotions"""
    notes = list(recent_notes)[:MAX_CONTEXT_NOTES]
    if not notes:
        return ""

    parts = [
        f'- {_relative_day(note.created_at, now)}: "{_preview(note.content)}"'
        for note in notes
    ]
    dominant = top_emotions(notes)
    if dominant:
        parts.append(f"- Recent emotional pattern: {', '.join(dominant)}")

    return "RECENT NOTES AND EMOTIONAL HISTORY:\n" + "\n".join(parts)


def build_analysis_prompt(
    content: str,
    profile: Optional[UserProfile] = None,
    recent_notes: Optional[Sequence[Note]] = None,
    now: Optional[datetime] = None,
) -> str:
    """build the instruction text for analysing one note"""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    mode = resolve_mode(profile)
    name = (profile.name.strip() if profile is not None and profile.name else "") or DEFAULT_NAME

    context_block = _format_context(recent_notes or [], now)

    return ANALYSIS_PROMPT.format(
        persona_block=PERSONA_BLOCKS[mode],
        profile_block=_format_profile(profile, name, mode),
        context_section=f"\n{context_block}\n" if context_block else "",
        content=content,
        name=name,
        mode=mode,
    )
