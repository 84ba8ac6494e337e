# expansion: long-form journal entry composed from a note and its analysis
# the same section layout is used for the gemini prompt and the local fallback render

from langchain_core.prompts import ChatPromptTemplate

from innervoice.models.analysis import AIAnalysis

HEADING_NOTE = "## 📝 Today's Note"
HEADING_ANALYSIS = "## 🧠 Emotional Analysis"
HEADING_DIALOGUE = "## 💭 Inner Dialogue"
HEADING_REFLECTION = "## 🔍 Reflection"
HEADING_QUESTION = "## ❓ Worth Pondering"
HEADING_COUNTER_NOTE = "## 💡 Alternative View"
HEADING_SUGGESTION = "## 💎 Suggestion"
HEADING_MOTIVATION = "## ✨ Today's Motivation"
FOOTER = "---\n*This analysis was created by InnerVoice AI.*"


# expansion prompt template: original note, its analysis, and the layout to enrich

EXPANSION_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """You are InnerVoice, a journaling assistant. Expand the user's short note into a fuller journal entry together with its emotional analysis.
Keep every section heading exactly as written and in the same order, and enrich the content under each one.
Use a sincere, supportive tone and the same language the note was written in."""),
    ("human", """ORIGINAL NOTE: "{content}"

EMOTIONAL ANALYSIS:
- Tone: {tone}
- Emotions: {emotions}
- Mood score: {mood_score}/5

Write a detailed journal entry in the following format:

{layout}"""),
])


def mood_emoji(mood_score: int) -> str:
    if not mood_score:
        return "😐"
    if mood_score >= 3:
        return "😄"
    if mood_score >= 1:
        return "😊"
    if mood_score >= -2:
        return "😔"
    return "😢"


def expansion_headings(analysis: AIAnalysis) -> list[str]:
    """section headings in document order, optional sections only when present"""
    headings = [HEADING_NOTE, HEADING_ANALYSIS, HEADING_DIALOGUE, HEADING_REFLECTION]
    if analysis.question:
        headings.append(HEADING_QUESTION)
    if analysis.counter_note:
        headings.append(HEADING_COUNTER_NOTE)
    if analysis.suggestion:
        headings.append(HEADING_SUGGESTION)
    headings.append(HEADING_MOTIVATION)
    return headings


def render_expansion(content: str, analysis: AIAnalysis) -> str:
    """render the expansion locally, no model involved"""
    sections = [
        f"{HEADING_NOTE}\n{content}",
        (
            f"{HEADING_ANALYSIS}\n"
            f"**Emotional Tone:** {analysis.emotional_tone}\n"
            f"**Main Emotions:** {', '.join(analysis.main_emotions)}\n"
            f"**Mood:** {mood_emoji(analysis.mood_score)} ({analysis.mood_score}/5)"
        ),
        f"{HEADING_DIALOGUE}\n{analysis.response}",
        f"{HEADING_REFLECTION}\n{analysis.reflection}",
    ]
    if analysis.question:
        sections.append(f"{HEADING_QUESTION}\n{analysis.question}")
    if analysis.counter_note:
        sections.append(f"{HEADING_COUNTER_NOTE}\n{analysis.counter_note}")
    if analysis.suggestion:
        sections.append(f"{HEADING_SUGGESTION}\n{analysis.suggestion}")
    sections.append(f'{HEADING_MOTIVATION}\n"{analysis.motivation or ""}"')
    sections.append(FOOTER)
    return "\n\n".join(sections)


def build_expansion_prompt(content: str, analysis: AIAnalysis) -> str:
    """instructions asking gemini to enrich the rendered layout"""
    return EXPANSION_PROMPT.format(
        content=content,
        tone=analysis.emotional_tone,
        emotions=", ".join(analysis.main_emotions),
        mood_score=analysis.mood_score,
        layout=render_expansion(content, analysis),
    )


def follows_expansion_layout(text: str, analysis: AIAnalysis) -> bool:
    """whether text contains every expected heading, in order"""
    if not text or not text.strip():
        return False
    position = 0
    for heading in expansion_headings(analysis):
        found = text.find(heading, position)
        if found == -1:
            return False
        position = found + len(heading)
    return True
