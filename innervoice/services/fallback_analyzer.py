# rule-based fallback analyzer: keyword emotion detection when gemini is unavailable
# deterministic lookup tables, except the motivation line which is a random pick
# from a fixed list (the rng is injectable so tests can pin it)

import logging
import random
import re
from typing import Optional

from innervoice.models.analysis import AIAnalysis, NEUTRAL_EMOTION, clamp_mood_score
from innervoice.models.profile import UserProfile, resolve_mode

logger = logging.getLogger(__name__)

# category -> turkish stems, matched as substrings so suffixed forms count.
# dict order is the order detected emotions are reported in.
TURKISH_KEYWORDS = {
    "happy": ["mutlu", "sevinç", "güzel", "harika", "mükemmel", "keyif", "eğlence"],
    "sad": ["üzgün", "kötü", "ağlamak", "hüzün", "üzüntü", "melankolik"],
    "angry": ["sinir", "kızgın", "öfke", "bıkkın", "rahatsız"],
    "anxious": ["endişe", "kaygı", "stres", "gergin", "tedirgin"],
    "lonely": ["yalnız", "tek", "kimse", "boş"],
    "hopeful": ["umut", "gelecek", "başarı", "hedef", "hayal"],
}

# category -> english words and inflections, matched as whole words
ENGLISH_KEYWORDS = {
    "happy": ["happy", "happiness", "joy", "joyful", "glad", "great", "wonderful", "amazing", "delighted"],
    "sad": ["sad", "sadness", "unhappy", "cry", "crying", "cried", "grief", "sorrow", "miserable"],
    "angry": ["angry", "furious", "annoyed", "irritated", "fed up"],
    "anxious": ["anxious", "anxiety", "worried", "worry", "worries", "stress", "stressed", "nervous"],
    "lonely": ["lonely", "loneliness", "alone", "nobody", "empty", "isolated"],
    "hopeful": ["hope", "hopes", "hoping", "hopeful", "future", "goal", "goals", "dream", "dreams", "success"],
}

ENGLISH_PATTERNS = {
    emotion: re.compile(r"\b(?:" + "|".join(re.escape(word) for word in words) + r")\b")
    for emotion, words in ENGLISH_KEYWORDS.items()
}

# dotted and dotless capital i lower to their turkish small forms
TURKISH_CASE = str.maketrans({"I": "ı", "İ": "i"})

MOOD_DELTAS = {
    "happy": 2,
    "hopeful": 2,
    "sad": -2,
    "lonely": -2,
    "angry": -1,
    "anxious": -1,
}

LONELY_RESPONSES = {
    "therapy": (
        "Feeling lonely is part of being human. Sitting with this feeling can sometimes "
        "deepen your self-awareness."
    ),
    "mentor": (
        "Moments of solitude are often when we hold our deepest conversation with ourselves. "
        "You can make use of this one."
    ),
    "humorous": "Loneliness can be a great companion sometimes. At least it never interrupts! 😄",
    "friend": (
        "I get you. Turning inward can feel good, but staying there too long can start to weigh on you."
    ),
}

REFLECTIONS = {
    "lonely": "Staying in silence today may have both tired you and made you think.",
    "happy": "The good moments you lived today seem to have left a positive mark on you.",
    "anxious": "It sounds like worries kept your mind busy and left you feeling a bit tense.",
}
DEFAULT_REFLECTION = "What you wrote today offers lovely glimpses into your inner world."

RESPONSES = {
    "happy": "Writing down what made you happy today can help keep this positive energy going.",
    "anxious": "Your worries are normal, but it matters that you don't let them take control. Remember to breathe.",
}
DEFAULT_RESPONSE = "Thank you for sharing your thoughts. Every note is a step, and every step is growth."

QUESTIONS = {
    "lonely": "What did this silence make you think about? Maybe it wasn't loneliness, maybe you just needed rest?",
    "happy": "What created this good feeling? What could you do to feel it again?",
    "anxious": "Are these worries about things you can actually control? Which ones can you handle?",
}
DEFAULT_QUESTION = "What might these feelings be trying to teach you?"

SUGGESTIONS = {
    "lonely": (
        "Even a short walk might refresh your mind. Would you like to set a small "
        "outside-world goal for tomorrow?"
    ),
    "anxious": "Try the 5-4-3-2-1 technique: see 5 things, hear 4, feel 3, smell 2, taste 1.",
    "happy": "Keeping a record of this positive feeling can give you strength on harder days.",
}
DEFAULT_SUGGESTION = "Be patient with yourself. Every feeling passes and tries to teach you something."

SAD_COUNTER_NOTE = "Maybe this sadness is just a passing phase. You could feel completely different tomorrow."
ANXIOUS_COUNTER_NOTE = "Most of our worries never actually happen. How about focusing on the present moment?"

MOTIVATIONS = [
    "If there is silence in your inner world, sometimes that is where the clearest voice lives.",
    "Every note is a seed, and every seed is a new beginning.",
    "Understanding your feelings is the first step to understanding yourself.",
    "Today was hard, but tomorrow is a new page.",
    "You are writing your own story, and every word matters.",
    "The voice inside you is your most important advisor.",
    "Your feelings describe you, but they do not limit you.",
]

# which detected emotion picks the text bank entry
TEXT_PRIORITY = ("lonely", "happy", "anxious")


def detect_emotions(content: str) -> list[str]:
    """emotion categories whose keywords appear in the content"""
    turkish = content.translate(TURKISH_CASE).lower()
    english = content.lower()
    return [
        emotion
        for emotion, stems in TURKISH_KEYWORDS.items()
        if any(stem in turkish for stem in stems) or ENGLISH_PATTERNS[emotion].search(english)
    ]


def emotional_tone(emotions: list[str], mood_score: int) -> str:
    if mood_score >= 2:
        return "Positive and hopeful"
    if mood_score <= -2:
        return "Negative and melancholic"
    if "anxious" in emotions:
        return "Anxious and tense"
    if "lonely" in emotions:
        return "Lonely and withdrawn"
    return "Neutral and balanced"


def _pick(bank: dict, emotions: list[str], default: str) -> str:
    for emotion in TEXT_PRIORITY:
        if emotion in emotions and emotion in bank:
            return bank[emotion]
    return default


def _counter_note(emotions: list[str]) -> Optional[str]:
    if "sad" in emotions or "lonely" in emotions:
        return SAD_COUNTER_NOTE
    if "anxious" in emotions:
        return ANXIOUS_COUNTER_NOTE
    return None


class FallbackAnalyzer:
    """keyword-driven stand-in for the model analysis, always succeeds"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def analyze(self, content: str, profile: Optional[UserProfile] = None) -> AIAnalysis:
        emotions = detect_emotions(content or "")
        mood_score = clamp_mood_score(sum(MOOD_DELTAS[e] for e in emotions))
        if not emotions:
            emotions = [NEUTRAL_EMOTION]

        if "lonely" in emotions:
            response = LONELY_RESPONSES[resolve_mode(profile)]
        else:
            response = _pick(RESPONSES, emotions, DEFAULT_RESPONSE)

        analysis = AIAnalysis(
            emotionalTone=emotional_tone(emotions, mood_score),
            mainEmotions=emotions,
            moodScore=mood_score,
            reflection=_pick(REFLECTIONS, emotions, DEFAULT_REFLECTION),
            response=response,
            question=_pick(QUESTIONS, emotions, DEFAULT_QUESTION),
            counterNote=_counter_note(emotions),
            suggestion=_pick(SUGGESTIONS, emotions, DEFAULT_SUGGESTION),
            motivation=self.rng.choice(MOTIVATIONS),
        )
        logger.info(f"Fallback analysis: emotions={emotions} mood={mood_score}")
        return analysis
