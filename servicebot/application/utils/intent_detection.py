"""
Rule-based language and intent detection for English, Hindi and Hinglish.

No model is involved: language comes from script and keyword counts, intent
from weighted keyword scoring over fixed tables.
"""

from __future__ import annotations

import re

from servicebot.domain.entities.intent import Confidence, DetectionResult, Intent, Language

DEVANAGARI_PATTERN = re.compile(r"[\u0900-\u097F]")

# Romanized Hindi markers used for language detection
HINGLISH_KEYWORDS = (
    "mujhe",
    "hai",
    "chahiye",
    "karwana",
    "karna",
    "kar",
    "do",
    "karo",
    "booking",
    "service",
    "urgent",
    "jaldi",
    "abhi",
    "turant",
    "cancel",
    "status",
    "kab",
    "kahan",
    "kitne",
    "time",
    "change",
)

# Insertion order is the check order and therefore the tie-break.
INTENT_KEYWORDS: dict[Intent, dict[str, tuple[str, ...]]] = {
    Intent.CANCELLATION: {
        "english": ("cancel", "delete", "remove", "stop", "abort"),
        "hinglish": ("cancel", "band", "khatam", "nahi chahiye"),
        "hindi": ("रद्द", "कैंसिल", "बंद"),
    },
    Intent.RESCHEDULE: {
        "english": ("reschedule", "change time", "change date", "postpone", "move", "shift", "different time"),
        "hinglish": ("time change", "date change", "reschedule", "badalna", "shift"),
        "hindi": ("समय बदलें", "तारीख बदलें", "टाल"),
    },
    Intent.INQUIRY: {
        "english": ("status", "check", "where", "when", "details", "info", "information", "my booking", "booking id"),
        "hinglish": ("status", "kahan", "kab", "details", "info", "mera booking"),
        "hindi": ("स्थिति", "कहाँ", "कब", "जानकारी", "डिटेल"),
    },
    Intent.NEW_BOOKING: {
        "english": (
            "book",
            "need",
            "want",
            "schedule",
            "service",
            "cleaning",
            "plumbing",
            "electrical",
            "hvac",
            "handyman",
            "help",
            "fix",
            "repair",
        ),
        "hinglish": ("book", "chahiye", "karwana", "karna", "service", "clean", "fix", "repair"),
        "hindi": ("बुक", "चाहिए", "सर्विस", "साफ", "ठीक", "मरम्मत"),
    },
}

INTENT_WEIGHTS: dict[Intent, int] = {
    Intent.CANCELLATION: 3,
    Intent.RESCHEDULE: 3,
    Intent.INQUIRY: 2,
    Intent.NEW_BOOKING: 1,
}

# Utterances longer than this with no keyword hit are treated as new bookings
MIN_FALLBACK_LENGTH = 5


def contains_devanagari(text: str) -> bool:
    return DEVANAGARI_PATTERN.search(text) is not None


def detect_language(text: str) -> Language:
    if contains_devanagari(text):
        return Language.HINDI

    lowered = text.lower()
    hits = sum(1 for keyword in HINGLISH_KEYWORDS if keyword in lowered)
    if hits >= 2:
        return Language.HINGLISH
    if hits == 1:
        return Language.MIXED
    return Language.ENGLISH


def score_intents(text: str) -> dict[Intent, int]:
    """Score each intent by weighted keyword hits, in check order."""
    lowered = text.lower()
    scores: dict[Intent, int] = {}
    for intent, tables in INTENT_KEYWORDS.items():
        hits = sum(1 for phrases in tables.values() for phrase in phrases if phrase in lowered)
        scores[intent] = hits * INTENT_WEIGHTS[intent]
    return scores


def confidence_for_score(score: int) -> Confidence:
    if score >= 3:
        return Confidence.HIGH
    if score >= 2:
        return Confidence.MEDIUM
    return Confidence.LOW


def detect_intent(text: str) -> tuple[Intent, Confidence]:
    best_intent = Intent.UNKNOWN
    best_score = 0
    for intent, score in score_intents(text).items():
        if score > best_score:
            best_intent = intent
            best_score = score

    if best_intent is Intent.UNKNOWN:
        if len(text.strip()) > MIN_FALLBACK_LENGTH:
            return Intent.NEW_BOOKING, Confidence.LOW
        return Intent.UNKNOWN, Confidence.LOW

    return best_intent, confidence_for_score(best_score)


def detect_intent_and_language(text: str) -> DetectionResult:
    intent, confidence = detect_intent(text)
    return DetectionResult(intent=intent, language=detect_language(text), confidence=confidence)
