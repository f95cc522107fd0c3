"""
Heuristic entity extraction for the first utterance of a new booking.

Extracts service category, area, priority, time preference and location.
Every table below is an ordered mapping; iteration order is the tie-break.
"""

from __future__ import annotations

import re

from servicebot.domain.entities.booking_draft import Priority, TimePreference
from servicebot.domain.entities.extraction import ExtractedEntities, ExtractionResult
from servicebot.domain.entities.intent import Confidence

SERVICE_CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "cleaning": ("clean", "cleaning", "साफ", "safai", "saaf", "deep clean", "kitchen clean", "bathroom clean"),
    "plumbing": ("plumb", "plumbing", "pipe", "leak", "tap", "नल", "पाइप", "leakage", "water"),
    "electrical": ("electric", "electrical", "wiring", "light", "switch", "बिजली", "bijli", "power", "socket"),
    "hvac": ("hvac", "ac", "air condition", "heating", "cooling", "एसी", "ठंडा", "thanda"),
    "handyman": ("handyman", "repair", "fix", "मरम्मत", "marammat", "ठीक", "theek"),
}

AREA_KEYWORDS: dict[str, tuple[str, ...]] = {
    "kitchen": ("kitchen", "रसोई", "rasoi"),
    "bathroom": ("bathroom", "bath", "toilet", "बाथरूम", "शौचालय"),
    "bedroom": ("bedroom", "bed room", "कमरा", "kamra"),
    "living room": ("living", "hall", "drawing", "बैठक"),
    "entire house": ("house", "home", "full", "entire", "पूरा", "घर", "ghar"),
}

# Urgent is checked before high; "normal" is never inferred.
PRIORITY_KEYWORDS: dict[Priority, tuple[str, ...]] = {
    Priority.URGENT: (
        "urgent",
        "emergency",
        "asap",
        "immediately",
        "now",
        "turant",
        "तुरंत",
        "jaldi",
        "जल्दी",
        "abhi",
        "अभी",
    ),
    Priority.HIGH: ("soon", "quickly", "fast", "जल्द", "jald"),
}

TIME_PREFERENCE_KEYWORDS: dict[TimePreference, tuple[str, ...]] = {
    TimePreference.ASAP: ("asap", "now", "immediately", "urgent", "abhi", "अभी", "turant", "तुरंत"),
    TimePreference.MORNING: ("morning", "सुबह", "subah", "am"),
    TimePreference.AFTERNOON: ("afternoon", "दोपहर", "dopahar", "noon", "pm"),
    TimePreference.EVENING: ("evening", "शाम", "shaam", "night", "रात"),
}

# Latin indicators must stand alone as words; Devanagari is matched as-is.
LOCATION_INDICATOR_PATTERN = re.compile(r"\b(?:at|in|near|address|location|pata)\b|पता", re.IGNORECASE)
LOCATION_TERMINATORS = re.compile(r"[,.\n]")
LOCATION_MIN_LENGTH = 5
LOCATION_MAX_LENGTH = 100

CATEGORY_CONFIDENCE_WEIGHTS = {
    Confidence.HIGH: 3,
    Confidence.MEDIUM: 2,
    Confidence.LOW: 1,
}
AREA_WEIGHT = 2
PRIORITY_WEIGHT = 3
TIME_PREFERENCE_WEIGHT = 2
LOCATION_WEIGHT = 1


def extract_service_category(text: str, available_categories: list[str]) -> tuple[str | None, Confidence]:
    """Pick the catalog category with the most keyword hits (first seen wins ties)."""
    lowered = text.lower()
    best_category: str | None = None
    best_score = 0

    for category in available_categories:
        keywords = SERVICE_CATEGORY_KEYWORDS.get(category.strip().lower(), ())
        score = sum(1 for keyword in keywords if keyword in lowered)
        if score > best_score:
            best_category = category
            best_score = score

    if best_score >= 2:
        return best_category, Confidence.HIGH
    if best_score == 1:
        return best_category, Confidence.MEDIUM
    return None, Confidence.LOW


def extract_area(text: str) -> str | None:
    lowered = text.lower()
    for area, keywords in AREA_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return area
    return None


def extract_priority(text: str) -> Priority | None:
    lowered = text.lower()
    for priority, keywords in PRIORITY_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return priority
    return None


def extract_time_preference(text: str) -> TimePreference | None:
    lowered = text.lower()
    for preference, keywords in TIME_PREFERENCE_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return preference
    return None


def extract_location(text: str) -> str | None:
    """Take the text after the first location indicator, up to the next comma, period or newline."""
    match = LOCATION_INDICATOR_PATTERN.search(text)
    if not match:
        return None

    tail = text[match.end():].strip()
    candidate = LOCATION_TERMINATORS.split(tail, maxsplit=1)[0].strip()
    if LOCATION_MIN_LENGTH < len(candidate) < LOCATION_MAX_LENGTH:
        return candidate
    return None


def aggregate_confidence(weights: list[int]) -> Confidence:
    if not weights:
        return Confidence.LOW
    average = sum(weights) / len(weights)
    if average >= 2.5:
        return Confidence.HIGH
    if average >= 1.5:
        return Confidence.MEDIUM
    return Confidence.LOW


def extract_entities(text: str, available_categories: list[str]) -> ExtractionResult:
    weights: list[int] = []

    category, category_confidence = extract_service_category(text, available_categories)
    if category:
        weights.append(CATEGORY_CONFIDENCE_WEIGHTS[category_confidence])

    area = extract_area(text)
    if area:
        weights.append(AREA_WEIGHT)

    priority = extract_priority(text)
    if priority:
        weights.append(PRIORITY_WEIGHT)

    time_preference = extract_time_preference(text)
    if time_preference:
        weights.append(TIME_PREFERENCE_WEIGHT)

    location = extract_location(text)
    if location:
        weights.append(LOCATION_WEIGHT)

    confidence = aggregate_confidence(weights)
    return ExtractionResult(
        entities=ExtractedEntities(
            service_category=category,
            area=area,
            priority=priority,
            time_preference=time_preference,
            location=location,
        ),
        confidence=confidence,
        ambiguous=bool(weights) and confidence is Confidence.LOW,
    )
