from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Intent(str, Enum):
    NEW_BOOKING = "new-booking"
    CANCELLATION = "cancellation"
    INQUIRY = "inquiry"
    RESCHEDULE = "reschedule"
    UNKNOWN = "unknown"  # detection only, never an active intent


class Language(str, Enum):
    ENGLISH = "english"
    HINDI = "hindi"
    HINGLISH = "hinglish"
    MIXED = "mixed"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class DetectionResult:
    intent: Intent
    language: Language
    confidence: Confidence
