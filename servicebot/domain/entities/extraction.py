from __future__ import annotations

from dataclasses import dataclass

from servicebot.domain.entities.booking_draft import Priority, TimePreference
from servicebot.domain.entities.intent import Confidence


@dataclass(frozen=True)
class ExtractedEntities:
    service_category: str | None = None
    area: str | None = None
    priority: Priority | None = None
    time_preference: TimePreference | None = None
    location: str | None = None


@dataclass(frozen=True)
class ExtractionResult:
    entities: ExtractedEntities
    confidence: Confidence
    ambiguous: bool  # computed, not consumed
