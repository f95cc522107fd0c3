from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None
    parsed: Any = None

    @staticmethod
    def ok(parsed: Any = None) -> "ValidationResult":
        return ValidationResult(valid=True, parsed=parsed)

    @staticmethod
    def fail(error: str) -> "ValidationResult":
        return ValidationResult(valid=False, error=error)
