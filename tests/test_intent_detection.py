"""
Tests for rule-based language and intent detection.
"""

from __future__ import annotations

from servicebot.application.utils.intent_detection import (
    detect_intent,
    detect_intent_and_language,
    detect_language,
    score_intents,
)
from servicebot.domain.entities.intent import Confidence, Intent, Language


def test_devanagari_is_always_hindi():
    """Any Devanagari character wins over Hinglish keyword counts."""
    assert detect_language("mujhe safai chahiye hai, अभी") is Language.HINDI
    assert detect_language("मुझे बुकिंग रद्द करनी है") is Language.HINDI
    assert detect_language("cancel booking क") is Language.HINDI


def test_hinglish_keyword_counts():
    assert detect_language("mujhe cleaning chahiye") is Language.HINGLISH
    assert detect_language("mujhe plumber") is Language.MIXED
    assert detect_language("I need an electrician") is Language.ENGLISH


def test_cancel_my_booking_is_high_confidence_cancellation():
    intent, confidence = detect_intent("cancel my booking")
    assert intent is Intent.CANCELLATION
    assert confidence is Confidence.HIGH


def test_reschedule_and_inquiry():
    assert detect_intent("please reschedule my appointment")[0] is Intent.RESCHEDULE
    assert detect_intent("what is the status of BK10245")[0] is Intent.INQUIRY


def test_hindi_keywords_are_scored():
    """Devanagari phrases count towards intent scores."""
    intent, confidence = detect_intent("मेरी बुकिंग रद्द करो")
    assert intent is Intent.CANCELLATION
    assert confidence is Confidence.HIGH


def test_new_booking_keywords():
    intent, _ = detect_intent("I need cleaning service")
    assert intent is Intent.NEW_BOOKING


def test_tie_goes_to_first_checked_intent():
    """'move' (reschedule) and 'stop' (cancellation) score equally; cancellation is checked first."""
    scores = score_intents("stop")
    assert scores[Intent.CANCELLATION] == 3
    assert detect_intent("stop move")[0] is Intent.CANCELLATION


def test_fallback_for_unmatched_text():
    """Longer unmatched text defaults to a new booking; short text is unknown."""
    assert detect_intent("xyzzy plugh") == (Intent.NEW_BOOKING, Confidence.LOW)
    assert detect_intent("hmm") == (Intent.UNKNOWN, Confidence.LOW)
    assert detect_intent("  abcde  ") == (Intent.UNKNOWN, Confidence.LOW)


def test_medium_score_confidence():
    """'fix' is listed in two new-booking tables, so it scores 2."""
    intent, confidence = detect_intent("please fix")
    assert intent is Intent.NEW_BOOKING
    assert confidence is Confidence.MEDIUM


def test_detection_result_combines_both():
    result = detect_intent_and_language("mujhe booking cancel karna hai")
    assert result.intent is Intent.CANCELLATION
    assert result.language is Language.HINGLISH
