"""Timestamp validity and staleness checks for extracted messages."""

import re
from datetime import datetime, timezone

from src.constants import INT64_MAX, INT64_MIN, MISSING_TIMESTAMP_SENTINEL
from src.models.webhook_models import ExtractedMessage, ValidatedMessage
from src.services.message_extractor import AdmissionError

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


class MessageValidityError(AdmissionError):
    """Base exception for messages rejected on their timestamp."""

    pass


class MissingTimestampError(MessageValidityError):
    """Raised when the timestamp is empty or the ``-1`` sentinel."""

    pass


class UnparseableTimestampError(MessageValidityError):
    """Raised when the timestamp is not a base-10 signed 64-bit integer."""

    pass


class StaleMessageError(MessageValidityError):
    """Raised when the message is at least the threshold old."""

    pass


def parse_timestamp(value: str) -> int:
    """Parse a Unix timestamp in seconds.

    Accepts an optional sign followed by ASCII digits, within int64 range.

    Raises:
        UnparseableTimestampError: For anything else
    """
    if not _INT_PATTERN.fullmatch(value):
        raise UnparseableTimestampError(f"Timestamp is not an integer: {value!r}")
    parsed = int(value)
    if not INT64_MIN <= parsed <= INT64_MAX:
        raise UnparseableTimestampError(f"Timestamp out of range: {value!r}")
    return parsed


def _message_age_seconds(timestamp: int, now: datetime | None) -> float:
    current = now or datetime.now(timezone.utc)
    return current.timestamp() - timestamp


def is_message_stale(
    timestamp: str,
    stale_minutes: int,
    now: datetime | None = None,
) -> bool:
    """Check whether a message is at least ``stale_minutes`` old.

    The boundary is inclusive. A timestamp that cannot be parsed counts as
    stale.
    """
    try:
        parsed = parse_timestamp(timestamp)
    except UnparseableTimestampError:
        return True
    return _message_age_seconds(parsed, now) >= stale_minutes * 60


def validate_message(
    message: ExtractedMessage,
    stale_minutes: int,
    now: datetime | None = None,
) -> ValidatedMessage:
    """Admit a message on its timestamp.

    Args:
        message: Message taken from the delivery
        stale_minutes: Age threshold in minutes
        now: Reference time (defaults to the current UTC time)

    Returns:
        The message body and sender, unchanged

    Raises:
        MissingTimestampError: Empty or ``-1`` timestamp
        UnparseableTimestampError: Timestamp is not an integer
        StaleMessageError: Message is at least ``stale_minutes`` old
    """
    timestamp = message.timestamp
    if timestamp == "" or timestamp == MISSING_TIMESTAMP_SENTINEL:
        raise MissingTimestampError("Failed to get last message timestamp")

    parsed = parse_timestamp(timestamp)
    if _message_age_seconds(parsed, now) >= stale_minutes * 60:
        raise StaleMessageError(
            f"Message is older than {stale_minutes} minute(s)"
        )

    return ValidatedMessage(body=message.body, sender=message.sender)
