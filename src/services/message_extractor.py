"""Extract the most recent message from a message-shape delivery.

Entries, changes and messages are delivered oldest first; only the last
message of the last change of the last entry is answered.
"""

from collections.abc import Sequence
from typing import TypeVar

from pydantic import ValidationError

from src.models.webhook_models import ExtractedMessage, MessageWebhookRequest

T = TypeVar("T")


class AdmissionError(Exception):
    """Base exception for deliveries that are not admitted."""

    pass


class MalformedPayloadError(AdmissionError):
    """Raised when the body does not match the message-shape envelope."""

    pass


class NoMessageInPayloadError(AdmissionError):
    """Raised when entries, changes or messages is empty."""

    pass


def parse_message_request(body: bytes) -> MessageWebhookRequest:
    """Parse a raw body into the message-shape envelope.

    Raises:
        MalformedPayloadError: Invalid JSON or a structure that does not fit
    """
    try:
        return MessageWebhookRequest.model_validate_json(body)
    except ValidationError as e:
        raise MalformedPayloadError(
            f"Invalid payload structure: {e.error_count()} error(s)"
        ) from e


def last_element(sequence: Sequence[T], name: str) -> T:
    """Return the last item of ``sequence``.

    Raises:
        NoMessageInPayloadError: If the sequence is empty
    """
    if not sequence:
        raise NoMessageInPayloadError(f"No {name} in payload")
    return sequence[-1]


def extract_last_message(request: MessageWebhookRequest) -> ExtractedMessage:
    """Pick the latest message and normalize its body to lowercase."""
    entry = last_element(request.entry, "entries")
    change = last_element(entry.changes, "changes")
    message = last_element(change.value.messages, "messages")

    return ExtractedMessage(
        sender=message.from_,
        body=message.text.body.lower(),
        timestamp=message.timestamp,
    )


def extract_message(body: bytes) -> ExtractedMessage:
    """Parse ``body`` and extract its latest message."""
    return extract_last_message(parse_message_request(body))
