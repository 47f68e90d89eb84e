"""Classify an authenticated delivery as a status update or a message.

Status updates and messages use different nested shapes, so the delivery is
probed with a tolerant partial model before anything tries to parse it into
the message shape.
"""

from enum import Enum

import logfire
from pydantic import ValidationError

from src.models.webhook_models import PayloadProbe


class PayloadKind(str, Enum):
    STATUS_UPDATE = "status_update"
    MESSAGE = "message"


def classify_payload(body: bytes) -> PayloadKind:
    """Decide whether ``body`` is a status update or a message delivery.

    A delivery carrying any non-empty ``statuses`` array is a status update.
    Anything the probe cannot read is reported as a message so that the
    extractor surfaces it as a malformed payload.
    """
    try:
        probe = PayloadProbe.model_validate_json(body)
    except ValidationError:
        return PayloadKind.MESSAGE

    if probe.has_statuses():
        if probe.has_messages():
            logfire.warn("Delivery carries both statuses and messages, treating as status update")
        return PayloadKind.STATUS_UPDATE
    return PayloadKind.MESSAGE
