"""Message admission pipeline.

Runs after the webhook has verified the signature and acknowledged the
delivery. Each stage either narrows the delivery down or rejects it:

1. Classification - status updates are dropped
2. Extraction - the latest message is pulled out of the envelope
3. Validity - missing, unparseable and stale timestamps are rejected
4. Dispatch - self-echoes are dropped, everything else reaches the engine

Every rejection is logged and terminal. The platform has already received
its 200, so nothing is raised back to the HTTP layer and nothing is retried.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Callable

import logfire
import sentry_sdk

from src.config import Settings
from src.services.conversation_engine import ConversationEngine
from src.services.dispatch_gate import DispatchGate, DispatchOutcome
from src.services.message_extractor import (
    MalformedPayloadError,
    NoMessageInPayloadError,
    extract_message,
)
from src.services.message_validator import MessageValidityError, validate_message
from src.services.payload_classifier import PayloadKind, classify_payload

logger = logging.getLogger(__name__)


class AdmissionOutcome(str, Enum):
    STATUS_UPDATE = "status_update"
    MALFORMED = "malformed"
    NO_MESSAGE = "no_message"
    INVALID = "invalid"
    SELF_ECHO = "self_echo"
    DISPATCHED = "dispatched"
    ENGINE_FAILED = "engine_failed"


class AdmissionPipeline:
    """Take an authenticated delivery body through admission and dispatch.

    Example:
        >>> pipeline = AdmissionPipeline(gate, stale_minutes=10)
        >>> await pipeline.process(body)
        <AdmissionOutcome.DISPATCHED: 'dispatched'>
    """

    def __init__(
        self,
        gate: DispatchGate,
        stale_minutes: int,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the pipeline.

        Args:
            gate: Dispatch gate wrapping the conversation engine
            stale_minutes: Staleness threshold in minutes
            clock: Optional callable returning "now" (for testing)
        """
        self._gate = gate
        self._stale_minutes = stale_minutes
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        engine: ConversationEngine,
        database: object,
    ) -> AdmissionPipeline:
        gate = DispatchGate(
            host_number=settings.host_number,
            engine=engine,
            database=database,
            checkout=settings.checkout_info(),
            auto_increment=settings.auto_increment_ids,
        )
        return cls(gate, stale_minutes=settings.stale_message_minutes)

    async def process(self, body: bytes) -> AdmissionOutcome:
        """Run ``body`` through every stage and report where it stopped."""
        if classify_payload(body) is PayloadKind.STATUS_UPDATE:
            logfire.info("Status updates unhandled at this time")
            return AdmissionOutcome.STATUS_UPDATE

        try:
            extracted = extract_message(body)
        except MalformedPayloadError as e:
            logger.warning("Error parsing webhook payload: %s", e)
            return AdmissionOutcome.MALFORMED
        except NoMessageInPayloadError as e:
            logger.warning("Webhook payload has nothing to answer: %s", e)
            return AdmissionOutcome.NO_MESSAGE

        now = self._clock() if self._clock else None
        try:
            validated = validate_message(extracted, self._stale_minutes, now=now)
        except MessageValidityError as e:
            logfire.info(
                "Message was invalid",
                reason=type(e).__name__,
                detail=str(e),
            )
            return AdmissionOutcome.INVALID

        try:
            outcome = await self._gate.dispatch(validated)
        except Exception as e:
            logger.error("Conversation engine failed: %s", e, exc_info=True)
            sentry_sdk.capture_exception(e)
            return AdmissionOutcome.ENGINE_FAILED

        if outcome is DispatchOutcome.SELF_ECHO:
            return AdmissionOutcome.SELF_ECHO
        return AdmissionOutcome.DISPATCHED
