"""WhatsApp webhook endpoints.

This module handles the WhatsApp Cloud API webhook: the one-time
subscription handshake and the signed deliveries that follow.

Delivery handling (in order):
1. Signature verification - missing or mismatched signatures get a 403
2. Acknowledgment - the platform gets its 200 before any parsing
3. Admission - classification, extraction, validity and dispatch run as a
   background task whose failures are logged, never returned

The handlers focus on HTTP concerns, delegating admission to the
AdmissionPipeline service.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import PlainTextResponse
from starlette.requests import ClientDisconnect

from src.api.dependencies import get_admission_pipeline, get_app_settings
from src.config import Settings
from src.constants import (
    BODY_READ_ERROR_BODY,
    SIGNATURE_HEADER,
    SIGNATURE_MISMATCH_BODY,
    SIGNATURE_MISSING_BODY,
    VERIFY_TOKEN_MISMATCH_BODY,
    WEBHOOK_ACK_BODY,
)
from src.services.admission_pipeline import AdmissionPipeline
from src.services.signature import strip_signature_prefix, verify_signature

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def verify_webhook(
    request: Request,
    settings: Settings = Depends(get_app_settings),
):
    """WhatsApp webhook verification endpoint."""
    token = request.query_params.get("hub.verify_token")
    challenge = request.query_params.get("hub.challenge", "")

    if token == settings.whatsapp_verify_token:
        logger.info("Webhook verified.")
        return PlainTextResponse(challenge)

    logger.warning(VERIFY_TOKEN_MISMATCH_BODY)
    return PlainTextResponse(VERIFY_TOKEN_MISMATCH_BODY, status_code=403)


@router.post("")
async def handle_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_app_settings),
    pipeline: AdmissionPipeline = Depends(get_admission_pipeline),
):
    """Authenticate a WhatsApp delivery, acknowledge it and queue admission."""
    signature_header = request.headers.get(SIGNATURE_HEADER)
    if not strip_signature_prefix(signature_header):
        logger.warning(SIGNATURE_MISSING_BODY)
        return PlainTextResponse(SIGNATURE_MISSING_BODY, status_code=403)

    try:
        body = await request.body()
    except (ClientDisconnect, OSError) as e:
        logger.error("error reading request body: %s", e)
        return PlainTextResponse(BODY_READ_ERROR_BODY, status_code=500)

    if not verify_signature(body, settings.whatsapp_app_secret, signature_header):
        logger.warning(SIGNATURE_MISMATCH_BODY)
        return PlainTextResponse(SIGNATURE_MISMATCH_BODY, status_code=403)

    # Runs after the response below has been sent
    background_tasks.add_task(process_delivery, body, pipeline)
    return PlainTextResponse(WEBHOOK_ACK_BODY)


async def process_delivery(body: bytes, pipeline: AdmissionPipeline) -> None:
    """Run an acknowledged delivery through the admission pipeline.

    Args:
        body: Authenticated raw request body
        pipeline: Admission pipeline to run it through
    """
    try:
        outcome = await pipeline.process(body)
        logger.debug("Delivery admission finished: %s", outcome.value)
    except Exception as e:
        logger.error("Error processing delivery: %s", e, exc_info=True)
