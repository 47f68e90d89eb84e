"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Configuration: test_settings
2. Collaborators: mock_conversation_engine, mock_database
3. Payloads: message_payload_factory, status_payload, fixed_now
4. HTTP: test_app, test_client, sign_body
"""

import json
import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models.conversation_models import ConversationContext
from src.services.signature import compute_body_signature
from tests.payloads import (
    TEST_APP_SECRET,
    TEST_HOST_NUMBER,
    TEST_SENDER,
    TEST_VERIFY_TOKEN,
    build_message_payload,
    build_text_message,
)

# Logfire stays local unless a token is configured
os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def test_settings():
    """Settings with known secrets and a 10 minute staleness threshold."""
    from src.config import Settings

    return Settings(
        whatsapp_verify_token=TEST_VERIFY_TOKEN,
        whatsapp_app_secret=TEST_APP_SECRET,
        host_number=TEST_HOST_NUMBER,
        stale_message_minutes=10,
        supabase_url="https://test.supabase.co",
        supabase_service_key="test-service-key",
        homebase_url="https://bot.example.com",
        merchant_id="merchant-1",
        merchant_key="merchant-key",
        passphrase="passphrase",
        payment_host="https://sandbox.payfast.example",
        env="local",
        logfire_token=None,
        sentry_dsn=None,
    )


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture
def mock_conversation_engine():
    """Mock conversation engine recording every dispatched message.

    new_conversation_context() builds a real ConversationContext so tests can
    assert on what chat_begin() received.
    """
    engine = MagicMock()
    engine.new_conversation_context = AsyncMock(
        side_effect=lambda database, sender, body, auto_increment: ConversationContext(
            sender=sender,
            message_body=body,
            auto_increment=auto_increment,
        )
    )
    engine.chat_begin = AsyncMock(return_value=None)
    return engine


@pytest.fixture
def mock_database():
    """Opaque database handle; the pipeline only passes it through."""
    return MagicMock(name="database")


# =============================================================================
# Payloads
# =============================================================================


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def message_payload_factory():
    """Build message-shape deliveries as bytes."""

    def _factory(sender=TEST_SENDER, body="Hi", timestamp="0", messages=None):
        if messages is None:
            messages = [build_text_message(sender, body, timestamp)]
        payload = build_message_payload(messages)
        return json.dumps(payload, ensure_ascii=False).encode("utf-8")

    return _factory


@pytest.fixture
def status_payload():
    """Status-shape delivery (delivery receipt for an outbound message)."""
    payload = {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "id": "entry-1",
                "changes": [
                    {
                        "value": {
                            "messaging_product": "whatsapp",
                            "metadata": {
                                "display_phone_number": TEST_HOST_NUMBER,
                                "phone_number_id": "phone-id-1",
                            },
                            "statuses": [
                                {
                                    "id": "wamid.out.1",
                                    "status": "delivered",
                                    "timestamp": "1700000000",
                                    "recipient_id": TEST_SENDER,
                                    "conversation": {
                                        "id": "conv-1",
                                        "expiration_timestamp": "1700086400",
                                        "origin": {"type": "service"},
                                    },
                                    "pricing": {
                                        "billable": True,
                                        "pricing_model": "CBP",
                                        "category": "service",
                                    },
                                }
                            ],
                        },
                        "field": "messages",
                    }
                ],
            }
        ],
    }
    return json.dumps(payload).encode("utf-8")


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture
def sign_body():
    """Return the X-Hub-Signature-256 header value for a body."""

    def _sign(body: bytes, secret: str = TEST_APP_SECRET) -> str:
        return "sha256=" + compute_body_signature(body, secret)

    return _sign


@pytest.fixture
def test_app(test_settings, mock_conversation_engine, mock_database):
    """Application wired with test settings and the mock engine."""
    from src.main import create_app

    return create_app(
        settings=test_settings,
        conversation_engine=mock_conversation_engine,
        database=mock_database,
    )


@pytest.fixture
def test_client(test_app):
    """FastAPI TestClient for E2E tests (lifespan not started)."""
    from fastapi.testclient import TestClient

    return TestClient(test_app)
