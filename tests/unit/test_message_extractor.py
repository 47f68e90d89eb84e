"""Tests for message extraction."""

import json

import pytest

from src.models.webhook_models import ExtractedMessage, MessageWebhookRequest
from src.services.message_extractor import (
    AdmissionError,
    MalformedPayloadError,
    NoMessageInPayloadError,
    extract_last_message,
    extract_message,
    last_element,
    parse_message_request,
)
from tests.payloads import build_message_payload, build_text_message


def _encode(payload) -> bytes:
    return json.dumps(payload).encode("utf-8")


class TestLastElement:
    def test_returns_last(self):
        assert last_element([1, 2, 3], "numbers") == 3

    def test_empty_raises_named_error(self):
        with pytest.raises(NoMessageInPayloadError) as exc_info:
            last_element([], "messages")
        assert "messages" in str(exc_info.value)


class TestParseMessageRequest:
    def test_parses_nested_shape(self, message_payload_factory):
        request = parse_message_request(
            message_payload_factory(sender="27821234567", body="Hello", timestamp="1700000000")
        )
        assert isinstance(request, MessageWebhookRequest)
        assert request.object == "whatsapp_business_account"
        message = request.entry[0].changes[0].value.messages[0]
        assert message.from_ == "27821234567"
        assert message.text.body == "Hello"
        assert request.entry[0].changes[0].value.contacts[0].profile.name == "Thandi"

    def test_invalid_json_is_malformed(self):
        with pytest.raises(MalformedPayloadError):
            parse_message_request(b"{not json")

    def test_wrong_types_are_malformed(self):
        with pytest.raises(MalformedPayloadError):
            parse_message_request(_encode({"entry": [{"changes": "nope"}]}))

    def test_numeric_timestamp_is_malformed(self):
        payload = build_message_payload(
            [{"from": "1", "timestamp": 1700000000, "text": {"body": "x"}}]
        )
        with pytest.raises(MalformedPayloadError):
            parse_message_request(_encode(payload))

    def test_malformed_is_an_admission_error(self):
        assert issubclass(MalformedPayloadError, AdmissionError)
        assert issubclass(NoMessageInPayloadError, AdmissionError)


class TestExtractMessage:
    def test_extracts_sender_body_and_timestamp(self, message_payload_factory):
        extracted = extract_message(
            message_payload_factory(sender="27821234567", body="Hi", timestamp="1700000000")
        )
        assert extracted == ExtractedMessage(
            sender="27821234567", body="hi", timestamp="1700000000"
        )

    def test_body_is_lowercased(self, message_payload_factory):
        extracted = extract_message(message_payload_factory(body="MENU Please", timestamp="1"))
        assert extracted.body == "menu please"

    def test_picks_last_of_batched_messages(self):
        payload = build_message_payload(
            [
                build_text_message("111", "first", "1700000000", "wamid.1"),
                build_text_message("222", "Second", "1700000060", "wamid.2"),
            ]
        )
        extracted = extract_message(_encode(payload))
        assert extracted.sender == "222"
        assert extracted.body == "second"
        assert extracted.timestamp == "1700000060"

    def test_picks_last_entry_and_change(self):
        payload = {
            "object": "whatsapp_business_account",
            "entry": [
                {"changes": [{"value": {"messages": [build_text_message("1", "old", "5")]}}]},
                {
                    "changes": [
                        {"value": {"messages": [build_text_message("2", "mid", "6")]}},
                        {"value": {"messages": [build_text_message("3", "New", "7")]}},
                    ]
                },
            ],
        }
        extracted = extract_message(_encode(payload))
        assert (extracted.sender, extracted.body, extracted.timestamp) == ("3", "new", "7")

    def test_empty_messages_raises(self, message_payload_factory):
        with pytest.raises(NoMessageInPayloadError):
            extract_message(message_payload_factory(messages=[]))

    def test_empty_entries_raises(self):
        with pytest.raises(NoMessageInPayloadError):
            extract_message(_encode({"object": "whatsapp_business_account", "entry": []}))

    def test_missing_entry_key_raises(self):
        with pytest.raises(NoMessageInPayloadError):
            extract_message(b"{}")

    def test_empty_changes_raises(self):
        with pytest.raises(NoMessageInPayloadError):
            extract_message(_encode({"entry": [{"id": "e", "changes": []}]}))

    def test_last_change_without_messages_raises(self):
        # Messages only in an earlier change still count as "no message"
        payload = build_message_payload(
            [build_text_message("1", "hi", "1")], change_count=2
        )
        payload["entry"][0]["changes"].reverse()
        with pytest.raises(NoMessageInPayloadError):
            extract_message(_encode(payload))

    def test_non_text_message_has_empty_body(self):
        payload = build_message_payload(
            [{"from": "1", "id": "wamid.img", "timestamp": "9", "type": "image",
              "image": {"id": "media-1"}}]
        )
        extracted = extract_message(_encode(payload))
        assert extracted.body == ""

    def test_missing_timestamp_extracts_empty_string(self):
        payload = build_message_payload([{"from": "1", "text": {"body": "x"}}])
        assert extract_last_message(parse_message_request(_encode(payload))).timestamp == ""
