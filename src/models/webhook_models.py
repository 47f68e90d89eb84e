"""WhatsApp Cloud API webhook models.

The platform delivers a nested envelope ``object -> entry[] -> changes[] ->
value``. ``value`` carries either ``statuses[]`` (delivery receipts) or
``contacts[]``/``messages[]`` (inbound chat). Each level has its own model so
that a shape mismatch surfaces as one validation error at parse time.

ref: https://developers.facebook.com/docs/whatsapp/cloud-api/webhooks/payload-examples
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# SHARED
# ============================================================================


class ValueMetadata(BaseModel):
    """Business phone number the delivery was addressed to."""

    display_phone_number: str = ""
    phone_number_id: str = ""


# ============================================================================
# MESSAGE SHAPE
# ============================================================================


class ContactProfile(BaseModel):
    name: str = ""


class Contact(BaseModel):
    """Sender contact card."""

    profile: ContactProfile = Field(default_factory=ContactProfile)
    wa_id: str = ""


class TextBody(BaseModel):
    body: str = ""


class InboundMessage(BaseModel):
    """A single inbound WhatsApp message."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(default="", alias="from")
    id: str = ""
    timestamp: str = ""
    text: TextBody = Field(default_factory=TextBody)
    type: str = ""


class MessageValue(BaseModel):
    messaging_product: str = ""
    metadata: ValueMetadata = Field(default_factory=ValueMetadata)
    contacts: list[Contact] = Field(default_factory=list)
    messages: list[InboundMessage] = Field(default_factory=list)


class MessageChange(BaseModel):
    value: MessageValue = Field(default_factory=MessageValue)
    field: str = ""


class MessageEntry(BaseModel):
    id: str = ""
    changes: list[MessageChange] = Field(default_factory=list)


class MessageWebhookRequest(BaseModel):
    """Full message-shape webhook delivery."""

    object: str = ""
    entry: list[MessageEntry] = Field(default_factory=list)


# ============================================================================
# STATUS SHAPE
# ============================================================================


class StatusOrigin(BaseModel):
    type: str = ""


class StatusConversation(BaseModel):
    id: str = ""
    expiration_timestamp: str = ""
    origin: StatusOrigin = Field(default_factory=StatusOrigin)


class StatusPricing(BaseModel):
    billable: bool = False
    pricing_model: str = ""
    category: str = ""


class DeliveryStatus(BaseModel):
    """Delivery receipt (sent, delivered, read, failed) for an outbound message."""

    id: str = ""
    status: str = ""
    timestamp: str = ""
    recipient_id: str = ""
    conversation: StatusConversation = Field(default_factory=StatusConversation)
    pricing: StatusPricing = Field(default_factory=StatusPricing)


class StatusValue(BaseModel):
    messaging_product: str = ""
    metadata: ValueMetadata = Field(default_factory=ValueMetadata)
    statuses: list[DeliveryStatus] = Field(default_factory=list)


class StatusChange(BaseModel):
    value: StatusValue = Field(default_factory=StatusValue)
    field: str = ""


class StatusEntry(BaseModel):
    id: str = ""
    changes: list[StatusChange] = Field(default_factory=list)


class StatusWebhookRequest(BaseModel):
    """Full status-shape webhook delivery."""

    object: str = ""
    entry: list[StatusEntry] = Field(default_factory=list)


# ============================================================================
# CLASSIFICATION PROBE
# ============================================================================


class ProbeValue(BaseModel):
    """Only the two arrays that tell the delivery shapes apart."""

    statuses: list[Any] = Field(default_factory=list)
    messages: list[Any] = Field(default_factory=list)


class ProbeChange(BaseModel):
    value: ProbeValue = Field(default_factory=ProbeValue)


class ProbeEntry(BaseModel):
    changes: list[ProbeChange] = Field(default_factory=list)


class PayloadProbe(BaseModel):
    """Tolerant partial view of a delivery used to classify it."""

    entry: list[ProbeEntry] = Field(default_factory=list)

    def has_statuses(self) -> bool:
        return any(
            change.value.statuses for entry in self.entry for change in entry.changes
        )

    def has_messages(self) -> bool:
        return any(
            change.value.messages for entry in self.entry for change in entry.changes
        )


# ============================================================================
# DERIVED VIEWS
# ============================================================================


class ExtractedMessage(BaseModel):
    """Most recent message of a delivery, body lowercased."""

    model_config = ConfigDict(frozen=True)

    sender: str
    body: str
    timestamp: str


class ValidatedMessage(BaseModel):
    """A message that passed the timestamp checks and may be dispatched."""

    model_config = ConfigDict(frozen=True)

    body: str
    sender: str
