"""Models exchanged with the conversation engine."""

from pydantic import BaseModel, ConfigDict


class CheckoutInfo(BaseModel):
    """Payment checkout configuration passed through to the conversation engine."""

    model_config = ConfigDict(frozen=True)

    return_url: str
    cancel_url: str
    notify_url: str
    merchant_id: str
    merchant_key: str
    passphrase: str
    host_url: str
    item_name_prefix: str


class ConversationContext(BaseModel):
    """Per-sender conversation state created for a single inbound message."""

    sender: str
    message_body: str
    auto_increment: bool = False
