"""Conversation engine abstraction.

The chat engine that answers admitted messages lives outside this service.
This module defines the Protocol it must satisfy and loads the configured
implementation, allowing the webhook to:
- Run against any engine without importing it directly
- Be tested with a mock engine instead of a real chat backend
"""

from importlib import import_module
from typing import Any, Protocol

from src.models.conversation_models import CheckoutInfo, ConversationContext


class ConversationEngineLoadError(Exception):
    """Raised when the configured conversation engine cannot be loaded."""

    pass


class ConversationEngine(Protocol):
    """Protocol for the downstream conversation engine."""

    async def new_conversation_context(
        self,
        database: Any,
        sender: str,
        message_body: str,
        auto_increment: bool,
    ) -> ConversationContext:
        """Create the conversation context for one inbound message.

        Args:
            database: Opaque database handle owned by the application
            sender: Sender's WhatsApp number
            message_body: Lowercased message text
            auto_increment: Whether the store uses auto-incrementing ids
        """
        ...

    async def chat_begin(
        self,
        context: ConversationContext,
        database: Any,
        checkout: CheckoutInfo,
        auto_increment: bool,
    ) -> None:
        """Run the conversation for ``context`` and reply to the sender."""
        ...


def load_conversation_engine(import_path: str | None) -> ConversationEngine:
    """Instantiate the engine named by ``module.path:factory``.

    The factory is called without arguments and must return an object
    implementing :class:`ConversationEngine`.

    Raises:
        ConversationEngineLoadError: Path missing, malformed or not importable
    """
    if not import_path:
        raise ConversationEngineLoadError(
            "CONVERSATION_ENGINE is not configured (expected 'module.path:factory')"
        )

    module_name, sep, attribute = import_path.partition(":")
    if not sep or not module_name or not attribute:
        raise ConversationEngineLoadError(
            f"Invalid conversation engine path {import_path!r}, expected 'module.path:factory'"
        )

    try:
        factory = getattr(import_module(module_name), attribute)
    except (ImportError, AttributeError) as e:
        raise ConversationEngineLoadError(
            f"Cannot load conversation engine {import_path!r}: {e}"
        ) from e

    return factory()
