"""Forward admitted messages to the conversation engine.

Messages sent from the bot's own number are loopback deliveries of its own
replies; forwarding them would make the bot answer itself.
"""

from enum import Enum
from typing import Any

import logfire

from src.logging_config import mask_pii
from src.models.conversation_models import CheckoutInfo
from src.models.webhook_models import ValidatedMessage
from src.services.conversation_engine import ConversationEngine


class DispatchOutcome(str, Enum):
    SELF_ECHO = "self_echo"
    FORWARDED = "forwarded"


class DispatchGate:
    """Decide whether a validated message reaches the conversation engine.

    Example:
        >>> gate = DispatchGate("27820000000", engine, db, checkout)
        >>> await gate.dispatch(ValidatedMessage(body="hi", sender="27821234567"))
        <DispatchOutcome.FORWARDED: 'forwarded'>
    """

    def __init__(
        self,
        host_number: str,
        engine: ConversationEngine,
        database: Any,
        checkout: CheckoutInfo,
        auto_increment: bool = False,
    ):
        self._host_number = host_number
        self._engine = engine
        self._database = database
        self._checkout = checkout
        self._auto_increment = auto_increment

    def is_self_echo(self, sender: str) -> bool:
        return sender == self._host_number

    async def dispatch(self, message: ValidatedMessage) -> DispatchOutcome:
        """Hand ``message`` to the engine unless it came from the bot itself.

        Engine errors propagate to the caller.
        """
        if self.is_self_echo(message.sender):
            logfire.info(
                "Ignoring message sent from host number",
                message_length=len(message.body),
            )
            return DispatchOutcome.SELF_ECHO

        context = await self._engine.new_conversation_context(
            self._database,
            message.sender,
            message.body,
            self._auto_increment,
        )
        await self._engine.chat_begin(
            context,
            self._database,
            self._checkout,
            self._auto_increment,
        )
        logfire.info(
            "Message dispatched to conversation engine",
            sender=mask_pii(message.sender),
        )
        return DispatchOutcome.FORWARDED
