"""ChatAssistant — answer a chat message with a reply and an optional action.

Usage::

    from bimtalk.nlp import ChatAssistant

    assistant = ChatAssistant()
    response = assistant.respond("벽체만 보여줘")
    response.action  # {"action": "filter", "category": "Revit 벽", "mode": "isolate"}
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field

from bimtalk.nlp.intent import INTENT_RULES, Intent, IntentRule, classify_intent

logger = logging.getLogger(__name__)

GREETING = "무엇을 도와드릴까요?"


class ChatResponse(BaseModel):
    """Payload returned for one chat message."""

    reply: str
    action: dict[str, Any] | None = None
    sources: list[str] = Field(default_factory=list)
    thread_id: str


def new_thread_id() -> str:
    return f"thread_{int(time.time() * 1000)}"


class ChatAssistant:
    """Keyword-driven chat responder.

    Parameters
    ----------
    rules:
        Ordered intent rules.  Defaults to :data:`INTENT_RULES`.
    """

    def __init__(self, rules: Sequence[IntentRule] = INTENT_RULES) -> None:
        self._rules = tuple(rules)

    def classify(self, message: str) -> Intent | None:
        return classify_intent(message, self._rules)

    def respond(self, message: str, thread_id: str | None = None) -> ChatResponse:
        """Classify *message* and build the chat response.

        Without a recognised intent the message is echoed back (or a
        greeting is returned for an empty message) and ``action`` is *None*.
        """
        message = (message or "").strip()
        thread_id = thread_id or new_thread_id()

        intent = self.classify(message)
        if intent is None:
            return ChatResponse(reply=message or GREETING, thread_id=thread_id)

        logger.info("Chat intent %s for thread %s", intent.action, thread_id)
        return ChatResponse(reply=intent.reply, action=intent.to_action(), thread_id=thread_id)
