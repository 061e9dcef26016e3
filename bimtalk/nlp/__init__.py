"""Chat intent detection — keyword rules mapping messages to viewer actions."""

from bimtalk.nlp.assistant import ChatAssistant, ChatResponse
from bimtalk.nlp.intent import (
    FilterIsolateIntent,
    Intent,
    MetadataRequestIntent,
    WallStatsIntent,
    classify_intent,
)
from bimtalk.nlp.properties import relevant_properties

__all__ = [
    "ChatAssistant",
    "ChatResponse",
    "FilterIsolateIntent",
    "Intent",
    "MetadataRequestIntent",
    "WallStatsIntent",
    "classify_intent",
    "relevant_properties",
]
