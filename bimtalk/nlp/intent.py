"""Intent classification — turn a chat message into a viewer action.

Classification is an ordered cascade of rules.  Each rule is a pure
predicate over the lower-cased message plus a builder for its action; the
first rule whose predicate holds wins and no later rule is consulted.

Rule order:

1. ``wall_stats``     wall + thickness + volume + table keywords
2. ``wall_isolate``   wall + show + "only" keywords (optional height filter)
3. ``bim_metadata``   wall + table or quantity keywords
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, Field

from bimtalk.config import WALL_CATEGORY
from bimtalk.nlp.keywords import (
    CHART_KEYWORDS,
    DEFAULT_METADATA_PROPERTIES,
    HIDE_KEYWORDS,
    ONLY_KEYWORDS,
    QUANTITY_KEYWORDS,
    SHOW_KEYWORDS,
    TABLE_KEYWORDS,
    THICKNESS_GROUP_KEYWORDS,
    THICKNESS_KEYWORDS,
    VOLUME_KEYWORDS,
    WALL_KEYWORDS,
)
from bimtalk.nlp.properties import MIN_SPECIFIC_PROPERTIES, relevant_properties

logger = logging.getLogger(__name__)

# "7m", "7.5 m", "3000mm"; mm is tried before m
_HEIGHT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(mm|m)(?![a-z])", re.I)


# ---------------------------------------------------------------------------
# Intent models
# ---------------------------------------------------------------------------


class HeightFilter(BaseModel):
    """Keep only elements taller than ``value_mm``."""

    field: str = "Height"
    op: str = ">"
    value_mm: float


class Intent(BaseModel):
    """Base class of every structured chat intent."""

    reply: ClassVar[str] = ""

    action: str
    category: str = WALL_CATEGORY

    def to_action(self) -> dict[str, Any]:
        """Serialise to the action object sent to the viewer."""
        return self.model_dump(exclude_none=True)


class FilterIsolateIntent(Intent):
    """Isolate walls in the viewer, optionally above a height."""

    reply: ClassVar[str] = "요청하신 벽체만 추출하여 화면에 표시했습니다."

    action: Literal["filter"] = "filter"
    mode: Literal["isolate"] = "isolate"
    filters: list[HeightFilter] | None = None


class WallStatsIntent(Intent):
    """Tabulate wall thickness against summed volume."""

    reply: ClassVar[str] = "벽체 두께와 체적을 계산해 표로 정리합니다."

    action: Literal["calculate_wall_stats"] = "calculate_wall_stats"


class MetadataRequestIntent(Intent):
    """Ask the viewer for element metadata, optionally grouped by thickness."""

    reply: ClassVar[str] = "모델 정보를 확인하고 있습니다..."

    action: Literal["request_metadata", "calculate_wall_stats"] = "request_metadata"
    properties: list[str] = Field(default_factory=list)
    mode: Literal["hide", "isolate"] = "isolate"
    group_by: str | None = None
    view: Literal["chart", "table"] | None = None


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Message:
    """A chat message with its lower-cased form for keyword matching."""

    original: str
    lowered: str

    @classmethod
    def of(cls, text: str) -> Message:
        return cls(original=text, lowered=text.lower())

    def has_any(self, keywords: Sequence[str]) -> bool:
        return any(kw in self.lowered for kw in keywords)


@dataclass(frozen=True)
class IntentRule:
    """A named predicate and the builder for the intent it detects."""

    name: str
    matches: Callable[[Message], bool]
    build: Callable[[Message], Intent]


def _wants_wall_stats(msg: Message) -> bool:
    return (
        msg.has_any(WALL_KEYWORDS)
        and msg.has_any(THICKNESS_KEYWORDS)
        and msg.has_any(VOLUME_KEYWORDS)
        and msg.has_any(TABLE_KEYWORDS)
    )


def _build_wall_stats(msg: Message) -> Intent:
    return WallStatsIntent()


def _wants_wall_isolation(msg: Message) -> bool:
    return (
        msg.has_any(WALL_KEYWORDS)
        and msg.has_any(SHOW_KEYWORDS)
        and msg.has_any(ONLY_KEYWORDS)
    )


def extract_height_filter(text: str) -> HeightFilter | None:
    """Read a ``<number>m`` / ``<number>mm`` height threshold, in mm."""
    m = _HEIGHT_RE.search(text)
    if not m:
        return None
    value = float(m.group(1))
    if m.group(2).lower() == "m":
        value *= 1000
    return HeightFilter(value_mm=value)


def _build_wall_isolation(msg: Message) -> Intent:
    height = extract_height_filter(msg.original)
    return FilterIsolateIntent(filters=[height] if height else None)


def _wants_metadata(msg: Message) -> bool:
    return msg.has_any(WALL_KEYWORDS) and (
        msg.has_any(TABLE_KEYWORDS) or msg.has_any(QUANTITY_KEYWORDS)
    )


def _build_metadata_request(msg: Message) -> Intent:
    props = relevant_properties(msg.original)
    if len(props) <= MIN_SPECIFIC_PROPERTIES:
        props = list(DEFAULT_METADATA_PROPERTIES)
    mode = "hide" if msg.has_any(HIDE_KEYWORDS) else "isolate"

    if msg.has_any(THICKNESS_GROUP_KEYWORDS):
        return MetadataRequestIntent(
            action="calculate_wall_stats",
            properties=props,
            mode=mode,
            group_by="Thickness",
            view="chart" if msg.has_any(CHART_KEYWORDS) else "table",
        )
    return MetadataRequestIntent(properties=props, mode=mode)


INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule("wall_stats", _wants_wall_stats, _build_wall_stats),
    IntentRule("wall_isolate", _wants_wall_isolation, _build_wall_isolation),
    IntentRule("bim_metadata", _wants_metadata, _build_metadata_request),
)


def classify_intent(
    message: str,
    rules: Sequence[IntentRule] = INTENT_RULES,
) -> Intent | None:
    """Return the intent of the first matching rule, or *None*."""
    if not message or not message.strip():
        return None
    msg = Message.of(message)
    for rule in rules:
        if rule.matches(msg):
            logger.debug("Intent rule %r matched: %s", rule.name, message[:80])
            return rule.build(msg)
    return None
