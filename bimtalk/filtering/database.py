"""PropertyDatabase — the per-model table of property bags keyed by element id.

The table is rebuilt in full every time a model is loaded; it is never
patched.  Each load gets a generation token from :meth:`begin_load`, and a
table is only accepted by :meth:`publish` if its token is still current,
so a slow fetch for a previous model cannot overwrite a newer one.

Readers either take a non-blocking :meth:`snapshot` (``None`` while not
ready) or block in :meth:`wait_until_ready` with a bounded timeout.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from bimtalk.config import DEFAULT_READY_TIMEOUT, Settings
from bimtalk.filtering.condition import Condition, PropertyBag, build_string_profile
from bimtalk.filtering.engine import filter_by_condition, normalize_category
from bimtalk.metadata.rows import is_wall_text
from bimtalk.models.element import ElementRecord, WallRow
from bimtalk.properties.keys import (
    PROPERTY_FIELDS,
    ROW_CATEGORY_KEYS,
    resolve_category,
    resolve_metadata_properties,
    resolve_name,
)
from bimtalk.properties.numeric import round_half_up
from bimtalk.properties.resolver import extract_thickness_from_text, resolve_string

logger = logging.getLogger(__name__)

NOT_READY_MESSAGE = "모델 속성 데이터가 아직 준비되지 않았습니다. 잠시 후 다시 시도해주세요."
NOT_LOADED_MESSAGE = "모델을 선택해 로드한 뒤 다시 시도해주세요."


class ReadinessTimeout(TimeoutError):
    """The property database was not ready within the allowed wait.

    The message is meant for the end user; the request can be retried.
    """

    retryable = True

    def __init__(self, message: str = NOT_READY_MESSAGE) -> None:
        super().__init__(message)
        self.user_message = message


class ModelNotLoadedError(ReadinessTimeout):
    """No model load is in progress, so waiting would never succeed."""

    def __init__(self, message: str = NOT_LOADED_MESSAGE) -> None:
        super().__init__(message)


class PropertyDatabase:
    """Single-writer cache of property bags for the currently loaded model.

    *ready_timeout* is the wait used by readers that do not pass their own.
    """

    def __init__(self, ready_timeout: float = DEFAULT_READY_TIMEOUT) -> None:
        self.ready_timeout = ready_timeout
        self._lock = threading.Lock()
        self._generation = 0
        self._ready = threading.Event()
        self._bags: Mapping[int, dict[str, Any]] | None = None
        self._loading = False

    @classmethod
    def from_settings(cls, settings: Settings) -> PropertyDatabase:
        return cls(ready_timeout=settings.ready_timeout)

    # -- lifecycle ----------------------------------------------------------

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def is_loading(self) -> bool:
        with self._lock:
            return self._loading

    @property
    def is_ready(self) -> bool:
        with self._lock:
            return self._bags is not None

    def begin_load(self) -> int:
        """Invalidate the current table and return the new generation token."""
        with self._lock:
            self._generation += 1
            self._bags = None
            self._loading = True
            previous, self._ready = self._ready, threading.Event()
            generation = self._generation
        # Wake waiters of the superseded generation so they fail fast
        previous.set()
        logger.debug("Property database load started (generation %d)", generation)
        return generation

    def publish(self, generation: int, bags: Mapping[Any, PropertyBag]) -> bool:
        """Install *bags* for *generation*.

        Returns *False* (and keeps the current state) if a newer load has
        started since *generation* was issued.
        """
        table = {int(db_id): dict(bag) for db_id, bag in bags.items() if bag}
        with self._lock:
            if generation != self._generation:
                logger.warning(
                    "Discarding stale property table (generation %d, current %d)",
                    generation,
                    self._generation,
                )
                return False
            self._bags = MappingProxyType(table)
            self._loading = False
            ready = self._ready
        ready.set()
        logger.info(
            "Property database ready: %d elements (generation %d)", len(table), generation
        )
        return True

    def load(self, bags: Mapping[Any, PropertyBag]) -> int:
        """Begin a load and publish *bags* in one step; returns the generation."""
        generation = self.begin_load()
        self.publish(generation, bags)
        return generation

    # -- reads ----------------------------------------------------------------

    def snapshot(self) -> Mapping[int, dict[str, Any]] | None:
        """The current table, or *None* while no table is ready."""
        with self._lock:
            return self._bags

    def wait_until_ready(self, timeout: float | None = None) -> Mapping[int, dict[str, Any]]:
        """Block until the table of the current load is published.

        *timeout* defaults to :attr:`ready_timeout`.

        Raises
        ------
        ModelNotLoadedError
            If there is no table and no load in progress.
        ReadinessTimeout
            If the table is not published within *timeout* seconds, or the
            awaited load is superseded by a newer one.
        """
        with self._lock:
            if self._bags is not None:
                return self._bags
            if not self._loading:
                raise ModelNotLoadedError()
            ready = self._ready
            generation = self._generation

        if not ready.wait(self.ready_timeout if timeout is None else timeout):
            raise ReadinessTimeout()

        with self._lock:
            if self._generation != generation or self._bags is None:
                raise ReadinessTimeout()
            return self._bags

    def properties_for(self, db_id: int | None) -> dict[str, Any] | None:
        if db_id is None:
            return None
        bags = self.snapshot()
        if bags is None:
            return None
        return bags.get(int(db_id))

    def properties_for_ids(self, db_ids: Iterable[int]) -> list[tuple[int, dict[str, Any]]]:
        bags = self.snapshot()
        if not bags:
            return []
        return [(int(i), bags[int(i)]) for i in db_ids if int(i) in bags]

    def filter(self, condition: Condition | Mapping[str, Any] | None) -> list[int]:
        """Ids passing *condition*; empty while the table is not ready."""
        bags = self.snapshot()
        if bags is None:
            logger.debug("Filter requested before property database was ready")
            return []
        return filter_by_condition(bags, condition)

    def categories(self) -> list[str]:
        """Sorted distinct values of the ``Category`` / ``카테고리`` properties."""
        bags = self.snapshot() or {}
        values = {
            str(props[key])
            for props in bags.values()
            for key in ROW_CATEGORY_KEYS
            if props.get(key) not in (None, "")
        }
        return sorted(values)

    def filter_by_category(self, category: str) -> list[int]:
        """Ids whose ``Category`` / ``카테고리`` value matches *category*.

        A value matches when it equals *category*, contains it
        case-insensitively, or when the normalised forms contain one another.
        Only the category properties are consulted, unlike the keyword
        clauses of :class:`Condition`.
        """
        bags = self.snapshot() or {}
        raw_search = str(category or "").lower()
        normalized_search = normalize_category(category)

        ids: list[int] = []
        for db_id, props in bags.items():
            for key in ROW_CATEGORY_KEYS:
                raw = props.get(key)
                if raw is None:
                    continue
                value = str(raw)
                if value == category or (raw_search and raw_search in value.lower()):
                    ids.append(db_id)
                    break
                actual = normalize_category(value)
                if normalized_search and actual and (
                    normalized_search in actual or actual in normalized_search
                ):
                    ids.append(db_id)
                    break
        logger.debug("Category %r matched %d elements", category, len(ids))
        return ids

    # -- derived rows ---------------------------------------------------------

    def build_wall_rows(self) -> list[WallRow]:
        """Wall rows with a known thickness (mm) and volume (m³).

        Thickness comes from the width/thickness properties (unit-converted)
        or, failing that, from the element's type or instance name.
        """
        bags = self.snapshot() or {}
        rows: list[WallRow] = []
        for db_id, props in bags.items():
            profile = build_string_profile(props)
            if not (
                is_wall_text(profile.category_text_lower)
                or is_wall_text(profile.searchable_text_lower)
            ):
                continue

            thickness_m = PROPERTY_FIELDS["thickness"].resolve(props)
            thickness_mm = thickness_m * 1000 if thickness_m is not None else None
            if thickness_mm is None:
                name_text = (
                    resolve_name(props)
                    or props.get("Type Name")
                    or props.get("유형 이름")
                )
                thickness_mm = extract_thickness_from_text(name_text)
            if thickness_mm is None:
                continue

            volume = PROPERTY_FIELDS["volume"].resolve(props)
            if volume is None:
                continue

            rows.append(
                WallRow(
                    id=db_id,
                    name=str(props.get("__name") or props.get("Name") or ""),
                    thickness_mm=round_half_up(thickness_mm),
                    volume_m3=volume,
                )
            )
        logger.debug("Prepared %d wall rows", len(rows))
        return rows

    def element_records(self) -> list[ElementRecord]:
        """One record per element; thickness in mm, height in metres."""
        bags = self.snapshot() or {}
        records: list[ElementRecord] = []
        for db_id, props in bags.items():
            thickness_m = PROPERTY_FIELDS["thickness"].resolve(props)
            records.append(
                ElementRecord(
                    id=db_id,
                    name=resolve_name(props) or None,
                    category=resolve_category(props),
                    level=PROPERTY_FIELDS["level"].resolve(props),
                    thickness=thickness_m * 1000 if thickness_m is not None else None,
                    height=PROPERTY_FIELDS["height"].resolve(props),
                    area=PROPERTY_FIELDS["area"].resolve(props),
                    volume=PROPERTY_FIELDS["volume"].resolve(props),
                    meta=props,
                )
            )
        return records

    def metadata_rows(
        self, properties: Iterable[str] | None = None, category: str | None = None
    ) -> list[dict[str, Any]]:
        """Export ``{id, name, category, meta}`` rows for the metadata summaries.

        The exported property names come from
        :func:`~bimtalk.properties.keys.resolve_metadata_properties`.  Property
        names are matched case-insensitively and the first spelling in the bag
        wins.  ``meta`` uses the ``key:value|key:value`` syntax read by
        :func:`~bimtalk.metadata.collection.collect_elements`.  Rows without
        any of the requested values are skipped.

        Parameters
        ----------
        properties:
            Names to export in addition to the always-included ones.
        category:
            When given, only elements whose ``Category`` value matches it
            after normalisation (in either direction) are exported.
        """
        names = resolve_metadata_properties(properties)
        wanted = normalize_category(category) if category else ""
        bags = self.snapshot() or {}

        rows: list[dict[str, Any]] = []
        for db_id, props in bags.items():
            category_value = resolve_string(props, ROW_CATEGORY_KEYS)
            if wanted:
                actual = normalize_category(category_value)
                if not actual or not (wanted in actual or actual in wanted):
                    continue

            by_lower: dict[str, Any] = {}
            for key, value in props.items():
                by_lower.setdefault(str(key).lower(), value)

            pairs = []
            for name in names:
                value = by_lower.get(name.lower())
                if value is None or str(value).strip() == "":
                    continue
                text = str(value).strip().replace("|", "/")
                pairs.append(f"{name}:{text}")
            if not pairs:
                continue

            rows.append(
                {
                    "id": db_id,
                    "name": resolve_name(props),
                    "category": category_value,
                    "meta": "|".join(pairs),
                }
            )
        logger.debug("Exported %d metadata rows (%d properties)", len(rows), len(names))
        return rows
