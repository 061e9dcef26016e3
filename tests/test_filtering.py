"""Tests for condition filtering, the property database and filter presets."""

from __future__ import annotations

import threading
import time

import pytest

from bimtalk.config import Settings
from bimtalk.filtering import (
    Condition,
    ModelNotLoadedError,
    PropertyDatabase,
    ReadinessTimeout,
    apply_ai_filter,
    condition_from_ai_filter,
    condition_from_intent,
    filter_by_condition,
    passes_condition,
    run_filter_preset,
    wall_thickness_summary,
)
from bimtalk.filtering.engine import normalize_category
from bimtalk.filtering.presets import AI_FILTER_LABEL
from bimtalk.metadata import collect_elements, summarize_by_category
from bimtalk.nlp.intent import FilterIsolateIntent, HeightFilter


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def bags() -> dict[int, dict]:
    return {
        1: {"Category": "Revit 벽", "__name": "기본 벽 T200", "Volume": "2.5", "Level": "1F"},
        2: {"Category": "Walls", "Name": "W2", "Width": "150", "Volume": 1.0, "Height": "3000"},
        3: {"Category": "Doors", "Name": "D1", "Volume": 1, "Material": "Wood"},
        4: {"Category": "Revit 벽", "Name": "no volume", "Width": 200},
    }


@pytest.fixture
def db(bags: dict[int, dict]) -> PropertyDatabase:
    database = PropertyDatabase()
    database.load(bags)
    return database


# ---------------------------------------------------------------------------
# Condition model
# ---------------------------------------------------------------------------


class TestCondition:
    def test_camel_case_keys(self) -> None:
        cond = Condition.model_validate({"minVolume": 10, "includeKeywords": "exterior"})
        assert cond.min_volume == 10
        assert cond.include_keywords == ["exterior"]

    def test_snake_case_keys(self) -> None:
        cond = Condition(category_keywords=["벽", None, " "])
        assert cond.category_keywords == ["벽"]

    def test_all_category_keywords(self) -> None:
        cond = Condition(category="Walls", category_keywords=["벽"])
        assert cond.all_category_keywords == ["Walls", "벽"]


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


class TestPassesCondition:
    def test_no_condition_passes(self) -> None:
        assert passes_condition({"Category": "Walls"}, None)

    def test_missing_value_is_permissive(self) -> None:
        assert passes_condition({"Category": "Walls"}, {"minVolume": 10})

    def test_range_excludes_known_value(self) -> None:
        assert not passes_condition({"Volume": 5}, {"minVolume": 10})
        assert not passes_condition({"Volume": 50}, {"maxVolume": 10})
        assert passes_condition({"Volume": 5}, {"minVolume": 1, "maxVolume": 10})

    def test_leading_zero_decimal_comma(self) -> None:
        bag = {"Volume": "0,125"}
        assert passes_condition(bag, {"maxVolume": 1})
        assert not passes_condition(bag, {"minVolume": 1})

    def test_height_range_in_metres(self) -> None:
        bag = {"Height": "3000"}
        assert passes_condition(bag, {"minHeight": 2.5})
        assert not passes_condition(bag, {"minHeight": 4})
        assert passes_condition({"Height": "7 m"}, {"minHeight": 6})

    def test_category_substring(self) -> None:
        bag = {"Category": "Revit 벽", "Name": "기본 벽"}
        assert passes_condition(bag, {"category": "벽"})
        assert not passes_condition(bag, {"category": "door"})

    def test_category_needs_category_text(self) -> None:
        assert not passes_condition({"Name": "Wall"}, {"category": "wall"})

    def test_category_normalised_both_ways(self) -> None:
        assert passes_condition({"Category": "벽"}, {"categoryKeywords": ["Revit 벽체"]})

    def test_include_and_exclude(self) -> None:
        bag = {"Name": "Basic Wall - Exterior 200", "Category": "Walls"}
        assert passes_condition(bag, {"includeKeywords": ["exterior", "200"]})
        assert not passes_condition(bag, {"includeKeywords": ["exterior", "interior"]})
        assert not passes_condition(bag, {"excludeKeywords": ["EXTERIOR"]})

    def test_level(self) -> None:
        assert passes_condition({"Level": "1F"}, {"level": ["1f"]})
        assert not passes_condition({"Level": "1F"}, {"level": ["2F"]})
        assert not passes_condition({}, {"level": ["1F"]})

    def test_material(self) -> None:
        assert passes_condition({"구조 재료": "콘크리트"}, {"material": "콘크리트"})
        assert not passes_condition({"Material": "Wood"}, {"material": "steel"})

    def test_custom_predicate_runs_last(self) -> None:
        cond = Condition(custom_predicate=lambda bag, profile: "wall" in profile.searchable_text_lower)
        assert passes_condition({"Name": "Wall A"}, cond)
        assert not passes_condition({"Name": "Door A"}, cond)

    def test_normalize_category(self) -> None:
        assert normalize_category("Revit Wall Category") == "wall"
        assert normalize_category(None) == ""


class TestFilterByCondition:
    def test_returns_int_ids(self, bags: dict[int, dict]) -> None:
        str_keyed = {str(k): v for k, v in bags.items()}
        assert filter_by_condition(str_keyed, {"category": "door"}) == [3]

    def test_empty_bags_skipped(self) -> None:
        assert filter_by_condition({1: {}, 2: {"Category": "Walls"}}, None) == [2]


# ---------------------------------------------------------------------------
# Property database
# ---------------------------------------------------------------------------


class TestPropertyDatabase:
    def test_not_ready(self) -> None:
        db = PropertyDatabase()
        assert db.snapshot() is None
        assert db.filter({"category": "wall"}) == []
        assert db.properties_for(1) is None

    def test_wait_without_load(self) -> None:
        with pytest.raises(ModelNotLoadedError):
            PropertyDatabase().wait_until_ready(0.01)

    def test_wait_times_out_while_loading(self) -> None:
        db = PropertyDatabase()
        db.begin_load()
        with pytest.raises(ReadinessTimeout) as exc:
            db.wait_until_ready(0.01)
        assert type(exc.value) is ReadinessTimeout
        assert exc.value.retryable is True
        assert "잠시 후" in exc.value.user_message

    def test_wait_sees_later_publish(self, bags: dict[int, dict]) -> None:
        db = PropertyDatabase()
        generation = db.begin_load()
        timer = threading.Timer(0.05, db.publish, args=(generation, bags))
        timer.start()
        try:
            table = db.wait_until_ready(2.0)
        finally:
            timer.join()
        assert set(table) == {1, 2, 3, 4}

    def test_new_load_wakes_waiter(self) -> None:
        db = PropertyDatabase()
        db.begin_load()
        started = threading.Event()
        errors: list[Exception] = []

        def wait() -> None:
            started.set()
            try:
                db.wait_until_ready(5.0)
            except ReadinessTimeout as exc:
                errors.append(exc)

        waiter = threading.Thread(target=wait)
        waiter.start()
        started.wait(1.0)
        time.sleep(0.05)
        db.begin_load()
        waiter.join(2.0)

        assert not waiter.is_alive()
        assert len(errors) == 1
        assert type(errors[0]) is ReadinessTimeout

    def test_ready_timeout_default(self) -> None:
        db = PropertyDatabase(ready_timeout=0.01)
        db.begin_load()
        with pytest.raises(ReadinessTimeout):
            db.wait_until_ready()

    def test_from_settings(self) -> None:
        db = PropertyDatabase.from_settings(Settings(ready_timeout=0.5))
        assert db.ready_timeout == 0.5

    def test_stale_generation_discarded(self, bags: dict[int, dict]) -> None:
        db = PropertyDatabase()
        first = db.begin_load()
        second = db.begin_load()
        assert db.publish(first, bags) is False
        assert db.snapshot() is None
        assert db.publish(second, {9: {"Category": "Walls"}}) is True
        assert list(db.snapshot()) == [9]

    def test_new_load_invalidates_table(self, db: PropertyDatabase) -> None:
        assert db.is_ready
        db.begin_load()
        assert db.snapshot() is None
        assert db.is_loading

    def test_lookups(self, db: PropertyDatabase) -> None:
        assert db.properties_for(3)["Name"] == "D1"
        assert db.properties_for(99) is None
        assert [i for i, _ in db.properties_for_ids([3, 99, 1])] == [3, 1]

    def test_filter(self, db: PropertyDatabase) -> None:
        assert db.filter({"material": "wood"}) == [3]

    def test_build_wall_rows(self, db: PropertyDatabase) -> None:
        rows = db.build_wall_rows()
        assert [(r.id, r.thickness_mm, r.volume_m3) for r in rows] == [
            (1, 200, 2.5),
            (2, 150, 1.0),
        ]
        assert rows[0].name == "기본 벽 T200"

    def test_element_records(self, db: PropertyDatabase) -> None:
        records = {r.id: r for r in db.element_records()}
        assert records[2].category == "Walls"
        assert records[2].name == "W2"
        assert records[2].thickness == pytest.approx(150.0)
        assert records[2].height == pytest.approx(3.0)
        assert records[1].level == "1F"
        assert records[3].thickness is None

    def test_categories(self, db: PropertyDatabase) -> None:
        assert db.categories() == ["Doors", "Revit 벽", "Walls"]
        assert PropertyDatabase().categories() == []

    def test_filter_by_category(self, db: PropertyDatabase) -> None:
        assert db.filter_by_category("Walls") == [2]
        assert db.filter_by_category("벽") == [1, 4]
        assert db.filter_by_category("door") == [3]
        assert db.filter_by_category("Revit Wall Category") == [2]

    def test_filter_by_category_reads_korean_key(self) -> None:
        db = PropertyDatabase()
        db.load({5: {"카테고리": "구조 기둥"}, 6: {"Family": "기둥"}})
        assert db.filter_by_category("기둥") == [5]


class TestMetadataRows:
    def test_rows_feed_collection(self, db: PropertyDatabase) -> None:
        rows = db.metadata_rows(["Volume"])
        assert [r["id"] for r in rows] == [1, 2, 3, 4]
        assert rows[0] == {
            "id": 1,
            "name": "기본 벽 T200",
            "category": "Revit 벽",
            "meta": "Category:Revit 벽|Level:1F|Volume:2.5",
        }
        assert rows[1]["meta"] == "Category:Walls|Height:3000|Width:150|Volume:1.0"

        groups = summarize_by_category(collect_elements(rows))
        assert [(g.category, g.count) for g in groups] == [
            ("Revit 벽", 2),
            ("Walls", 1),
            ("Doors", 1),
        ]
        assert groups[0].volume == 2.5

    def test_category_filter(self, db: PropertyDatabase) -> None:
        assert [r["id"] for r in db.metadata_rows(category="벽")] == [1, 4]
        assert [r["id"] for r in db.metadata_rows(category="wall")] == [2]

    def test_keys_match_ignoring_case(self) -> None:
        db = PropertyDatabase()
        db.load({5: {"category": "Doors", "VOLUME": "3"}})
        rows = db.metadata_rows(["Volume"])
        assert rows[0]["meta"] == "Category:Doors|Volume:3"

    def test_rows_without_values_skipped(self) -> None:
        db = PropertyDatabase()
        db.load({7: {"Foo": "x"}, 8: {"Category": "Doors"}})
        assert [r["id"] for r in db.metadata_rows()] == [8]
        assert db.metadata_rows(category="door")[0]["id"] == 8

    def test_missing_category_never_matches_filter(self) -> None:
        db = PropertyDatabase()
        db.load({7: {"Level": "1F"}})
        assert [r["id"] for r in db.metadata_rows()] == [7]
        assert db.metadata_rows(category="벽") == []


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------


class TestPresets:
    def test_primary_condition(self, db: PropertyDatabase) -> None:
        result = run_filter_preset(db, "문", {"categoryKeywords": ["door"]}, timeout=0.1)
        assert result.ids == [3]
        assert result.fallback_used is False

    def test_fallback_condition(self, db: PropertyDatabase) -> None:
        result = run_filter_preset(
            db,
            "벽",
            {"category": "curtain"},
            fallback_condition={"category": ["벽", "wall"]},
            timeout=0.1,
        )
        assert result.fallback_used is True
        assert result.ids == [1, 2, 4]

    def test_fallback_only_below_min_count(self, db: PropertyDatabase) -> None:
        result = run_filter_preset(
            db, "문", {"category": "door"}, fallback_condition={"category": "wall"}, timeout=0.1
        )
        assert result.fallback_used is False

    def test_readiness_error_propagates(self) -> None:
        with pytest.raises(ModelNotLoadedError):
            run_filter_preset(PropertyDatabase(), "벽", None, timeout=0.01)

    def test_condition_from_intent(self, db: PropertyDatabase) -> None:
        intent = FilterIsolateIntent(filters=[HeightFilter(value_mm=2500)])
        cond = condition_from_intent(intent)
        assert cond.min_height == pytest.approx(2.5)
        assert "Revit 벽" in cond.category_keywords
        # Wall 2 is 3 m tall, the others have no height
        assert db.filter(cond) == [1, 2, 4]

    def test_wall_thickness_summary(self, db: PropertyDatabase) -> None:
        groups = wall_thickness_summary(db, timeout=0.1)
        assert [(g.thickness, g.count, g.volume) for g in groups] == [
            (150, 1, 1.0),
            (200, 1, 2.5),
        ]

    def test_height_filter_is_strict(self) -> None:
        db = PropertyDatabase()
        db.load(
            {
                1: {"Category": "Walls", "Height": "2500"},
                2: {"Category": "Walls", "Height": "2600"},
                3: {"Category": "Walls"},
            }
        )
        cond = condition_from_intent(FilterIsolateIntent(filters=[HeightFilter(value_mm=2500)]))
        assert db.filter(cond) == [2, 3]

    def test_preset_uses_database_timeout(self) -> None:
        db = PropertyDatabase(ready_timeout=0.01)
        db.begin_load()
        with pytest.raises(ReadinessTimeout):
            run_filter_preset(db, "벽", None)
        with pytest.raises(ReadinessTimeout):
            wall_thickness_summary(db)


# ---------------------------------------------------------------------------
# AI filters
# ---------------------------------------------------------------------------


class TestAiFilter:
    def test_condition_translation(self) -> None:
        cond = condition_from_ai_filter(
            {"category": "벽", "name_contains": "외벽", "level": "1F", "min_height": 3}
        )
        assert cond.category_keywords == ["벽"]
        assert cond.include_keywords == ["외벽"]
        assert cond.level == ["1F"]
        assert cond.min_height == 3.0
        assert cond.max_volume is None

    def test_condition_without_category(self) -> None:
        cond = condition_from_ai_filter({"category": "벽", "material": "wood"}, include_category=False)
        assert cond.category_keywords == []
        assert cond.material == ["wood"]

    def test_category_only(self, db: PropertyDatabase) -> None:
        result = apply_ai_filter(db, {"category": "벽"})
        assert result.ids == [1, 4]
        assert result.label == "벽 카테고리"
        assert result.fallback_used is False
        assert result.mode == "isolate"

    def test_category_first_then_other_clauses(self, db: PropertyDatabase) -> None:
        result = apply_ai_filter(db, {"category": "벽", "level": "1F"})
        assert result.ids == [1]
        assert result.label == AI_FILTER_LABEL

    def test_name_contains(self, db: PropertyDatabase) -> None:
        assert apply_ai_filter(db, {"category": "Walls", "name_contains": "w2"}).ids == [2]
        assert apply_ai_filter(db, {"category": "Walls", "name_contains": "w9"}).ids == []

    def test_full_scan_when_category_pass_is_empty(self) -> None:
        db = PropertyDatabase()
        db.load(
            {
                10: {"Category": "Walls", "Family": "Basic Wall", "Volume": 3},
                11: {"Category": "Walls", "Family": "Curtain Wall", "Volume": 1},
                12: {"Category": "Walls", "Family": "Basic Wall", "Volume": 1},
            }
        )
        result = apply_ai_filter(db, {"category": "Basic", "min_volume": 2})
        assert result.ids == [10]
        assert result.fallback_used is True
        assert result.label == AI_FILTER_LABEL

    def test_without_category(self, db: PropertyDatabase) -> None:
        result = apply_ai_filter(db, {"material": "wood", "mode": "hide"})
        assert result.ids == [3]
        assert result.fallback_used is False
        assert result.mode == "hide"

    def test_not_loaded(self) -> None:
        with pytest.raises(ModelNotLoadedError):
            apply_ai_filter(PropertyDatabase(), {"category": "벽"})
