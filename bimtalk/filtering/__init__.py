"""Condition filtering over property bags and the per-model property database."""

from bimtalk.filtering.condition import Condition, StringProfile, build_string_profile
from bimtalk.filtering.database import ModelNotLoadedError, PropertyDatabase, ReadinessTimeout
from bimtalk.filtering.engine import category_matches, filter_by_condition, passes_condition
from bimtalk.filtering.presets import (
    FilterPresetResult,
    apply_ai_filter,
    condition_from_ai_filter,
    condition_from_intent,
    run_filter_preset,
    wall_thickness_summary,
)

__all__ = [
    "Condition",
    "FilterPresetResult",
    "ModelNotLoadedError",
    "PropertyDatabase",
    "ReadinessTimeout",
    "StringProfile",
    "apply_ai_filter",
    "build_string_profile",
    "category_matches",
    "condition_from_ai_filter",
    "condition_from_intent",
    "filter_by_condition",
    "passes_condition",
    "run_filter_preset",
    "wall_thickness_summary",
]
