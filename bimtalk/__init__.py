"""bimtalk — chat intents and metadata summaries for a BIM model viewer."""

__version__ = "0.1.0"

from bimtalk.config import Settings, load_settings
from bimtalk.filtering import (
    Condition,
    ModelNotLoadedError,
    PropertyDatabase,
    ReadinessTimeout,
    apply_ai_filter,
    filter_by_condition,
    passes_condition,
    run_filter_preset,
    wall_thickness_summary,
)
from bimtalk.metadata import (
    InputShapeError,
    OverloadError,
    build_element_summary,
    build_wall_summary,
    collect_elements,
    collect_walls,
    summarize_by_category,
    summarize_by_thickness,
)
from bimtalk.models import CategoryAggregate, ElementRecord, ThicknessAggregate, WallRow
from bimtalk.nlp import ChatAssistant, ChatResponse, Intent, classify_intent
from bimtalk.properties import convert_length_to_meters, parse_numeric

__all__ = [
    "__version__",
    "CategoryAggregate",
    "ChatAssistant",
    "ChatResponse",
    "Condition",
    "ElementRecord",
    "InputShapeError",
    "Intent",
    "ModelNotLoadedError",
    "OverloadError",
    "PropertyDatabase",
    "ReadinessTimeout",
    "Settings",
    "ThicknessAggregate",
    "WallRow",
    "apply_ai_filter",
    "build_element_summary",
    "build_wall_summary",
    "classify_intent",
    "collect_elements",
    "collect_walls",
    "convert_length_to_meters",
    "filter_by_condition",
    "load_settings",
    "parse_numeric",
    "passes_condition",
    "run_filter_preset",
    "summarize_by_category",
    "summarize_by_thickness",
    "wall_thickness_summary",
]
