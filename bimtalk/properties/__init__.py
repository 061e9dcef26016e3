"""Property normalisation — resolve semantic fields from free-form property bags."""

from bimtalk.properties.keys import (
    METADATA_ALWAYS_INCLUDE,
    PROPERTY_FIELDS,
    resolve_category,
    resolve_metadata_properties,
    resolve_name,
)
from bimtalk.properties.numeric import convert_length_to_meters, parse_numeric
from bimtalk.properties.resolver import (
    FieldKind,
    FieldResolver,
    extract_thickness_from_text,
    pick,
    resolve_length,
    resolve_numeric,
    resolve_string,
    resolve_thickness,
)

__all__ = [
    "METADATA_ALWAYS_INCLUDE",
    "PROPERTY_FIELDS",
    "FieldKind",
    "FieldResolver",
    "convert_length_to_meters",
    "extract_thickness_from_text",
    "parse_numeric",
    "pick",
    "resolve_category",
    "resolve_length",
    "resolve_metadata_properties",
    "resolve_name",
    "resolve_numeric",
    "resolve_string",
    "resolve_thickness",
]
