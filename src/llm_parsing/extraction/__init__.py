"""Extraction — pulling JSON values out of noisy LLM text."""

from .json_extract import (
    extract_array_items,
    extract_json,
    find_matching_bracket,
    get_property,
    is_array,
    is_object,
    repair_json,
)

__all__ = [
    "extract_array_items",
    "extract_json",
    "find_matching_bracket",
    "get_property",
    "is_array",
    "is_object",
    "repair_json",
]
