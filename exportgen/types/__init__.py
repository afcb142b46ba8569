"""
Type system for boundary representations.
"""

from .registry import (
    OPAQUE_POINTER,
    UNIT_TYPE,
    TypeKind,
    TypeMapping,
    TypeRegistry,
    normalize_type_name,
)

__all__ = [
    "OPAQUE_POINTER",
    "UNIT_TYPE",
    "TypeKind",
    "TypeMapping",
    "TypeRegistry",
    "normalize_type_name",
]
