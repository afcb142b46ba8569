"""
Type registry for boundary representations.

Maps the semantic types written in native signatures to the representation
used at the foreign-function boundary, together with the casting functions
that box a native value into that representation and unbox it again.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Iterator, Optional

from ..errors import DuplicateTypeError, RegistryFrozenError, UnknownTypeError

logger = logging.getLogger(__name__)


UNIT_TYPE = "void"
OPAQUE_POINTER = "void*"


class TypeKind(Enum):
    """Classification of boundary types."""
    UNIT = auto()       # void
    PRIMITIVE = auto()  # int, double, int64_t, etc.
    POINTER = auto()    # plain pointers, passed through as-is
    BOXED = auto()      # registered types crossing as an opaque handle


@dataclass(frozen=True)
class TypeMapping:
    """One registry entry."""
    semantic_name: str
    boundary_type: str
    kind: TypeKind = TypeKind.BOXED
    to_boundary_fn: Optional[str] = None
    from_boundary_fn: Optional[str] = None
    binding_type: Optional[str] = None  # opaque, for binding generators

    @property
    def needs_casting(self) -> bool:
        return self.to_boundary_fn is not None

    @property
    def is_pointer(self) -> bool:
        return self.semantic_name.endswith("*") or self.boundary_type.endswith("*")

    def describe(self) -> str:
        """Short human-readable form used in error messages."""
        if not self.needs_casting:
            return f"{self.boundary_type} (unchanged)"
        return (
            f"{self.boundary_type} via "
            f"{self.to_boundary_fn}/{self.from_boundary_fn}"
        )


# =============================================================================
# Primitive Types
# =============================================================================

# Arithmetic types that map to themselves at the boundary
ARITHMETIC_TYPES: frozenset[str] = frozenset({
    # Basic integer types
    "int",
    "unsigned",
    "unsigned int",
    "signed int",
    "short",
    "unsigned short",
    "long",
    "unsigned long",
    "long long",
    "unsigned long long",

    # Character types
    "char",
    "signed char",
    "unsigned char",
    "wchar_t",

    # Floating point
    "float",
    "double",
    "long double",

    # Boolean
    "bool",

    # Fixed-width integers
    "int8_t",
    "int16_t",
    "int32_t",
    "int64_t",
    "uint8_t",
    "uint16_t",
    "uint32_t",
    "uint64_t",
    "std::int8_t",
    "std::int16_t",
    "std::int32_t",
    "std::int64_t",
    "std::uint8_t",
    "std::uint16_t",
    "std::uint32_t",
    "std::uint64_t",

    # Size types
    "size_t",
    "std::size_t",
    "ssize_t",
    "ptrdiff_t",
    "std::ptrdiff_t",
    "intptr_t",
    "uintptr_t",
})

# Built-in boxed types: semantic name -> (cast name, binding type)
BUILTIN_BOXED_TYPES: dict[str, tuple[str, str]] = {
    "torch::Tensor": ("Tensor", "torch::Tensor"),
    "std::vector<torch::Tensor>": ("TensorList", "torch::TensorList"),
}

DEFAULT_TO_BOUNDARY_TEMPLATE = "make_raw::{cast}"
DEFAULT_FROM_BOUNDARY_TEMPLATE = "from_raw::{cast}"

_CONST_PREFIX = re.compile(r"^const\s+")
_REFERENCE_SUFFIX = re.compile(r"\s*&{1,2}$")
_TRAILING_CONST = re.compile(r"\s+const$")


def normalize_type_name(type_name: str) -> str:
    """
    Reduce a written type to its registry key.

    Leading ``const``, trailing ``const`` and references are dropped;
    pointers are kept since they change the boundary representation.

    Examples:
        >>> normalize_type_name("const torch::Tensor &")
        'torch::Tensor'
        >>> normalize_type_name("const char*")
        'char*'
    """
    name = " ".join(type_name.split())
    name = _REFERENCE_SUFFIX.sub("", name)
    name = _TRAILING_CONST.sub("", name)
    name = _CONST_PREFIX.sub("", name)
    name = re.sub(r"\s*\*", "*", name)
    return name.strip()


class TypeRegistry:
    """
    Central registry for boundary type mappings.

    A registry is created per generation run and threaded through the
    pipeline. It is writable during the registration phase only; after
    ``freeze()`` it is read-only.
    """

    def __init__(
        self,
        to_boundary_template: str = DEFAULT_TO_BOUNDARY_TEMPLATE,
        from_boundary_template: str = DEFAULT_FROM_BOUNDARY_TEMPLATE,
        builtins: bool = True,
    ):
        """
        Initialize the registry.

        Args:
            to_boundary_template: Format string turning a cast name into the
                boxing function name (e.g. "make_raw::{cast}")
            from_boundary_template: Format string turning a cast name into
                the unboxing function name
            builtins: Seed the registry with the built-in tensor types
        """
        self.to_boundary_template = to_boundary_template
        self.from_boundary_template = from_boundary_template
        self._entries: dict[str, TypeMapping] = {}
        self._frozen = False

        if builtins:
            for name, (cast, binding_type) in BUILTIN_BOXED_TYPES.items():
                self.register_cast(name, cast, OPAQUE_POINTER, binding_type)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """End the registration phase."""
        self._frozen = True

    def cast_functions(self, cast: str) -> tuple[str, str]:
        """Derive the (to_boundary, from_boundary) names for a cast name."""
        return (
            self.to_boundary_template.format(cast=cast),
            self.from_boundary_template.format(cast=cast),
        )

    def register(
        self,
        semantic_name: str,
        to_boundary_fn: str,
        from_boundary_fn: str,
        boundary_type: str = OPAQUE_POINTER,
        binding_type: Optional[str] = None,
        declaration: Optional[str] = None,
    ) -> TypeMapping:
        """
        Register a boxed type.

        Registering the same mapping twice is a no-op.

        Args:
            semantic_name: Type as written in native signatures
            to_boundary_fn: Function boxing a native value
            from_boundary_fn: Function obtaining a native reference
            boundary_type: Representation at the boundary
            binding_type: Opaque name forwarded to binding generators
            declaration: Name of the declaration carrying the directive,
                used in error messages

        Returns:
            The registered (or already present) mapping

        Raises:
            DuplicateTypeError: If a different mapping is already registered
            RegistryFrozenError: If called after freeze()
        """
        key = normalize_type_name(semantic_name)
        if self._frozen:
            raise RegistryFrozenError(key)

        requested = TypeMapping(
            semantic_name=key,
            boundary_type=normalize_type_name(boundary_type),
            kind=TypeKind.BOXED,
            to_boundary_fn=to_boundary_fn,
            from_boundary_fn=from_boundary_fn,
            binding_type=binding_type,
        )

        existing = self._entries.get(key)
        if existing is not None:
            if existing == requested:
                logger.debug("Type %s already registered, skipping", key)
                return existing
            raise DuplicateTypeError(key, existing, requested, declaration)

        self._entries[key] = requested
        logger.debug("Registered type %s -> %s", key, requested.describe())
        return requested

    def register_cast(
        self,
        semantic_name: str,
        cast: str,
        boundary_type: str = OPAQUE_POINTER,
        binding_type: Optional[str] = None,
        declaration: Optional[str] = None,
    ) -> TypeMapping:
        """Register a type whose casting functions derive from a cast name."""
        to_fn, from_fn = self.cast_functions(cast)
        return self.register(
            semantic_name,
            to_fn,
            from_fn,
            boundary_type=boundary_type,
            binding_type=binding_type,
            declaration=declaration,
        )

    def register_primitive(
        self,
        semantic_name: str,
        declaration: Optional[str] = None,
    ) -> TypeMapping:
        """Register a type that crosses the boundary unchanged."""
        key = normalize_type_name(semantic_name)
        if self._frozen:
            raise RegistryFrozenError(key)

        requested = TypeMapping(key, key, kind=TypeKind.PRIMITIVE)
        existing = self._entries.get(key)
        if existing is not None and existing != requested:
            raise DuplicateTypeError(key, existing, requested, declaration)

        self._entries[key] = requested
        logger.debug("Registered pass-through type %s", key)
        return requested

    def lookup(self, type_name: str) -> Optional[TypeMapping]:
        """
        Look up the mapping for a written type.

        The normalized key is used for matching only. Boxed entries carry
        their registered boundary type; every other type crosses the
        boundary spelled as written, qualifiers and references included.

        Returns:
            TypeMapping if the type is registered, primitive, a pointer or
            void; None otherwise
        """
        key = normalize_type_name(type_name)
        written = " ".join(type_name.split())

        entry = self._entries.get(key)
        if entry is not None:
            if entry.kind == TypeKind.BOXED:
                return entry
            return replace(entry, boundary_type=written)

        if key == UNIT_TYPE:
            return TypeMapping(key, written, kind=TypeKind.UNIT)

        if key in ARITHMETIC_TYPES:
            return TypeMapping(key, written, kind=TypeKind.PRIMITIVE)

        if key.endswith("*"):
            return TypeMapping(key, written, kind=TypeKind.POINTER)

        return None

    def resolve(self, type_name: str) -> TypeMapping:
        """
        Resolve a written type, failing for unknown types.

        Raises:
            UnknownTypeError: If the type has no mapping
        """
        mapping = self.lookup(type_name)
        if mapping is None:
            raise UnknownTypeError(type_name.strip())
        return mapping

    def is_known_type(self, type_name: str) -> bool:
        """Check if a type is recognized."""
        return self.lookup(type_name) is not None

    def mappings(self) -> Iterator[TypeMapping]:
        """Registered boxed types, in registration order."""
        return iter(self._entries.values())

    def __contains__(self, type_name: str) -> bool:
        return normalize_type_name(type_name) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
