"""
Error types for export generation.

Every generation-time failure derives from ExportError and aborts the whole
run: no output document is written once one of these has been raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .parser.decls import SourceLocation
    from .types.registry import TypeMapping


class ExportError(Exception):
    """Base exception for all exportgen errors."""


class UnknownTypeError(ExportError):
    """A type used in a signature has no registry entry."""

    def __init__(self, type_name: str, declaration: Optional[str] = None):
        self.type_name = type_name
        self.declaration = declaration
        if declaration:
            message = (
                f"Unknown type '{type_name}' in declaration '{declaration}'. "
                "Register it with register_types=(...) or a [[types]] entry."
            )
        else:
            message = f"Unknown type '{type_name}'"
        super().__init__(message)

    def with_declaration(self, declaration: str) -> "UnknownTypeError":
        """Return a copy of this error that names the failing declaration."""
        return UnknownTypeError(self.type_name, declaration)


class DuplicateTypeError(ExportError):
    """A registration conflicts with an existing, different mapping."""

    def __init__(
        self,
        type_name: str,
        existing: "TypeMapping",
        requested: "TypeMapping",
        declaration: Optional[str] = None,
    ):
        self.type_name = type_name
        self.existing = existing
        self.requested = requested
        self.declaration = declaration
        where = f" (registered by '{declaration}')" if declaration else ""
        super().__init__(
            f"Conflicting registration for type '{type_name}'{where}: "
            f"already mapped to {existing.describe()}, "
            f"requested {requested.describe()}"
        )


class RegistryFrozenError(ExportError):
    """The registry was modified after the registration phase ended."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(
            f"Cannot register '{type_name}': the type registry is frozen"
        )


class DuplicateDeclarationError(ExportError):
    """Two exported declarations share the same name."""

    def __init__(self, name: str, locations: tuple = ()):
        self.name = name
        self.locations = locations
        where = ""
        if locations:
            where = " at " + ", ".join(str(loc) for loc in locations)
        super().__init__(f"Function '{name}' is exported more than once{where}")


class InvalidDeclarationError(ExportError):
    """A function header could not be turned into a declaration."""

    def __init__(self, message: str, location: Optional["SourceLocation"] = None):
        self.location = location
        if location is not None:
            message = f"{location}: {message}"
        super().__init__(message)


class DirectiveError(ExportError):
    """Annotation arguments could not be parsed into directives."""

    def __init__(self, message: str, location: Optional["SourceLocation"] = None):
        self.location = location
        if location is not None:
            message = f"{location}: {message}"
        super().__init__(message)


class ScanError(ExportError):
    """A source file could not be lexed."""
