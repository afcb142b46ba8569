"""
Declaration data structures.

These dataclasses represent annotated C++ functions and the typed directives
attached to their annotations, independent of how they were scanned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from ..errors import InvalidDeclarationError
from ..types.registry import UNIT_TYPE, normalize_type_name


@dataclass(frozen=True)
class SourceLocation:
    """Source code location for error reporting."""
    file: Path
    line: int
    column: int = 1

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True)
class RegisterType:
    """Directive registering a boxed type for the rest of the run."""
    name: str
    to_boundary_fn: str
    from_boundary_fn: str
    boundary_type: str = "void*"
    binding_type: Optional[str] = None


# Plain export carries no directive; this alias leaves room for more kinds.
Directive = Union[RegisterType]


@dataclass(frozen=True)
class Parameter:
    """Function parameter."""
    name: str
    type: str

    def __str__(self) -> str:
        return f"{self.type} {self.name}"


@dataclass(frozen=True)
class Declaration:
    """
    One exported function.

    Immutable once built; parameter order is significant since callers on
    the other side of the boundary match arguments by position.
    """
    name: str
    return_type: str
    parameters: tuple[Parameter, ...] = ()
    directives: tuple[Directive, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False)

    def __post_init__(self):
        if not self.name.isidentifier():
            raise InvalidDeclarationError(
                f"'{self.name}' is not a valid function name", self.location
            )
        # Accept any iterable for convenience, store tuples
        object.__setattr__(self, "parameters", tuple(self.parameters))
        object.__setattr__(self, "directives", tuple(self.directives))

        seen: set[str] = set()
        for param in self.parameters:
            if param.name in seen:
                raise InvalidDeclarationError(
                    f"Duplicate parameter '{param.name}' in '{self.name}'",
                    self.location,
                )
            seen.add(param.name)

    @property
    def returns_unit(self) -> bool:
        """Whether the return type is void."""
        return normalize_type_name(self.return_type) == UNIT_TYPE

    @property
    def parameter_types(self) -> list[str]:
        return [p.type for p in self.parameters]

    @property
    def parameter_names(self) -> list[str]:
        return [p.name for p in self.parameters]

    @property
    def signature(self) -> str:
        """Native signature string, for messages."""
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.return_type} {self.name}({params})"

    @classmethod
    def make(
        cls,
        name: str,
        return_type: str,
        parameters: list[tuple[str, str]] = (),
        directives: tuple[Directive, ...] = (),
        location: Optional[SourceLocation] = None,
    ) -> "Declaration":
        """Build a declaration from (name, type) pairs."""
        return cls(
            name=name,
            return_type=return_type,
            parameters=tuple(Parameter(n, t) for n, t in parameters),
            directives=tuple(directives),
            location=location,
        )
