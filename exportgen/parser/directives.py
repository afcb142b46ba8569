"""
Annotation directive parsing.

Turns the free-form argument text of an export annotation, e.g.::

    // [[torch::export(register_types=("torch::TensorPair", "TensorPair", "void*", "torchexport::TensorPair"))]]

into typed directives, so the generator never sees raw annotation strings.
"""

from __future__ import annotations

import ast
import re
from typing import Optional

from ..errors import DirectiveError
from ..types.registry import TypeRegistry
from .decls import Directive, RegisterType, SourceLocation


class DirectiveParser:
    """
    Parser for export annotations.

    Recognizes ``// [[<annotation>]]`` and ``// [[<annotation>(args)]]``
    comments. Arguments use Python call syntax with literal values.
    """

    KEYWORDS = ("register_types",)

    def __init__(self, annotation: str, registry: TypeRegistry):
        """
        Initialize the parser.

        Args:
            annotation: Attribute name, e.g. "torch::export"
            registry: Registry whose cast templates name the casting functions
        """
        self.annotation = annotation
        self.registry = registry
        self._pattern = re.compile(
            r"^//\s*\[\[\s*" + re.escape(annotation)
            + r"\s*(?:\((?P<args>.*)\))?\s*\]\]\s*$"
        )

    def match(self, comment: str) -> Optional[str]:
        """
        Check whether a comment is an export annotation.

        Returns:
            The argument text ("" when there are none), or None if the
            comment is not an annotation
        """
        m = self._pattern.match(comment.strip())
        if m is None:
            return None
        return (m.group("args") or "").strip()

    def parse(
        self,
        args: str,
        location: Optional[SourceLocation] = None,
    ) -> tuple[Directive, ...]:
        """
        Parse annotation arguments into directives.

        Raises:
            DirectiveError: On syntax errors, unknown keywords or malformed
                register_types values
        """
        if not args:
            return ()

        try:
            tree = ast.parse(f"_({args})", mode="eval")
        except SyntaxError as e:
            raise DirectiveError(
                f"Invalid annotation arguments '{args}': {e.msg}", location
            ) from e

        call = tree.body
        if not isinstance(call, ast.Call) or call.args:
            raise DirectiveError(
                f"Annotation arguments must be keyword arguments: '{args}'",
                location,
            )

        directives: list[Directive] = []
        for keyword in call.keywords:
            if keyword.arg not in self.KEYWORDS:
                raise DirectiveError(
                    f"Unknown annotation argument '{keyword.arg}'", location
                )
            try:
                value = ast.literal_eval(keyword.value)
            except ValueError as e:
                raise DirectiveError(
                    f"'{keyword.arg}' must be a literal value", location
                ) from e
            directives.extend(self._register_types(value, location))

        return tuple(directives)

    def _register_types(self, value, location) -> list[RegisterType]:
        """Convert a register_types value into RegisterType directives."""
        # A single entry or a list of entries
        if isinstance(value, (tuple, list)) and value and all(
            isinstance(v, str) for v in value
        ):
            entries = [value]
        elif isinstance(value, (tuple, list)):
            entries = list(value)
        else:
            raise DirectiveError(
                "register_types must be a tuple of strings or a list of tuples",
                location,
            )

        result = []
        for entry in entries:
            if (
                not isinstance(entry, (tuple, list))
                or len(entry) not in (3, 4)
                or not all(isinstance(v, str) and v for v in entry)
            ):
                raise DirectiveError(
                    "register_types entries must be "
                    "(name, cast, boundary_type[, binding_type]), "
                    f"got {entry!r}",
                    location,
                )
            name, cast, boundary_type = entry[:3]
            binding_type = entry[3] if len(entry) == 4 else None
            to_fn, from_fn = self.registry.cast_functions(cast)
            result.append(RegisterType(
                name=name,
                to_boundary_fn=to_fn,
                from_boundary_fn=from_fn,
                boundary_type=boundary_type,
                binding_type=binding_type,
            ))
        return result
