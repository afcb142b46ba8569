"""
Wrapper generation for exported functions.

For every declaration three fragments are produced:

1. the boundary-safe exported function (implementation file): unboxes its
   arguments, calls the native function inside the failure boundary, boxes
   the result and returns a sentinel when the call failed;
2. the inline safe wrapper (header): calls (1) with the native signature and
   re-raises a signalled failure through the check hook;
3. the plain declaration of (1) (header).

What to emit is decided once in a FragmentPlan; the templates only format it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..config import ExportConfig
from ..errors import UnknownTypeError
from ..parser.decls import Declaration
from ..types.registry import ARITHMETIC_TYPES, TypeMapping, TypeRegistry
from .base import Generator
from .signature import (
    Conversion,
    Representation,
    render_call_arguments,
    render_declaration,
    render_return_type,
)


@dataclass(frozen=True)
class ParameterPlan:
    """Per-parameter decisions."""
    name: str
    native_type: str
    boundary_type: str
    unbox_fn: Optional[str] = None

    @property
    def needs_unboxing(self) -> bool:
        return self.unbox_fn is not None


@dataclass(frozen=True)
class FragmentPlan:
    """Everything the fragment templates need for one declaration."""
    name: str
    has_return: bool
    box_fn: Optional[str]
    parameters: tuple[ParameterPlan, ...]
    native_return: str
    boundary_return: str
    sentinel: Optional[str]

    # Pre-rendered pieces
    native_forward_decl: str
    boundary_decl: str
    header_decl: str
    inline_decl: str
    native_call: str
    boundary_call: str

    exception_macro: str
    check_hook: str

    @property
    def needs_boxing(self) -> bool:
        return self.box_fn is not None

    @property
    def boundary_result(self) -> str:
        """Expression returned from the boundary-safe function."""
        if self.box_fn:
            return f"{self.box_fn}({self.native_call})"
        return self.native_call


def sentinel_for(mapping: TypeMapping) -> str:
    """Value returned by a boundary function whose native call failed."""
    t = mapping.boundary_type
    if mapping.is_pointer:
        return f"({t}) NULL"
    if mapping.semantic_name in ARITHMETIC_TYPES:
        return f"({t}) 0"
    return f"{t}()"


def plan_fragments(
    declaration: Declaration,
    registry: TypeRegistry,
    boundary_prefix: str = "_",
    linkage_macro: str = "",
    exception_macro: str = "",
    check_hook: str = "host_exception_handler",
) -> FragmentPlan:
    """
    Decide what the three fragments of a declaration contain.

    Raises:
        UnknownTypeError: If the return type or a parameter type has no
            registry entry; the error names the declaration
    """
    name = declaration.name

    try:
        return_mapping = registry.resolve(declaration.return_type)
        param_mappings = [registry.resolve(p.type) for p in declaration.parameters]
    except UnknownTypeError as e:
        raise e.with_declaration(name) from e

    parameters = tuple(
        ParameterPlan(
            name=param.name,
            native_type=param.type,
            boundary_type=mapping.boundary_type,
            unbox_fn=mapping.from_boundary_fn,
        )
        for param, mapping in zip(declaration.parameters, param_mappings)
    )

    has_return = not declaration.returns_unit
    native_args = render_call_arguments(
        declaration, Conversion.BOUNDARY_TO_NATIVE, registry
    )
    forwarded_args = render_call_arguments(declaration, Conversion.NONE, registry)

    return FragmentPlan(
        name=name,
        has_return=has_return,
        box_fn=return_mapping.to_boundary_fn if has_return else None,
        parameters=parameters,
        native_return=declaration.return_type,
        boundary_return=render_return_type(
            declaration, Representation.BOUNDARY, registry
        ),
        sentinel=sentinel_for(return_mapping) if has_return else None,
        native_forward_decl=render_declaration(
            declaration, Representation.NATIVE, registry
        ),
        boundary_decl=render_declaration(
            declaration,
            Representation.BOUNDARY,
            registry,
            name_prefix=boundary_prefix,
            linkage_macro=linkage_macro,
        ),
        header_decl=render_declaration(
            declaration,
            Representation.NATIVE,
            registry,
            name_prefix=boundary_prefix,
            linkage_macro=linkage_macro,
        ),
        inline_decl=render_declaration(
            declaration, Representation.NATIVE, registry, is_inline=True
        ),
        native_call=f"{name}({native_args})",
        boundary_call=f"{boundary_prefix}{name}({forwarded_args})",
        exception_macro=exception_macro,
        check_hook=check_hook,
    )


@dataclass(frozen=True)
class Fragments:
    """The three generated fragments of one declaration."""
    error_handled: str
    wrapper: str
    declaration: str


class WrapperGenerator(Generator):
    """
    Generator for the per-declaration fragments.
    """

    ERROR_HANDLED_TEMPLATE = "error_handled.cpp.j2"
    WRAPPER_TEMPLATE = "wrapper.h.j2"
    DECLARATION_TEMPLATE = "declaration.h.j2"

    def __init__(self, config: ExportConfig):
        super().__init__(config)

    def plan(self, declaration: Declaration, registry: TypeRegistry) -> FragmentPlan:
        """Build the fragment plan with the configured names and macros."""
        gen = self.config.generation
        return plan_fragments(
            declaration,
            registry,
            boundary_prefix=gen.boundary_prefix,
            linkage_macro=self.config.linkage_macro,
            exception_macro=self.config.exception_macro,
            check_hook=gen.check_hook,
        )

    def render_plan(self, plan: FragmentPlan) -> Fragments:
        """Format a plan into its three fragments."""
        return Fragments(
            error_handled=self.render(self.ERROR_HANDLED_TEMPLATE, plan=plan),
            wrapper=self.render(self.WRAPPER_TEMPLATE, plan=plan),
            declaration=self.render(self.DECLARATION_TEMPLATE, plan=plan),
        )

    def generate(self, declaration: Declaration, registry: TypeRegistry) -> Fragments:
        """Generate the fragments of one declaration."""
        return self.render_plan(self.plan(declaration, registry))
