"""
Signature translation between native and boundary representations.

Pure functions over a Declaration and a TypeRegistry; nothing here mutates
either.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from ..errors import UnknownTypeError
from ..parser.decls import Declaration
from ..types.registry import TypeRegistry


class Representation(Enum):
    """Which side of the boundary a signature is written for."""
    NATIVE = "native"
    BOUNDARY = "boundary"


class Conversion(Enum):
    """How call arguments are converted when forwarded."""
    NONE = "none"
    BOUNDARY_TO_NATIVE = "boundary_to_native"


def translate_types(
    types: Iterable[str],
    representation: Representation,
    registry: TypeRegistry,
) -> list[str]:
    """
    Translate types into the given representation.

    Native types pass through unchanged; boundary types are replaced by the
    boundary type of their mapping.
    """
    if representation is Representation.NATIVE:
        return list(types)
    return [registry.resolve(t).boundary_type for t in types]


def _translate(
    declaration: Declaration,
    types: Iterable[str],
    representation: Representation,
    registry: TypeRegistry,
) -> list[str]:
    try:
        return translate_types(types, representation, registry)
    except UnknownTypeError as e:
        raise e.with_declaration(declaration.name) from e


def render_return_type(
    declaration: Declaration,
    representation: Representation,
    registry: TypeRegistry,
) -> str:
    return _translate(
        declaration, [declaration.return_type], representation, registry
    )[0]


def render_signature(
    declaration: Declaration,
    representation: Representation,
    registry: TypeRegistry,
) -> str:
    """
    Render the parameter list as ``"<type> <name>, ..."``.

    Parameter order is the declaration's order.
    """
    types = _translate(
        declaration, declaration.parameter_types, representation, registry
    )
    return ", ".join(
        f"{t} {name}" for t, name in zip(types, declaration.parameter_names)
    )


def render_call_arguments(
    declaration: Declaration,
    conversion: Conversion,
    registry: TypeRegistry,
) -> str:
    """
    Render the argument list of a forwarding call.

    With BOUNDARY_TO_NATIVE, arguments of boxed types are unboxed through
    their from_boundary_fn; all others are forwarded by name.
    """
    args = []
    for param in declaration.parameters:
        if conversion is Conversion.BOUNDARY_TO_NATIVE:
            try:
                mapping = registry.resolve(param.type)
            except UnknownTypeError as e:
                raise e.with_declaration(declaration.name) from e
            if mapping.from_boundary_fn:
                args.append(f"{mapping.from_boundary_fn}({param.name})")
                continue
        args.append(param.name)
    return ", ".join(args)


def render_declaration(
    declaration: Declaration,
    representation: Representation,
    registry: TypeRegistry,
    name_prefix: str = "",
    linkage_macro: str = "",
    is_inline: bool = False,
) -> str:
    """
    Compose a full declaration string.

    Format: ``[linkage_macro ][inline ]<return-type> <prefix><name> (<signature>)``
    """
    parts = []
    if linkage_macro:
        parts.append(linkage_macro)
    if is_inline:
        parts.append("inline")
    parts.append(render_return_type(declaration, representation, registry))
    parts.append(f"{name_prefix}{declaration.name}")
    head = " ".join(parts)
    signature = render_signature(declaration, representation, registry)
    return f"{head} ({signature})"
