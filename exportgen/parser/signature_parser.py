"""
Function header parsing from a token stream.

Works on token spellings only, so headers can be read without resolving the
types they mention (torch headers are usually not on the include path when
exports are generated).
"""

from __future__ import annotations

import re
from typing import Optional

from ..errors import InvalidDeclarationError
from .decls import Declaration, Directive, Parameter, SourceLocation

_WORD = re.compile(r"^[A-Za-z_0-9]")

# Specifiers that do not belong to the return type
_SPECIFIERS = {"inline", "static", "extern", "constexpr", "virtual", "explicit"}

_OPENERS = {"(": ")", "<": ">", "[": "]", "{": "}"}

# Keywords that end a type, never a parameter name
_TYPE_KEYWORDS = {
    "int", "char", "short", "long", "float", "double", "bool", "void",
    "unsigned", "signed", "const", "volatile", "auto",
}

# Words that qualify a type but never form one on their own
_TYPE_PREFIXES = {"const", "volatile", "struct", "class", "enum", "typename"}


def join_tokens(tokens: list[str]) -> str:
    """
    Join type tokens into a normalized spelling.

    A space is inserted only between two word tokens, so
    ``["const", "torch", "::", "Tensor", "&"]`` becomes
    ``"const torch::Tensor&"``.
    """
    out = ""
    prev: Optional[str] = None
    for tok in tokens:
        if prev is not None and _WORD.match(prev) and _WORD.match(tok):
            out += " "
        out += tok
        prev = tok
    return out


def _split_top_level(tokens: list[str]) -> list[list[str]]:
    """Split tokens on commas outside of any bracket pair."""
    parts: list[list[str]] = [[]]
    depth = 0
    for tok in tokens:
        if tok in _OPENERS:
            depth += 1
        elif tok in (")", ">", "]", "}"):
            depth -= 1
        elif tok == ">>":
            depth -= 2
        elif tok == "," and depth == 0:
            parts.append([])
            continue
        parts[-1].append(tok)
    if parts == [[]]:
        return []
    return parts


def _find_parameter_list(tokens: list[str]) -> tuple[int, int]:
    """Return the (open, close) indices of the function's parameter list."""
    angle = 0
    for i, tok in enumerate(tokens):
        if tok == "<":
            angle += 1
        elif tok == ">":
            angle -= 1
        elif tok == ">>":
            angle -= 2
        elif tok == "(" and angle == 0:
            depth = 0
            for j in range(i, len(tokens)):
                if tokens[j] == "(":
                    depth += 1
                elif tokens[j] == ")":
                    depth -= 1
                    if depth == 0:
                        return i, j
            break
    return -1, -1


def _parse_parameter(
    tokens: list[str],
    index: int,
    location: Optional[SourceLocation],
) -> Parameter:
    """Parse one parameter, dropping any default value."""
    if "=" in tokens:
        tokens = tokens[:tokens.index("=")]
    if not tokens:
        raise InvalidDeclarationError(f"Empty parameter #{index + 1}", location)

    last = tokens[-1]
    if (
        len(tokens) > 1
        and last.isidentifier()
        and last not in _TYPE_KEYWORDS
        and tokens[-2] != "::"
        and any(t not in _TYPE_PREFIXES for t in tokens[:-1])
    ):
        return Parameter(name=last, type=join_tokens(tokens[:-1]))

    # Unnamed parameter
    return Parameter(name=f"arg{index}", type=join_tokens(tokens))


def parse_function_header(
    tokens: list[str],
    directives: tuple[Directive, ...] = (),
    location: Optional[SourceLocation] = None,
) -> Declaration:
    """
    Parse the tokens of a function header into a Declaration.

    Args:
        tokens: Token spellings from the start of the declaration up to (not
            including) the opening brace or terminating semicolon
        directives: Directives parsed from the annotation
        location: Location of the header, for error messages

    Raises:
        InvalidDeclarationError: If the tokens do not form a function header
    """
    tokens = [t for t in tokens if t not in _SPECIFIERS]

    open_idx, close_idx = _find_parameter_list(tokens)
    if open_idx < 1:
        raise InvalidDeclarationError(
            f"Expected a function declaration, got '{join_tokens(tokens)}'",
            location,
        )

    name = tokens[open_idx - 1]
    return_tokens = tokens[:open_idx - 1]
    if not name.isidentifier() or not return_tokens:
        raise InvalidDeclarationError(
            f"Could not find function name and return type in "
            f"'{join_tokens(tokens)}'",
            location,
        )

    param_groups = _split_top_level(tokens[open_idx + 1:close_idx])
    if param_groups == [["void"]]:
        param_groups = []

    parameters = tuple(
        _parse_parameter(group, i, location)
        for i, group in enumerate(param_groups)
    )

    return Declaration(
        name=name,
        return_type=join_tokens(return_tokens),
        parameters=parameters,
        directives=directives,
        location=location,
    )
