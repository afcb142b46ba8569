"""
Annotated source scanning and the declaration model.
"""

from .decls import (
    Declaration,
    Directive,
    Parameter,
    RegisterType,
    SourceLocation,
)
from .directives import DirectiveParser
from .signature_parser import join_tokens, parse_function_header
from .clang_scanner import ClangScanner, find_sources

__all__ = [
    "Declaration",
    "Directive",
    "Parameter",
    "RegisterType",
    "SourceLocation",
    "DirectiveParser",
    "join_tokens",
    "parse_function_header",
    "ClangScanner",
    "find_sources",
]
