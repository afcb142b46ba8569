"""
exportgen

Generates boundary-safe exports for C++ functions annotated with
``// [[torch::export]]``: an exception-safe exported function per
declaration, plus a header with its declaration and an inline wrapper that
re-raises failures on the native side.
"""

__version__ = "0.1.0"

from .config import ExportConfig
from .errors import (
    DirectiveError,
    DuplicateDeclarationError,
    DuplicateTypeError,
    ExportError,
    InvalidDeclarationError,
    RegistryFrozenError,
    ScanError,
    UnknownTypeError,
)
from .exporter import export
from .generators import ExportPipeline, GeneratedExports
from .parser import Declaration, Parameter, RegisterType
from .types import TypeMapping, TypeRegistry

__all__ = [
    "ExportConfig",
    "ExportPipeline",
    "GeneratedExports",
    "Declaration",
    "Parameter",
    "RegisterType",
    "TypeMapping",
    "TypeRegistry",
    "export",
    "ExportError",
    "UnknownTypeError",
    "DuplicateTypeError",
    "DuplicateDeclarationError",
    "InvalidDeclarationError",
    "DirectiveError",
    "RegistryFrozenError",
    "ScanError",
    "__version__",
]
