"""
Code generators for exported functions.
"""

from .base import Generator, GeneratedFile
from .signature import (
    Conversion,
    Representation,
    render_call_arguments,
    render_declaration,
    render_signature,
    translate_types,
)
from .wrappers import FragmentPlan, Fragments, WrapperGenerator, plan_fragments
from .pipeline import ExportPipeline, GeneratedExports

__all__ = [
    "Generator",
    "GeneratedFile",
    "Conversion",
    "Representation",
    "render_call_arguments",
    "render_declaration",
    "render_signature",
    "translate_types",
    "FragmentPlan",
    "Fragments",
    "WrapperGenerator",
    "plan_fragments",
    "ExportPipeline",
    "GeneratedExports",
]
