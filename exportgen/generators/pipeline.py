"""
Emission pipeline.

Runs the ordered registration phase, generates the fragments of every
declaration and assembles them into the implementation and header
documents. Each run regenerates both documents from scratch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..config import CONFIG_FILENAME, ExportConfig
from ..errors import DuplicateDeclarationError
from ..parser.decls import Declaration, RegisterType
from ..types.registry import TypeRegistry
from .base import GeneratedFile, Generator
from .wrappers import Fragments, WrapperGenerator

logger = logging.getLogger(__name__)


@dataclass
class GeneratedExports:
    """Result of one generation run."""
    implementation: str = ""
    header: str = ""
    declarations: list[Declaration] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.declarations


def _include_line(include: str) -> str:
    """Quote an include unless it already carries <> or "" delimiters."""
    include = include.strip()
    if include.startswith(("<", '"')):
        return include
    return f'"{include}"'


def make_registry(config: ExportConfig) -> TypeRegistry:
    """Create the run's registry with the configured cast templates."""
    return TypeRegistry(
        to_boundary_template=config.generation.to_boundary_template,
        from_boundary_template=config.generation.from_boundary_template,
    )


class ExportPipeline(Generator):
    """
    Generator for the two export documents.

    Usage:
        pipeline = ExportPipeline(config)
        result = pipeline.generate(declarations)
        pipeline.write(result)
    """

    IMPLEMENTATION_TEMPLATE = "exports.cpp.j2"
    HEADER_TEMPLATE = "exports.h.j2"

    def __init__(self, config: ExportConfig, registry: Optional[TypeRegistry] = None):
        """
        Initialize the pipeline.

        Args:
            config: Export configuration
            registry: Registry to populate; a fresh one is created when omitted
        """
        super().__init__(config)
        self.registry = registry if registry is not None else make_registry(config)
        self.wrappers = WrapperGenerator(config)

    def register_types(self, declarations: list[Declaration]) -> TypeRegistry:
        """
        Registration phase.

        Applies configured types first, then every RegisterType directive in
        discovery order, and freezes the registry.
        """
        registry = self.registry

        for entry in self.config.types:
            if entry.cast:
                registry.register_cast(
                    entry.name,
                    entry.cast,
                    boundary_type=entry.boundary_type,
                    binding_type=entry.binding_type,
                    declaration=CONFIG_FILENAME,
                )
            else:
                registry.register_primitive(entry.name, declaration=CONFIG_FILENAME)

        for decl in declarations:
            for directive in decl.directives:
                if isinstance(directive, RegisterType):
                    registry.register(
                        directive.name,
                        directive.to_boundary_fn,
                        directive.from_boundary_fn,
                        boundary_type=directive.boundary_type,
                        binding_type=directive.binding_type,
                        declaration=decl.name,
                    )

        registry.freeze()
        return registry

    @staticmethod
    def check_unique(declarations: list[Declaration]) -> None:
        """Reject declarations sharing a name."""
        seen: dict[str, Declaration] = {}
        for decl in declarations:
            first = seen.get(decl.name)
            if first is not None:
                locations = tuple(
                    loc for loc in (first.location, decl.location) if loc
                )
                raise DuplicateDeclarationError(decl.name, locations)
            seen[decl.name] = decl

    def generate(self, declarations: list[Declaration]) -> GeneratedExports:
        """
        Generate both documents.

        An empty declaration list yields empty documents. Any error aborts
        the run before anything is returned.

        Raises:
            DuplicateDeclarationError: If two declarations share a name
            DuplicateTypeError: If registrations conflict
            UnknownTypeError: If a declaration uses an unregistered type
        """
        if not declarations:
            logger.info("No exported functions found")
            return GeneratedExports()

        self.check_unique(declarations)
        if not self.registry.frozen:
            self.register_types(declarations)

        fragments: list[Fragments] = [
            self.wrappers.generate(decl, self.registry) for decl in declarations
        ]

        gen = self.config.generation
        implementation = self.render(
            self.IMPLEMENTATION_TEMPLATE,
            annotation=gen.annotation,
            includes=[_include_line(i) for i in gen.implementation_includes],
            fragments=[f.error_handled for f in fragments],
        )
        header = self.render(
            self.HEADER_TEMPLATE,
            annotation=gen.annotation,
            includes=[_include_line(i) for i in gen.header_includes],
            pairs=[(f.declaration, f.wrapper) for f in fragments],
        )

        return GeneratedExports(
            implementation=implementation,
            header=header,
            declarations=list(declarations),
        )

    def output_files(self, result: GeneratedExports) -> list[GeneratedFile]:
        """Destinations and contents of a generation result."""
        return [
            GeneratedFile(self.config.implementation_output_abs, result.implementation),
            GeneratedFile(self.config.header_output_abs, result.header),
        ]

    def write(self, result: GeneratedExports) -> list[GeneratedFile]:
        """
        Overwrite both output files.

        Nothing is written for an empty result.

        Returns:
            The files written
        """
        if result.is_empty:
            return []

        files = self.output_files(result)
        for generated in files:
            generated.path.parent.mkdir(parents=True, exist_ok=True)
            generated.path.write_text(generated.content, encoding="utf-8")
            logger.info("Wrote %s", generated.path)
        return files
