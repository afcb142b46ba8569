"""
End-to-end export: discover annotated functions, generate, write.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import ExportConfig
from .generators.pipeline import ExportPipeline, GeneratedExports, make_registry
from .parser import ClangScanner, Declaration, DirectiveParser, find_sources
from .types.registry import TypeRegistry

logger = logging.getLogger(__name__)


def discover_declarations(
    config: ExportConfig,
    registry: Optional[TypeRegistry] = None,
) -> list[Declaration]:
    """
    Scan the configured sources for exported functions.

    Returns:
        Declarations in discovery order (sorted files, source order)
    """
    if registry is None:
        registry = make_registry(config)

    source_dir = config.source_dir_abs
    if not source_dir.is_dir():
        logger.warning("Source directory %s does not exist", source_dir)
        return []

    sources = find_sources(
        source_dir,
        pattern=config.paths.source_glob,
        exclude=config.paths.exclude,
    )
    logger.info("Found %d source files in %s", len(sources), source_dir)

    scanner = ClangScanner(
        DirectiveParser(config.generation.annotation, registry),
        include_dirs=[config.resolve_path(p) for p in config.clang.include_dirs],
        clang_args=config.clang.args,
    )
    return scanner.scan(sources)


def export(config: ExportConfig, dry_run: bool = False) -> GeneratedExports:
    """
    Regenerate the export documents of a project.

    Args:
        config: Export configuration
        dry_run: Generate without writing

    Returns:
        The generation result; empty when no function is exported
    """
    pipeline = ExportPipeline(config)
    declarations = discover_declarations(config, pipeline.registry)
    result = pipeline.generate(declarations)
    if not dry_run:
        pipeline.write(result)
    return result


def collect_types(config: ExportConfig) -> TypeRegistry:
    """Run discovery and the registration phase only."""
    pipeline = ExportPipeline(config)
    declarations = discover_declarations(config, pipeline.registry)
    return pipeline.register_types(declarations)
