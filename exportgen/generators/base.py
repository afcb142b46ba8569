"""
Base classes for code generators.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
    select_autoescape,
)

from ..config import ExportConfig


@dataclass
class GeneratedFile:
    """Represents a generated file."""
    path: Path
    content: str


class Generator:
    """
    Base class for template-driven generators.

    Templates are loaded from the ``exportgen/templates`` package directory;
    a project may shadow any of them by placing a file with the same name in
    ``generation.templates_dir``.
    """

    def __init__(self, config: ExportConfig):
        """
        Initialize the generator.

        Args:
            config: Export configuration
        """
        self.config = config
        self._env: Optional[Environment] = None

    @property
    def env(self) -> Environment:
        """Lazy-load Jinja2 environment."""
        if self._env is None:
            self._env = self._create_jinja_env()
        return self._env

    def _create_jinja_env(self) -> Environment:
        """Create and configure Jinja2 environment."""
        loaders = []
        override = self.config.templates_dir_abs
        if override is not None:
            loaders.append(FileSystemLoader(str(override)))
        loaders.append(PackageLoader("exportgen", "templates"))

        return Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(default=False),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )

    def render(self, template_name: str, **context) -> str:
        """Render a template with the given context."""
        return self.env.get_template(template_name).render(**context)
