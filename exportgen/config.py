"""
Configuration system for exportgen.

Supports:
- TOML configuration files (exportgen.toml)
- CLI argument overrides
- Pre-registered types declared in the configuration
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


CONFIG_FILENAME = "exportgen.toml"


@dataclass
class PackageConfig:
    """Host package identity."""

    # Empty means: use the project directory name
    name: str = ""


@dataclass
class PathsConfig:
    """Path configuration."""

    source_dir: Path = field(default_factory=lambda: Path("csrc/src"))
    source_glob: str = "*.cpp"
    implementation_output: Path = field(
        default_factory=lambda: Path("csrc/src/exports.cpp")
    )
    header_output: Path = field(
        default_factory=lambda: Path("csrc/include/{package}/exports.h")
    )
    exclude: list[str] = field(default_factory=lambda: ["exports.cpp"])


@dataclass
class GenerationConfig:
    """Generation options.

    ``{PACKAGE}`` and ``{package}`` in macro names expand to the upper- and
    lower-cased package name.
    """

    annotation: str = "torch::export"
    boundary_prefix: str = "_"
    linkage_macro: str = "{PACKAGE}_API"
    exception_macro: str = "{PACKAGE}_HANDLE_EXCEPTION"
    check_hook: str = "host_exception_handler"
    to_boundary_template: str = "make_raw::{cast}"
    from_boundary_template: str = "from_raw::{cast}"
    implementation_includes: list[str] = field(default_factory=list)
    header_includes: list[str] = field(default_factory=list)
    templates_dir: Optional[Path] = None


@dataclass
class ClangConfig:
    """libclang options."""

    args: list[str] = field(default_factory=lambda: ["-x", "c++", "-std=c++17"])
    include_dirs: list[Path] = field(default_factory=list)


@dataclass
class TypeEntry:
    """A type registered from the configuration file.

    Without ``cast`` the type crosses the boundary unchanged.
    """

    name: str
    cast: Optional[str] = None
    boundary_type: str = "void*"
    binding_type: Optional[str] = None


@dataclass
class ExportConfig:
    """Main configuration container."""

    project_root: Path = field(default_factory=Path.cwd)
    package: PackageConfig = field(default_factory=PackageConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    clang: ClangConfig = field(default_factory=ClangConfig)
    types: list[TypeEntry] = field(default_factory=list)

    def __post_init__(self):
        """Ensure project_root is a Path."""
        if isinstance(self.project_root, str):
            self.project_root = Path(self.project_root)

    @classmethod
    def from_file(cls, path: Path) -> "ExportConfig":
        """Load configuration from a TOML file."""
        with open(path, "rb") as f:
            data = tomllib.load(f)

        return cls._from_dict(data, path.parent)

    @classmethod
    def _from_dict(cls, data: dict, base_path: Path) -> "ExportConfig":
        """Create config from dictionary."""
        package_data = data.get("package", {})
        paths_data = data.get("paths", {})
        gen_data = data.get("generation", {})
        clang_data = data.get("clang", {})

        defaults = PathsConfig()
        paths = PathsConfig(
            source_dir=Path(paths_data.get("source_dir", defaults.source_dir)),
            source_glob=paths_data.get("source_glob", defaults.source_glob),
            implementation_output=Path(paths_data.get(
                "implementation_output", defaults.implementation_output
            )),
            header_output=Path(paths_data.get(
                "header_output", defaults.header_output
            )),
            exclude=list(paths_data.get("exclude", defaults.exclude)),
        )

        gen_defaults = GenerationConfig()
        templates_dir = gen_data.get("templates_dir")
        generation = GenerationConfig(
            annotation=gen_data.get("annotation", gen_defaults.annotation),
            boundary_prefix=gen_data.get(
                "boundary_prefix", gen_defaults.boundary_prefix
            ),
            linkage_macro=gen_data.get("linkage_macro", gen_defaults.linkage_macro),
            exception_macro=gen_data.get(
                "exception_macro", gen_defaults.exception_macro
            ),
            check_hook=gen_data.get("check_hook", gen_defaults.check_hook),
            to_boundary_template=gen_data.get(
                "to_boundary_template", gen_defaults.to_boundary_template
            ),
            from_boundary_template=gen_data.get(
                "from_boundary_template", gen_defaults.from_boundary_template
            ),
            implementation_includes=list(
                gen_data.get("implementation_includes", [])
            ),
            header_includes=list(gen_data.get("header_includes", [])),
            templates_dir=Path(templates_dir) if templates_dir else None,
        )

        clang = ClangConfig(
            args=list(clang_data.get("args", ClangConfig().args)),
            include_dirs=[Path(p) for p in clang_data.get("include_dirs", [])],
        )

        types = [
            TypeEntry(
                name=entry["name"],
                cast=entry.get("cast"),
                boundary_type=entry.get("boundary_type", "void*"),
                binding_type=entry.get("binding_type"),
            )
            for entry in data.get("types", [])
        ]

        return cls(
            project_root=base_path,
            package=PackageConfig(name=package_data.get("name", "")),
            paths=paths,
            generation=generation,
            clang=clang,
            types=types,
        )

    @classmethod
    def find_config(cls, start_path: Optional[Path] = None) -> Optional[Path]:
        """Find exportgen.toml in current or parent directories."""
        if start_path is None:
            start_path = Path.cwd()

        current = start_path.resolve()

        for _ in range(10):  # Max 10 levels up
            config_path = current / CONFIG_FILENAME
            if config_path.exists():
                return config_path

            parent = current.parent
            if parent == current:
                break
            current = parent

        return None

    @classmethod
    def load(
        cls,
        config_path: Optional[Path] = None,
        start_path: Optional[Path] = None,
    ) -> "ExportConfig":
        """Load configuration, auto-discovering if path not provided."""
        if config_path is None:
            config_path = cls.find_config(start_path)

        if config_path is not None and config_path.exists():
            return cls.from_file(config_path)

        # Default config rooted at the start directory
        return cls(project_root=(start_path or Path.cwd()).resolve())

    @property
    def package_name(self) -> str:
        """Package name, defaulting to the project directory name."""
        return self.package.name or self.project_root.resolve().name

    def expand(self, template: str) -> str:
        """Expand {package}/{PACKAGE} placeholders."""
        name = self.package_name
        return template.format(package=name.lower(), PACKAGE=name.upper())

    def resolve_path(self, path: Path) -> Path:
        """Resolve a relative path against project root."""
        path = Path(self.expand(str(path)))
        if path.is_absolute():
            return path
        return self.project_root / path

    @property
    def source_dir_abs(self) -> Path:
        """Absolute path to the annotated sources."""
        return self.resolve_path(self.paths.source_dir)

    @property
    def implementation_output_abs(self) -> Path:
        """Absolute path of the generated implementation file."""
        return self.resolve_path(self.paths.implementation_output)

    @property
    def header_output_abs(self) -> Path:
        """Absolute path of the generated header file."""
        return self.resolve_path(self.paths.header_output)

    @property
    def linkage_macro(self) -> str:
        return self.expand(self.generation.linkage_macro)

    @property
    def exception_macro(self) -> str:
        return self.expand(self.generation.exception_macro)

    @property
    def templates_dir_abs(self) -> Optional[Path]:
        if self.generation.templates_dir is None:
            return None
        return self.resolve_path(self.generation.templates_dir)
