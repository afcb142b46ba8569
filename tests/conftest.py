"""
Pytest configuration and shared fixtures for exportgen tests.
"""

import sys
import textwrap
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from exportgen.config import ExportConfig, PackageConfig
from exportgen.parser.decls import Declaration
from exportgen.types.registry import TypeRegistry

# Scanner tests need a loadable libclang
try:
    from clang.cindex import Index
    Index.create()
    HAS_CLANG = True
except Exception as e:
    HAS_CLANG = False
    CLANG_ERROR = str(e)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def requires_clang():
    """Skip test if libclang is not available."""
    if not HAS_CLANG:
        pytest.skip(f"libclang not available: {CLANG_ERROR}")


@pytest.fixture
def config(tmp_path):
    """Configuration for a package named 'mypkg' rooted in a temp dir."""
    return ExportConfig(project_root=tmp_path, package=PackageConfig(name="mypkg"))


@pytest.fixture
def registry():
    """Fresh registry seeded with the built-in types."""
    return TypeRegistry()


@pytest.fixture
def write_source(config):
    """Write a C++ file into the configured source directory."""
    def _write(name: str, content: str) -> Path:
        path = config.source_dir_abs / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip())
        return path
    return _write


@pytest.fixture
def add_one():
    """int add_one(int x)"""
    return Declaration.make("add_one", "int", [("x", "int")])


@pytest.fixture
def tensor_add():
    """torch::Tensor tensor_add(torch::Tensor self, torch::Tensor other, double alpha)"""
    return Declaration.make(
        "tensor_add",
        "torch::Tensor",
        [("self", "torch::Tensor"), ("other", "torch::Tensor"), ("alpha", "double")],
    )
