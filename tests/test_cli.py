"""
Tests for the command-line interface.
"""

import textwrap

import pytest

from exportgen.cli import main


def write_project(root, sources):
    (root / "exportgen.toml").write_text('[package]\nname = "mypkg"\n')
    src = root / "csrc" / "src"
    src.mkdir(parents=True, exist_ok=True)
    for name, text in sources.items():
        (src / name).write_text(textwrap.dedent(text).lstrip())


OPS = """
// [[torch::export(register_types=("TensorPair", "TensorPair", "void*", "mypkg::TensorPair"))]]
TensorPair make_pair(torch::Tensor a, torch::Tensor b) {
  return TensorPair(a, b);
}

// [[torch::export]]
int add_one(int x) {
  return x + 1;
}
"""


class TestExportCommand:
    """Test the export subcommand."""

    def test_no_sources(self, tmp_path, capsys):
        """A project without sources is a no-op."""
        assert main(["export", "--path", str(tmp_path)]) == 0
        assert "No exported functions found" in capsys.readouterr().out
        assert not (tmp_path / "csrc").exists()

    def test_export(self, requires_clang, tmp_path, capsys):
        write_project(tmp_path, {"ops.cpp": OPS})

        assert main(["export", "--path", str(tmp_path)]) == 0

        impl = (tmp_path / "csrc" / "src" / "exports.cpp").read_text()
        header = (tmp_path / "csrc" / "include" / "mypkg" / "exports.h").read_text()
        assert "MYPKG_API void* _make_pair (void* a, void* b) {" in impl
        assert "make_raw::TensorPair(make_pair(from_raw::Tensor(a), from_raw::Tensor(b)))" in impl
        assert "inline int add_one (int x) {" in header
        assert "Generated 2 exports" in capsys.readouterr().out

    def test_generated_file_not_rescanned(self, requires_clang, tmp_path):
        write_project(tmp_path, {"ops.cpp": OPS})

        assert main(["export", "--path", str(tmp_path)]) == 0
        impl = tmp_path / "csrc" / "src" / "exports.cpp"
        first = impl.read_text()

        assert main(["export", "--path", str(tmp_path)]) == 0
        assert impl.read_text() == first

    def test_dry_run(self, requires_clang, tmp_path, capsys):
        write_project(tmp_path, {"ops.cpp": OPS})

        assert main(["export", "--path", str(tmp_path), "--dry-run"]) == 0

        out = capsys.readouterr().out
        assert "inline TensorPair make_pair (torch::Tensor a, torch::Tensor b) {" in out
        assert not (tmp_path / "csrc" / "src" / "exports.cpp").exists()

    def test_unknown_type(self, requires_clang, tmp_path, capsys):
        write_project(tmp_path, {"ops.cpp": """
            // [[torch::export]]
            Widget make_widget(int size);
        """})

        assert main(["export", "--path", str(tmp_path)]) == 1

        err = capsys.readouterr().err
        assert "Widget" in err
        assert "make_widget" in err
        assert not (tmp_path / "csrc" / "src" / "exports.cpp").exists()


class TestTypesCommand:
    """Test the types subcommand."""

    def test_types(self, requires_clang, tmp_path, capsys):
        write_project(tmp_path, {"ops.cpp": OPS})

        assert main(["types", "--path", str(tmp_path)]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == [
            "TYPE", "BOUNDARY", "TO", "BOUNDARY", "FROM", "BOUNDARY", "BINDING",
        ]
        assert lines[-1].split() == [
            "TensorPair", "void*", "make_raw::TensorPair",
            "from_raw::TensorPair", "mypkg::TensorPair",
        ]


def test_requires_command():
    with pytest.raises(SystemExit):
        main([])
