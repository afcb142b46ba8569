"""
Tests for the libclang annotation scanner.
"""

import pytest

from exportgen.errors import DirectiveError, InvalidDeclarationError
from exportgen.parser.clang_scanner import ClangScanner, find_sources
from exportgen.parser.decls import Parameter
from exportgen.parser.directives import DirectiveParser


@pytest.fixture
def scanner(requires_clang, registry):
    return ClangScanner(DirectiveParser("torch::export", registry))


SOURCE = """
// [[torch::export]]
torch::Tensor add_one(torch::Tensor x) {
  return x + 1;
}

// regular comment
int helper(int y) { return y; }

int not_exported(int z);

// [[torch::export(register_types=("TensorPair", "TensorPair", "void*", "mypkg::TensorPair"))]]
TensorPair make_pair(const torch::Tensor& a, int64_t n = 2);

// [[torch::export]]
void reset() {}
"""


class TestScanFile:
    """Test scanning a single file."""

    def test_finds_annotated_functions(self, scanner, write_source):
        path = write_source("ops.cpp", SOURCE)

        decls = scanner.scan_file(path)

        assert [d.name for d in decls] == ["add_one", "make_pair", "reset"]
        assert decls[0].return_type == "torch::Tensor"
        assert decls[0].parameters == (Parameter("x", "torch::Tensor"),)
        assert decls[1].parameters == (
            Parameter("a", "const torch::Tensor&"),
            Parameter("n", "int64_t"),
        )
        assert decls[2].returns_unit

    def test_directives(self, scanner, write_source):
        path = write_source("ops.cpp", SOURCE)

        decls = scanner.scan_file(path)

        assert decls[0].directives == ()
        (directive,) = decls[1].directives
        assert directive.name == "TensorPair"
        assert directive.to_boundary_fn == "make_raw::TensorPair"
        assert directive.binding_type == "mypkg::TensorPair"

    def test_locations(self, scanner, write_source):
        path = write_source("ops.cpp", SOURCE)

        decls = scanner.scan_file(path)

        assert decls[0].location.file == path
        assert decls[0].location.line == 1
        assert decls[1].location.line == 11

    def test_malformed_directive(self, scanner, write_source):
        path = write_source("bad.cpp", """
            // [[torch::export(register_types=42)]]
            int f(int x);
        """)
        with pytest.raises(DirectiveError) as exc:
            scanner.scan_file(path)
        assert "bad.cpp:1" in str(exc.value)

    def test_dangling_annotation(self, scanner, write_source):
        path = write_source("bad.cpp", """
            int f(int x);
            // [[torch::export]]
        """)
        with pytest.raises(InvalidDeclarationError):
            scanner.scan_file(path)


class TestDiscoveryOrder:
    """Declarations come out in sorted-file, source order."""

    def test_find_sources(self, config, write_source):
        write_source("b.cpp", "int b();\n")
        write_source("a.cpp", "int a();\n")
        write_source("sub/c.cpp", "int c();\n")
        write_source("exports.cpp", "// generated\n")
        write_source("notes.txt", "text\n")

        sources = find_sources(config.source_dir_abs, exclude=["exports.cpp"])

        rel = [p.relative_to(config.source_dir_abs).as_posix() for p in sources]
        assert rel == ["a.cpp", "b.cpp", "sub/c.cpp"]

    def test_scan_order(self, scanner, config, write_source):
        write_source("b.cpp", "// [[torch::export]]\nint from_b(int x);\n")
        write_source("a.cpp", """
            // [[torch::export]]
            int from_a_first(int x);
            // [[torch::export]]
            int from_a_second(int x);
        """)

        decls = scanner.scan(find_sources(config.source_dir_abs))

        assert [d.name for d in decls] == ["from_a_first", "from_a_second", "from_b"]
