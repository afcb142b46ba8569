"""
Clang-based annotation scanner.

Uses libclang to lex C++ sources and find exported functions, i.e. function
headers preceded by an export annotation comment::

    // [[torch::export]]
    torch::Tensor add_one(torch::Tensor x) { ... }

Only the lexer is relied upon: the sources usually include headers that are
not available at generation time, so semantic errors are expected and
reported at debug level only.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

try:
    from clang.cindex import (
        Index,
        TokenKind,
        TranslationUnit,
        TranslationUnitLoadError,
    )
    HAS_CLANG = True
except ImportError:
    HAS_CLANG = False

from ..errors import InvalidDeclarationError, ScanError
from .decls import Declaration, SourceLocation
from .directives import DirectiveParser
from .signature_parser import parse_function_header

logger = logging.getLogger(__name__)


def find_sources(
    source_dir: Path,
    pattern: str = "*.cpp",
    exclude: Optional[Iterable[str]] = None,
) -> list[Path]:
    """
    Find annotated source candidates.

    Files are returned sorted by their POSIX path relative to source_dir;
    this order, together with source order inside each file, is the
    discovery order of declarations.
    """
    exclude_names = set(exclude or ())
    exclude_dirs = {"__pycache__", ".git"}

    sources = []
    for path in source_dir.rglob(pattern):
        if any(part in exclude_dirs for part in path.parts):
            continue
        if path.name in exclude_names:
            continue
        sources.append(path)

    return sorted(sources, key=lambda p: p.relative_to(source_dir).as_posix())


class ClangScanner:
    """
    Scanner for export annotations using libclang.

    Extracts, in source order, one Declaration per annotation with its
    directives already parsed.
    """

    def __init__(
        self,
        directive_parser: DirectiveParser,
        include_dirs: Optional[list[Path]] = None,
        clang_args: Optional[list[str]] = None,
    ):
        """
        Initialize the scanner.

        Args:
            directive_parser: Parser for annotation comments
            include_dirs: Additional include directories
            clang_args: Arguments passed to clang (language, standard)
        """
        if not HAS_CLANG:
            raise ImportError(
                "libclang is required for scanning. "
                "Install with: pip install libclang"
            )

        self.directive_parser = directive_parser
        self.include_dirs = include_dirs or []
        self.clang_args = clang_args if clang_args is not None else [
            "-x", "c++", "-std=c++17",
        ]

        self._index = Index.create()

    def _build_args(self) -> list[str]:
        """Build clang argument list."""
        args = list(self.clang_args)
        for inc in self.include_dirs:
            args.append(f"-I{inc}")
        return args

    def _tokenize(self, path: Path):
        """Lex a source file, comments included."""
        try:
            tu = self._index.parse(
                str(path),
                args=self._build_args(),
                options=(
                    TranslationUnit.PARSE_SKIP_FUNCTION_BODIES
                    | TranslationUnit.PARSE_INCOMPLETE
                ),
            )
        except TranslationUnitLoadError as e:
            raise ScanError(f"Failed to load {path}: {e}") from e

        for diag in tu.diagnostics:
            logger.debug("%s: %s", path, diag.spelling)

        size = len(path.read_bytes())
        extent = tu.get_extent(str(path), (0, size))
        return list(tu.get_tokens(extent=extent))

    def scan_file(self, path: Path) -> list[Declaration]:
        """
        Scan a single source file.

        Args:
            path: Path to the C++ source

        Returns:
            Declarations in source order

        Raises:
            ScanError: If the file cannot be lexed
            DirectiveError: If an annotation has malformed arguments
            InvalidDeclarationError: If an annotation is not followed by a
                function header
        """
        tokens = self._tokenize(path)
        declarations = []

        i = 0
        while i < len(tokens):
            token = tokens[i]
            i += 1
            if token.kind != TokenKind.COMMENT:
                continue

            args = self.directive_parser.match(token.spelling)
            if args is None:
                continue

            location = SourceLocation(
                file=path,
                line=token.location.line,
                column=token.location.column,
            )
            directives = self.directive_parser.parse(args, location)

            header: list[str] = []
            depth = 0
            terminated = False
            while i < len(tokens):
                tok = tokens[i]
                i += 1
                if tok.kind == TokenKind.COMMENT:
                    continue
                spelling = tok.spelling
                if depth == 0 and spelling in ("{", ";"):
                    terminated = True
                    break
                if spelling == "(":
                    depth += 1
                elif spelling == ")":
                    depth -= 1
                header.append(spelling)

            if not terminated:
                raise InvalidDeclarationError(
                    "Export annotation is not followed by a function", location
                )

            decl = parse_function_header(header, directives, location)
            logger.debug("Found export %s", decl.signature)
            declarations.append(decl)

        return declarations

    def scan(self, paths: list[Path]) -> list[Declaration]:
        """Scan several files, keeping the given file order."""
        declarations = []
        for path in paths:
            found = self.scan_file(path)
            logger.info("Scanned %s: %d exported functions", path, len(found))
            declarations.extend(found)
        return declarations
