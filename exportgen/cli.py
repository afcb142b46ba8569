"""
Command-line interface for exportgen.

Usage:
    python -m exportgen <command> [options]

Commands:
    export    Regenerate exports.cpp and exports.h
    types     List the boxed types known after the registration phase
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import ExportConfig
from .errors import ExportError
from .exporter import collect_types, export
from .types.registry import TypeRegistry


def _print_types(registry: TypeRegistry) -> None:
    """Print registered types as an aligned table."""
    rows = [("TYPE", "BOUNDARY", "TO BOUNDARY", "FROM BOUNDARY", "BINDING")]
    for m in registry.mappings():
        rows.append((
            m.semantic_name,
            m.boundary_type,
            m.to_boundary_fn or "-",
            m.from_boundary_fn or "-",
            m.binding_type or "-",
        ))
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    for row in rows:
        print("  ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip())


def run_export(config: ExportConfig, dry_run: bool = False) -> int:
    """Run the export command."""
    result = export(config, dry_run=dry_run)

    if result.is_empty:
        print("No exported functions found.")
        return 0

    if dry_run:
        print(f"// ---- {config.implementation_output_abs}")
        print(result.implementation, end="")
        print(f"// ---- {config.header_output_abs}")
        print(result.header, end="")
        return 0

    print(f"Generated {len(result.declarations)} exports")
    return 0


def run_types(config: ExportConfig) -> int:
    """Run the types command."""
    _print_types(collect_types(config))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="exportgen",
        description="Generate boundary-safe exports for annotated C++ functions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Regenerate the exports of the project in the current directory
  exportgen export

  # Show what would be generated for another project
  exportgen export --path ../mypkg --dry-run

  # List registered types
  exportgen types
""",
    )

    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file (exportgen.toml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser(
        "export",
        help="Regenerate the export files",
    )
    export_parser.add_argument(
        "--path", "-p",
        type=Path,
        help="Project root (default: current directory)",
    )
    export_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the generated files instead of writing them",
    )

    types_parser = subparsers.add_parser(
        "types",
        help="List registered boundary types",
    )
    types_parser.add_argument(
        "--path", "-p",
        type=Path,
        help="Project root (default: current directory)",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Load configuration
    config = ExportConfig.load(args.config, start_path=args.path)

    try:
        if args.command == "export":
            return run_export(config, dry_run=args.dry_run)
        elif args.command == "types":
            return run_types(config)
    except ExportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
