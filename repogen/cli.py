# File: repogen/cli.py
"""
repogen - Command-Line Interface
==================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Generate for every struct in the current directory
    repogen

    # One file, custom table, output rooted elsewhere
    repogen model/user.go --table-name users -o ./internal

    # Settings from a YAML file, print instead of writing
    repogen model/ -c repogen.yaml --stdout

    # Show version
    python -m repogen --version

Exit codes:
    0 — success
    1 — validation error
    2 — generation error (Go syntax, unsupported type, malformed tag)
    3 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, NoReturn, Optional, Sequence

from repogen.exceptions import (
    ExportError,
    InputError,
    RepogenError,
    ValidationFailedError,
)

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("repogen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root repogen logger based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    formatter: logging.Formatter = logging.Formatter(fmt, datefmt=datefmt)
    handler.setFormatter(formatter)

    root_logger: logging.Logger = logging.getLogger("repogen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from repogen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="repogen",
        description=(
            "repogen — Go repository layer generator.\n\n"
            "Reads Go struct declarations tagged with column/primary and "
            "writes a <Type>_repository.go file with Create, Select, Update "
            "and Delete methods for each of them."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s\n"
            "  %(prog)s model/user.go --table-name users\n"
            "  %(prog)s model/ -c repogen.yaml -o ./internal\n"
            "  %(prog)s model/user.go --stdout\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"repogen v{__version__}",
    )

    # --- Input ---
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        metavar="PATH",
        help="Go file, or directory whose *.go files are read (default: '.').",
    )

    # --- Output ---
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=".",
        metavar="DIR",
        help=(
            "Directory holding the repository/ directory (default: '.'). "
            "repository/ itself must already exist."
        ),
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Generation settings file (YAML or JSON).",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Run the full pipeline but don't write files to disk.",
    )
    mode_group.add_argument(
        "--stdout",
        action="store_true",
        default=False,
        help="Print the generated files instead of writing them.",
    )

    # --- Config overrides ---
    config_group = parser.add_argument_group("configuration overrides")
    config_group.add_argument(
        "--table-name",
        type=str,
        default=None,
        metavar="TABLE",
        help="SQL table used by the generated statements.",
    )
    config_group.add_argument(
        "--receiver-type",
        type=str,
        default=None,
        metavar="TYPE",
        help="Go type the generated methods are bound to.",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--fail-on-warnings",
        action="store_true",
        default=False,
        help="Treat validation warnings as errors.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, object]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, object] = {}

    if args.table_name is not None:
        overrides["table_name"] = args.table_name

    if args.receiver_type is not None:
        overrides["receiver_type"] = args.receiver_type

    return overrides


# ---------------------------------------------------------------------------
# Run modes
# ---------------------------------------------------------------------------


def _run_stdout(source_path: Path, args: argparse.Namespace) -> None:
    """Render every structure under *source_path* to standard output."""
    from repogen.generator import RepositoryGenerator
    from repogen.utils import discover_go_files

    generator: RepositoryGenerator = _make_generator(args)

    try:
        sources: List[Path] = discover_go_files(source_path)
    except FileNotFoundError as exc:
        raise InputError(str(exc)) from exc
    if not sources:
        raise InputError(f"No Go source files found in {source_path}")

    for path in sources:
        for structure in generator.load_structures(path):
            sys.stdout.write(generator.render_structure(structure))


def _run_generation(
    source_path: Path,
    output_dir: Path,
    args: argparse.Namespace,
) -> None:
    from repogen.generator import GenerationReport, RepositoryGenerator

    generator: RepositoryGenerator = _make_generator(args)

    if args.dry_run:
        logger.info("Dry-run mode: files will not be written to disk.")

    report: GenerationReport = generator.generate_from_path(source_path, output_dir)

    if not args.quiet:
        print(report.summary())


def _make_generator(args: argparse.Namespace) -> "RepositoryGenerator":
    from repogen.generator import (
        RepositoryGenerator,
        load_config_file,
        parse_raw_config,
    )

    overrides: Dict[str, object] = _build_config_overrides(args)
    if args.config is not None:
        config = load_config_file(Path(args.config), overrides)
    else:
        config = parse_raw_config({}, overrides)

    return RepositoryGenerator(
        config,
        fail_on_warnings=args.fail_on_warnings,
        dry_run=args.dry_run,
    )


def _exit_code_for(exc: RepogenError) -> int:
    if isinstance(exc, ValidationFailedError):
        return EXIT_VALIDATION_ERROR
    if isinstance(exc, ExportError):
        return EXIT_EXPORT_ERROR
    if isinstance(exc, InputError):
        return EXIT_INPUT_ERROR
    return EXIT_GENERATION_ERROR


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    # --- Verbosity ---
    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose
        logging.disable(logging.NOTSET)

    _setup_logging(verbosity)

    source_path: Path = Path(args.path).resolve()
    output_dir: Path = Path(args.output).resolve()

    logger.info("Input:   %s", source_path)
    logger.info("Output:  %s", output_dir)

    try:
        if args.stdout:
            _run_stdout(source_path, args)
        else:
            _run_generation(source_path, output_dir, args)
    except RepogenError as exc:
        exit_code: int = _exit_code_for(exc)
        logger.error("%s", exc)
        print(f"repogen: error: {exc}", file=sys.stderr)
        sys.exit(exit_code)

    logger.info("Generation completed successfully.")
    sys.exit(EXIT_SUCCESS)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("repogen.cli loaded.")
