# File: crudforge/cli.py
"""
crudforge - Command-Line Interface
====================================

Built on the standard-library ``argparse`` module.

Usage examples::

    # Express backend (default)
    python -m crudforge -s models.yaml -o ./src

    # Fastify backend without slug/publish endpoints
    python -m crudforge -s models.yaml -o ./src --framework fastify \\
        --no-domain-methods

    # Generate in memory only and print the report
    python -m crudforge -s models.json -o ./src --dry-run -v

Exit codes:
    0 - success
    2 - generation error (at least one model was skipped)
    3 - export error
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

from crudforge.strategies import available_strategies

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``crudforge`` logger.

    Args:
        verbosity: -1 = silent, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.CRITICAL + 1

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    handler.setFormatter(logging.Formatter(fmt, datefmt="%H:%M:%S"))

    root_logger: logging.Logger = logging.getLogger("crudforge")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _positive_int(value: str) -> int:
    try:
        number: int = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a value >= 1, got {number}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from crudforge import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="crudforge",
        description=(
            "crudforge - CRUD layer generator.\n\n"
            "Turns data-model documents (JSON/YAML) into TypeScript DTOs, "
            "zod validators, Prisma services, controllers and routes."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -s models.yaml -o ./src\n"
            "  %(prog)s -s models.yaml -o ./src --framework fastify --no-bulk\n"
            "  %(prog)s -s models.json -o ./src --dry-run -v\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"crudforge v{__version__}",
    )

    # --- Input / output ---
    parser.add_argument(
        "-s", "--schema",
        type=str,
        required=True,
        metavar="PATH",
        help="Path to the model document (JSON or YAML).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        required=True,
        metavar="DIR",
        help="Root directory of the generated source tree.",
    )

    # --- Config overrides ---
    config_group = parser.add_argument_group("configuration overrides")
    config_group.add_argument(
        "--framework",
        type=str,
        default=None,
        choices=available_strategies(),
        help="Backend to generate handlers and routes for.",
    )
    config_group.add_argument(
        "--no-domain-methods",
        action="store_true",
        default=False,
        help="Omit slug lookup and publish/unpublish endpoints.",
    )
    config_group.add_argument(
        "--no-bulk",
        action="store_true",
        default=False,
        help="Omit bulk create/update/delete everywhere.",
    )
    config_group.add_argument(
        "--max-batch-size",
        type=_positive_int,
        default=None,
        metavar="N",
        help="Upper bound for bulk request arrays.",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Run the full pipeline but don't write files to disk.",
    )
    behaviour_group.add_argument(
        "--clean",
        action="store_true",
        default=False,
        help="Clean output directory before writing.",
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
        help="Suppress log output and the summary report.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Config values given on the command line."""
    overrides: Dict[str, Any] = {}

    if args.framework is not None:
        overrides["framework"] = args.framework
    if args.no_domain_methods:
        overrides["enable_domain_methods"] = False
    if args.no_bulk:
        overrides["enable_bulk_operations"] = False
    if args.max_batch_size is not None:
        overrides["max_batch_size"] = args.max_batch_size

    return overrides


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def _run_generation(
    schema_path: Path,
    output_dir: Path,
    args: argparse.Namespace,
) -> int:
    """Run the pipeline and map the report onto an exit code."""
    from crudforge.pipeline import CodeGenerator, GenerationReport

    config_overrides: Dict[str, Any] = _build_config_overrides(args)
    generator: CodeGenerator = CodeGenerator(clean_output=args.clean)

    if args.dry_run:
        logger.info("Dry-run mode: files will not be written to disk.")

    report: GenerationReport = generator.generate_from_file(
        schema_path,
        output_dir,
        config_overrides=config_overrides or None,
        dry_run=args.dry_run,
    )

    if not args.quiet:
        print(report.summary())

    if report.input_errors:
        return EXIT_INPUT_ERROR
    if report.model_errors:
        return EXIT_GENERATION_ERROR
    if report.export_errors:
        return EXIT_EXPORT_ERROR
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)

    schema_path: Path = Path(args.schema).resolve()
    if not schema_path.is_file():
        logger.error("Model file not found: %s", schema_path)
        sys.exit(EXIT_INPUT_ERROR)

    output_dir: Path = Path(args.output).resolve()

    logger.info("Models:  %s", schema_path)
    logger.info("Output:  %s", output_dir)
    logger.info("Clean:   %s", args.clean)

    exit_code: int = _run_generation(schema_path, output_dir, args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("crudforge.cli loaded.")
