# File: layergen/cli.py
"""
LayerGen - Command-Line Interface
==================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Generate every table of a schema file
    layergen --schema schema.yaml --output ./Generated

    # PascalCase names, replace existing files, only two tables
    layergen -s schema.yml -o ./out --pascal-case --overwrite \\
        --table user --table order_item

    # Companions for one entity, no schema file needed
    layergen --entity User --key-type int -o ./out

    # Validate only (no file output)
    layergen -s schema.yaml --validate-only

Exit codes:
    0 — success
    1 — validation error
    2 — generation error
    3 — write error
    4 — input/configuration error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence, Tuple

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_WRITE_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root layergen logger based on verbosity level.

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
    formatter: logging.Formatter = logging.Formatter(fmt, datefmt="%H:%M:%S")
    handler.setFormatter(formatter)

    root_logger: logging.Logger = logging.getLogger("layergen")
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
    from layergen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="layergen",
        description=(
            "LayerGen — layered C# code generator.\n\n"
            "Emits entity, repository, service, controller and view-model "
            "files from a schema definition (JSON/YAML) and flat templates."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -s schema.yaml -o ./Generated\n"
            "  %(prog)s -s schema.yaml -o ./out --pascal-case --overwrite\n"
            "  %(prog)s --entity User --key-type int -o ./out\n"
            "  %(prog)s -s schema.yaml --validate-only\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"LayerGen v{__version__}",
    )

    # --- Input / output ---
    parser.add_argument(
        "-s", "--schema",
        type=str,
        default=None,
        metavar="PATH",
        help=(
            "Path to the schema definition file (JSON or YAML). "
            "Required unless --entity is given."
        ),
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Output directory (overrides OutputPath from the schema file).",
    )
    parser.add_argument(
        "-t", "--templates",
        type=str,
        default=None,
        metavar="DIR",
        help="Template directory (default: the bundled templates).",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the schema without generating code.",
    )
    mode_group.add_argument(
        "--entity",
        type=str,
        default=None,
        metavar="NAME",
        help=(
            "Generate the six companion files for a single entity. "
            "With -s, only the schema file's options are used."
        ),
    )
    mode_group.add_argument(
        "--key-type",
        type=str,
        default="int",
        metavar="TYPE",
        help="Key type name for --entity (default: int).",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--overwrite",
        action="store_true",
        default=False,
        help="Replace existing files (default: keep them).",
    )
    behaviour_group.add_argument(
        "--pascal-case",
        dest="pascal_case",
        action="store_true",
        default=None,
        help="Rename tables and columns to PascalCase.",
    )
    behaviour_group.add_argument(
        "--no-pascal-case",
        dest="pascal_case",
        action="store_false",
        help="Keep table and column names as stored.",
    )
    behaviour_group.add_argument(
        "--table",
        dest="tables",
        action="append",
        default=None,
        metavar="NAME",
        help="Only generate this table (repeatable).",
    )
    behaviour_group.add_argument(
        "--no-view-models",
        action="store_true",
        default=False,
        help="Skip view-model generation.",
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
# Option overrides
# ---------------------------------------------------------------------------


def _build_option_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Build an option override dictionary from CLI arguments."""
    overrides: Dict[str, Any] = {}

    if args.output is not None:
        overrides["output_path"] = str(Path(args.output).resolve())

    if args.templates is not None:
        overrides["template_dir"] = str(Path(args.templates).resolve())

    if args.pascal_case is not None:
        overrides["is_pascal_case"] = args.pascal_case

    return overrides


def _load(schema_path: Path, args: argparse.Namespace) -> Tuple[Any, Any]:
    """Load + parse the schema file with CLI overrides applied."""
    from layergen.generator import load_schema_file, parse_raw_schema

    raw_data: Dict[str, Any] = load_schema_file(schema_path)
    return parse_raw_schema(raw_data, _build_option_overrides(args))


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(schema_path: Path, args: argparse.Namespace) -> int:
    """
    Run validation only (no code generation).

    Returns the appropriate exit code.
    """
    from layergen.utils import Timer
    from layergen.validators import validate_full

    logger.info("Running validation-only mode for: %s", schema_path)

    try:
        schema, options = _load(schema_path, args)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load schema: %s", exc)
        return EXIT_INPUT_ERROR

    with Timer("validation") as t:
        result = validate_full(schema, options)

    print(f"\n{'='*50}")
    print("  Schema Validation Report")
    print(f"{'='*50}")
    print(f"  File:     {schema_path.name}")
    print(f"  Tables:   {len(schema.tables)}")
    print(f"  Entities: {len(schema.entities)}")
    print(f"  Time:     {t.elapsed:.3f}s")
    print(f"  Valid:    {'Yes' if result.is_valid else 'No'}")

    if result.errors:
        print(f"\n  Errors ({len(result.errors)}):")
        for err in result.errors:
            print(f"    ✗ {err}")

    if result.warnings:
        print(f"\n  Warnings ({len(result.warnings)}):")
        for warn in result.warnings:
            print(f"    ⚠ {warn}")

    if result.is_valid and not result.warnings:
        print("\n  ✅ All validations passed!")

    print(f"{'='*50}\n")

    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


# ---------------------------------------------------------------------------
# Generation modes
# ---------------------------------------------------------------------------


def _report_exit_code(report: Any) -> int:
    print(report.summary())
    return EXIT_SUCCESS if report.success else EXIT_WRITE_ERROR


def _run_single_entity(args: argparse.Namespace) -> int:
    """
    Companion files for ``--entity``.

    Options come from the schema file's options section when ``-s`` is also
    given (its tables are not generated), otherwise from flags alone.
    """
    from layergen.generator import CodeGenerator
    from layergen.models import GenerateOptions

    try:
        if args.schema is not None:
            logger.info(
                "Using options from %s; its tables are not generated.", args.schema
            )
            _, options = _load(Path(args.schema).resolve(), args)
        else:
            options = GenerateOptions.model_validate(_build_option_overrides(args))
        generator: CodeGenerator = CodeGenerator(options)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return EXIT_INPUT_ERROR

    entity_name: str = args.entity
    if options.is_pascal_case:
        from layergen.utils import to_pascal_case

        entity_name = to_pascal_case(entity_name)

    report = generator.generate_single(entity_name, args.key_type, args.overwrite)
    return _report_exit_code(report)


def _run_generation(schema_path: Path, args: argparse.Namespace) -> int:
    """
    Run the full generation pipeline.

    Returns the appropriate exit code.
    """
    from layergen.generator import CodeGenerator
    from layergen.models import ConfigurationError
    from layergen.validators import validate_full

    try:
        schema, options = _load(schema_path, args)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load schema: %s", exc)
        return EXIT_INPUT_ERROR

    wanted: Optional[set] = set(args.tables) if args.tables else None
    if wanted:
        unknown: List[str] = sorted(
            name for name in wanted if schema.get_table(name) is None
        )
        if unknown:
            logger.warning("Unknown table(s) requested: %s", ", ".join(unknown))
        schema = schema.model_copy(
            update={"tables": [t for t in schema.tables if t.name in wanted]}
        )

    result = validate_full(schema, options)
    for warn in result.warnings:
        logger.warning("%s", warn)
    if not result.is_valid:
        if "MISSING_OUTPUT_PATH" in result.codes():
            logger.error(
                "Output directory is required for generation. "
                "Use -o/--output or set OutputPath in the schema file."
            )
            return EXIT_INPUT_ERROR
        print(result.format_report(), file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    try:
        generator: CodeGenerator = CodeGenerator(options)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return EXIT_INPUT_ERROR

    try:
        report = generator.generate_schema(
            schema,
            overwrite=args.overwrite,
            include_view_models=not args.no_view_models,
        )
    except ValueError as exc:
        logger.error("Generation failed: %s", exc)
        return EXIT_GENERATION_ERROR

    return _report_exit_code(report)


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

    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose

    _setup_logging(verbosity)

    # --- Single-entity mode ---
    if args.entity is not None:
        sys.exit(_run_single_entity(args))

    # --- Schema path ---
    if args.schema is None:
        logger.error("A schema file is required: use -s/--schema or --entity.")
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    schema_path: Path = Path(args.schema).resolve()

    if not schema_path.is_file():
        logger.error("Schema file not found: %s", schema_path)
        sys.exit(EXIT_INPUT_ERROR)

    if args.validate_only:
        sys.exit(_run_validate_only(schema_path, args))

    logger.info("Schema:    %s", schema_path)
    logger.info("Overwrite: %s", args.overwrite)

    exit_code: int = _run_generation(schema_path, args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


def main() -> None:
    """Console-script entry point."""
    cli_main()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_WRITE_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("layergen.cli loaded.")
