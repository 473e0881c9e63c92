# File: layergen/__init__.py
"""
LayerGen — Layered C# Code Generator
=====================================

Generates the layered boilerplate of a Zxw.Framework.NetCore style
application from table metadata: entity classes, repository and service
interfaces with their implementations, MVC and API controllers, and view
models for tabular query results.

Architecture overview::

    ┌──────────────┐     ┌───────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ CodeGenerator │────▶│  TemplateStore   │
    │   (cli.py)   │     │ (generator.py)│     │  (templates.py)  │
    └──────────────┘     └───────┬───────┘     └──────────────────┘
                                 │
                 ┌───────────────┼───────────────┬────────────┐
                 ▼               ▼               ▼            ▼
           ┌──────────┐   ┌───────────┐   ┌────────────┐ ┌─────────┐
           │validators│   │  models   │   │ properties │ │ writer  │
           │  (.py)   │   │  (.py)    │   │   (.py)    │ │ (.py)   │
           └──────────┘   └───────────┘   └────────────┘ └─────────┘

Usage::

    # As a library
    from layergen import CodeGenerator, GenerateOptions
    gen = CodeGenerator(GenerateOptions(output_path="./out"))
    gen.generate_single("User", "int")

    # From the command line
    layergen --schema schema.yaml --output ./Generated --verbose
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from layergen.models import (
    ArtifactKind,
    ColumnInfo,
    ConfigurationError,
    EntityRegistration,
    GenerateOptions,
    ResultColumn,
    ResultShape,
    SchemaDefinition,
    TableInfo,
)
from layergen.validators import validate_full, ValidationResult
from layergen.utils import Timer, apply_naming, to_pascal_case
from layergen.templates import TemplateStore, render
from layergen.writer import OutputWriter
from layergen.generator import (
    CodeGenerator,
    FileSchemaSource,
    GenerationReport,
    SchemaSource,
    load_schema_file,
    parse_raw_schema,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Core orchestrator
    "CodeGenerator",
    "GenerationReport",
    "SchemaSource",
    "FileSchemaSource",
    "load_schema_file",
    "parse_raw_schema",
    # Models
    "ArtifactKind",
    "ColumnInfo",
    "ConfigurationError",
    "EntityRegistration",
    "GenerateOptions",
    "ResultColumn",
    "ResultShape",
    "SchemaDefinition",
    "TableInfo",
    # Validation
    "validate_full",
    "ValidationResult",
    # Templates & output
    "TemplateStore",
    "render",
    "OutputWriter",
    # Utilities
    "Timer",
    "apply_naming",
    "to_pascal_case",
]
