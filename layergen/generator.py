# File: layergen/generator.py
"""
LayerGen - Generation Pipeline (Orchestrator)
==============================================

Connects every phase together:

    Schema Source → Validation → Template Rendering → Output Writer

Workflow for a schema-driven run::

    1. Load a schema file (JSON/YAML) or pull tables from a SchemaSource.
    2. Parse into ``SchemaDefinition`` + ``GenerateOptions`` (models.py).
    3. For every table with a primary key:
         a. apply the naming transform to the table name,
         b. emit the entity file (Models/<Name>.cs),
         c. emit the six companion artifacts (repository / service /
            controller layers).
    4. Emit registered entities and view models.
    5. Return a ``GenerationReport`` with counts, skipped tables and errors.

Error handling strategy:
    - Missing configuration (no output path, no schema source) raises
      ``ConfigurationError`` before anything is written.
    - Tables without a primary key are skipped and listed in the report.
    - Existing files are skipped unless overwrite is requested.
    - A write failure is isolated to its file: logged, recorded in the
      report, and the batch continues.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    runtime_checkable,
)

import yaml

from layergen.models import (
    ENTITY_COMPANIONS,
    ArtifactKind,
    ConfigurationError,
    EntityRegistration,
    GenerateOptions,
    ResultShape,
    SchemaDefinition,
    TableInfo,
)
from layergen.properties import render_model_properties, render_view_model_properties
from layergen.templates import TemplateStore
from layergen.utils import Timer, apply_naming
from layergen.writer import OutputWriter

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.generator")

TableSelector = Callable[[TableInfo], bool]

# Namespace placeholders each companion template receives
_ARTIFACT_NAMESPACES: Dict[ArtifactKind, Tuple[str, ...]] = {
    ArtifactKind.IREPOSITORY: ("ModelsNamespace", "IRepositoriesNamespace"),
    ArtifactKind.REPOSITORY: (
        "ModelsNamespace", "IRepositoriesNamespace", "RepositoriesNamespace",
    ),
    ArtifactKind.ISERVICE: (
        "ModelsNamespace", "IRepositoriesNamespace", "IServicesNamespace",
    ),
    ArtifactKind.SERVICE: (
        "ModelsNamespace", "IRepositoriesNamespace", "IServicesNamespace",
        "ServicesNamespace",
    ),
    ArtifactKind.CONTROLLER: (
        "ModelsNamespace", "IServicesNamespace", "ControllersNamespace",
    ),
    ArtifactKind.API_CONTROLLER: (
        "ModelsNamespace", "IServicesNamespace", "ControllersNamespace",
    ),
}


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Outcome of a generation call: what was written, what was skipped and
    what failed.
    """

    output_directory: str = ""
    tables_processed: int = 0
    files_written: int = 0
    files_skipped: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    elapsed_seconds: float = 0.0

    written_paths: List[str] = field(default_factory=list)
    skipped_tables: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def merge(self, other: "GenerationReport") -> None:
        """Fold *other*'s counts into this report."""
        self.tables_processed += other.tables_processed
        self.files_written += other.files_written
        self.files_skipped += other.files_skipped
        self.total_bytes += other.total_bytes
        self.total_lines += other.total_lines
        self.elapsed_seconds += other.elapsed_seconds
        self.written_paths.extend(other.written_paths)
        self.skipped_tables.extend(other.skipped_tables)
        self.errors.extend(other.errors)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append(f"{'='*60}")
        lines.append("  LayerGen — Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:            {status}")
        lines.append(f"  Output:            {self.output_directory}")
        lines.append(f"  Tables processed:  {self.tables_processed}")
        lines.append(f"  Tables skipped:    {len(self.skipped_tables)}")
        lines.append(f"  Files written:     {self.files_written}")
        lines.append(f"  Files kept:        {self.files_skipped}")
        lines.append(f"  Total lines:       {self.total_lines:,}")
        lines.append(f"  Total bytes:       {self.total_bytes:,}")
        lines.append(f"  Total time:        {self.elapsed_seconds:.3f}s")

        if self.skipped_tables:
            lines.append(f"{'─'*60}")
            lines.append(f"  Skipped Tables — no primary key ({len(self.skipped_tables)}):")
            for tbl in self.skipped_tables:
                lines.append(f"    ⊘ {tbl}")

        if self.errors:
            lines.append(f"{'─'*60}")
            lines.append(f"  Errors ({len(self.errors)}):")
            for err in self.errors:
                lines.append(f"    ✗ {err}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Schema loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_schema_file(path: Path) -> Dict[str, Any]:
    """
    Load a schema definition file (JSON or YAML), dispatching on extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Schema path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s' — trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def parse_raw_schema(
    raw: Dict[str, Any],
    option_overrides: Optional[Mapping[str, Any]] = None,
) -> Tuple[SchemaDefinition, GenerateOptions]:
    """
    Parse a raw dictionary (from JSON/YAML) into validated models.

    Recognised top-level keys:
        - ``options`` (or ``config``): the generation options
        - ``tables``, ``entities``, ``view_models``: the schema, either at
          top level or nested under ``schema``

    *option_overrides* (snake_case field names) win over the file.

    Raises:
        ValueError: If validation fails.
    """
    schema_data: Any = raw.get("schema", raw)
    if not isinstance(schema_data, dict):
        raise ValueError("'schema' must be a mapping.")
    schema_fields: Dict[str, Any] = {
        key: schema_data[key]
        for key in ("tables", "entities", "view_models")
        if schema_data.get(key) is not None
    }

    options_data: Any = raw.get("options", raw.get("config")) or {}
    if not isinstance(options_data, dict):
        raise ValueError("'options' must be a mapping.")

    try:
        schema: SchemaDefinition = SchemaDefinition.model_validate(schema_fields)
    except ValueError as exc:
        raise ValueError(f"Schema validation failed: {exc}") from exc

    try:
        options: GenerateOptions = GenerateOptions.model_validate(options_data)
        if option_overrides:
            merged: Dict[str, Any] = options.model_dump()
            merged.update(option_overrides)
            options = GenerateOptions.model_validate(merged)
    except ValueError as exc:
        raise ValueError(f"Options validation failed: {exc}") from exc

    return schema, options


# ---------------------------------------------------------------------------
# Schema sources
# ---------------------------------------------------------------------------


@runtime_checkable
class SchemaSource(Protocol):
    """Anything that can supply normalized table descriptions."""

    def get_tables(self) -> List[TableInfo]:
        ...


class FileSchemaSource:
    """Schema source backed by a JSON/YAML schema file."""

    def __init__(self, path: Path) -> None:
        self.path: Path = Path(path)

    def get_tables(self) -> List[TableInfo]:
        schema, _ = parse_raw_schema(load_schema_file(self.path))
        logger.info("Read %d tables from %s.", len(schema.tables), self.path)
        return list(schema.tables)

    def __repr__(self) -> str:
        return f"<FileSchemaSource {self.path}>"


# ---------------------------------------------------------------------------
# CodeGenerator
# ---------------------------------------------------------------------------


class CodeGenerator:
    """
    Emits entity, repository, service, controller and view-model files.

    Usage::

        options = GenerateOptions(output_path="./out", is_pascal_case=True)
        generator = CodeGenerator(options)

        generator.generate_single("User", "int")
        report = generator.generate(schema.tables, overwrite=False)
        print(report.summary())

    Single-artifact methods (``generate_entity``, ``generate_irepository``
    ...) return True when the file was written and False when it was kept,
    and let I/O errors propagate.  Batch methods return a
    ``GenerationReport`` and isolate failures per file.
    """

    def __init__(
        self,
        options: GenerateOptions,
        *,
        templates: Optional[TemplateStore] = None,
        schema_source: Optional[SchemaSource] = None,
    ) -> None:
        if not options.output_path:
            raise ConfigurationError(
                "No output path configured (options.output_path / OutputPath)."
            )

        self.options: GenerateOptions = options
        if templates is None:
            templates = TemplateStore(
                Path(options.template_dir) if options.template_dir else None
            )
        self.templates: TemplateStore = templates
        self.schema_source: Optional[SchemaSource] = schema_source
        self.writer: OutputWriter = OutputWriter(Path(options.output_path))

        logger.debug(
            "CodeGenerator initialised: output=%s, pascal_case=%s, templates=%d.",
            options.output_path,
            options.is_pascal_case,
            len(self.templates),
        )

    # -----------------------------------------------------------------
    # Paths & tokens
    # -----------------------------------------------------------------

    def artifact_path(self, kind: ArtifactKind, entity_name: str) -> Path:
        """``<OutputPath>/<Folder>/<prefix><EntityName><Suffix><ext>``."""
        return (
            self.writer.root
            / kind.folder
            / kind.file_name(entity_name, self.options.file_extension)
        )

    def _companion_tokens(
        self, kind: ArtifactKind, entity_name: str, key_type_name: str
    ) -> Dict[str, str]:
        namespaces: Dict[str, str] = self.options.namespace_tokens()
        tokens: Dict[str, str] = {
            token: namespaces[token] for token in _ARTIFACT_NAMESPACES[kind]
        }
        tokens["ModelTypeName"] = entity_name
        tokens["KeyTypeName"] = key_type_name
        return tokens

    # -----------------------------------------------------------------
    # Single artifacts
    # -----------------------------------------------------------------

    def generate_artifact(
        self,
        kind: ArtifactKind,
        entity_name: str,
        key_type_name: str,
        overwrite: bool = False,
    ) -> bool:
        """Render and write one companion artifact for an entity."""
        if kind not in _ARTIFACT_NAMESPACES:
            raise ValueError(f"{kind.value} is not an entity companion artifact.")
        content: str = self.templates.render(
            kind.template_name,
            self._companion_tokens(kind, entity_name, key_type_name),
        )
        return self.writer.write(
            self.artifact_path(kind, entity_name), content, overwrite
        )

    def generate_irepository(
        self, entity_name: str, key_type_name: str, overwrite: bool = False
    ) -> bool:
        return self.generate_artifact(
            ArtifactKind.IREPOSITORY, entity_name, key_type_name, overwrite
        )

    def generate_repository(
        self, entity_name: str, key_type_name: str, overwrite: bool = False
    ) -> bool:
        return self.generate_artifact(
            ArtifactKind.REPOSITORY, entity_name, key_type_name, overwrite
        )

    def generate_iservice(
        self, entity_name: str, key_type_name: str, overwrite: bool = False
    ) -> bool:
        return self.generate_artifact(
            ArtifactKind.ISERVICE, entity_name, key_type_name, overwrite
        )

    def generate_service(
        self, entity_name: str, key_type_name: str, overwrite: bool = False
    ) -> bool:
        return self.generate_artifact(
            ArtifactKind.SERVICE, entity_name, key_type_name, overwrite
        )

    def generate_controller(
        self, entity_name: str, key_type_name: str, overwrite: bool = False
    ) -> bool:
        return self.generate_artifact(
            ArtifactKind.CONTROLLER, entity_name, key_type_name, overwrite
        )

    def generate_api_controller(
        self, entity_name: str, key_type_name: str, overwrite: bool = False
    ) -> bool:
        return self.generate_artifact(
            ArtifactKind.API_CONTROLLER, entity_name, key_type_name, overwrite
        )

    def generate_entity(
        self,
        table: TableInfo,
        overwrite: bool = False,
        key_type_name: Optional[str] = None,
    ) -> bool:
        """
        Emit ``Models/<Name>.cs`` for a table.

        The key type comes from the table's primary key unless given
        explicitly; a table with neither raises ``ValueError``.
        """
        pk = table.primary_key
        if key_type_name is None:
            if pk is None:
                raise ValueError(f"Table '{table.name}' has no primary key.")
            key_type_name = pk.type_name or "object"

        model_name: str = apply_naming(table.name, self.options.is_pascal_case)
        tokens: Dict[str, str] = {
            "ModelsNamespace": self.options.models_namespace,
            "Comment": table.comment or "",
            "TableName": table.name,
            "ModelName": model_name,
            "KeyTypeName": key_type_name,
            "ModelProperties": render_model_properties(
                table.columns, self.options.is_pascal_case
            ),
        }
        content: str = self.templates.render(ArtifactKind.ENTITY.template_name, tokens)
        return self.writer.write(
            self.artifact_path(ArtifactKind.ENTITY, model_name), content, overwrite
        )

    def generate_view_model(
        self,
        shape: Optional[ResultShape],
        class_name: Optional[str] = None,
        overwrite: bool = True,
    ) -> bool:
        """
        Emit ``ViewModels/<ClassName>.cs`` for one tabular result shape.

        The file is named after *class_name*, not after ``shape.name``; when
        *class_name* is omitted the transformed shape name is used for both.
        """
        if shape is None:
            raise ValueError("A result shape is required to generate a view model.")
        class_name = class_name or apply_naming(shape.name, self.options.is_pascal_case)

        tokens: Dict[str, str] = {
            "ViewModelsNamespace": self.options.view_models_namespace,
            "TableName": shape.name,
            "ClassName": class_name,
            "ViewModelProperties": render_view_model_properties(
                shape.columns, self.options.is_pascal_case
            ),
        }
        content: str = self.templates.render(
            ArtifactKind.VIEW_MODEL.template_name, tokens
        )
        return self.writer.write(
            self.artifact_path(ArtifactKind.VIEW_MODEL, class_name), content, overwrite
        )

    # -----------------------------------------------------------------
    # Per-file isolation
    # -----------------------------------------------------------------

    def _run_isolated(
        self,
        report: GenerationReport,
        label: str,
        action: Callable[[], bool],
    ) -> None:
        """Run one write, recording the outcome; OSError is logged, not raised."""
        try:
            written: bool = action()
        except OSError as exc:
            error_msg: str = f"Failed to write {label}: {type(exc).__name__}: {exc}"
            report.errors.append(error_msg)
            logger.error(error_msg)
            return

        if not written:
            report.files_skipped += 1
            return

        record = self.writer.stats.records[-1]
        report.files_written += 1
        report.total_bytes += record.size_bytes
        report.total_lines += record.line_count
        report.written_paths.append(record.path)

    def _new_report(self) -> GenerationReport:
        return GenerationReport(output_directory=str(self.writer.root.resolve()))

    def _companions_into(
        self,
        report: GenerationReport,
        entity_name: str,
        key_type_name: str,
        overwrite: bool,
    ) -> None:
        for kind in ENTITY_COMPANIONS:
            self._run_isolated(
                report,
                f"{kind.value} for '{entity_name}'",
                lambda kind=kind: self.generate_artifact(
                    kind, entity_name, key_type_name, overwrite
                ),
            )

    # -----------------------------------------------------------------
    # Batch: per entity
    # -----------------------------------------------------------------

    def generate_single(
        self, entity_name: str, key_type_name: str, overwrite: bool = False
    ) -> GenerationReport:
        """
        Generate the six companion artifacts for one entity, in order:
        IRepository, Repository, IService, Service, Controller, ApiController.
        """
        report: GenerationReport = self._new_report()
        with Timer(f"entity {entity_name}") as t:
            self._companions_into(report, entity_name, key_type_name, overwrite)
        report.elapsed_seconds = t.elapsed
        logger.info(
            "Entity '%s': %d written, %d kept.",
            entity_name,
            report.files_written,
            report.files_skipped,
        )
        return report

    def generate_registered(
        self,
        registry: Mapping[str, EntityRegistration],
        overwrite: bool = False,
    ) -> GenerationReport:
        """
        Generate companions for every entry of an explicit entity registry;
        entries that declare columns also get their entity file.
        """
        report: GenerationReport = self._new_report()
        with Timer("registered entities") as t:
            for entity_name, registration in registry.items():
                if registration.columns:
                    table: TableInfo = registration.to_table(entity_name)
                    self._run_isolated(
                        report,
                        f"entity '{entity_name}'",
                        lambda table=table, key=registration.key_type: self.generate_entity(
                            table, overwrite, key_type_name=key
                        ),
                    )
                name: str = apply_naming(entity_name, self.options.is_pascal_case)
                self._companions_into(report, name, registration.key_type, overwrite)
                report.tables_processed += 1
        report.elapsed_seconds = t.elapsed
        return report

    # -----------------------------------------------------------------
    # Batch: schema-driven
    # -----------------------------------------------------------------

    def generate(
        self,
        tables: Iterable[TableInfo],
        overwrite: bool = False,
        selector: Optional[TableSelector] = None,
    ) -> GenerationReport:
        """
        Generate entity + companion files for every table with a primary
        key.  Tables rejected by *selector* are ignored; tables without a
        primary key are skipped and listed in ``report.skipped_tables``.
        """
        report: GenerationReport = self._new_report()

        with Timer("schema generation") as t:
            for table in tables:
                if selector is not None and not selector(table):
                    continue

                pk = table.primary_key
                if pk is None:
                    report.skipped_tables.append(table.name)
                    logger.warning(
                        "Table '%s' has no primary key — skipped.", table.name
                    )
                    continue

                key_type_name: str = pk.type_name or "object"
                entity_name: str = apply_naming(table.name, self.options.is_pascal_case)

                self._run_isolated(
                    report,
                    f"entity '{entity_name}'",
                    lambda table=table: self.generate_entity(table, overwrite),
                )
                self._companions_into(report, entity_name, key_type_name, overwrite)
                report.tables_processed += 1

        report.elapsed_seconds = t.elapsed
        logger.info(
            "Generated %d tables (%d skipped): %d written, %d kept, %d errors.",
            report.tables_processed,
            len(report.skipped_tables),
            report.files_written,
            report.files_skipped,
            len(report.errors),
        )
        return report

    def generate_from_source(
        self,
        source: Optional[SchemaSource] = None,
        overwrite: bool = False,
        selector: Optional[TableSelector] = None,
    ) -> GenerationReport:
        """
        Pull tables from *source* (or the source given at construction)
        and run ``generate``.

        Raises:
            ConfigurationError: If no schema source is available.
        """
        source = source or self.schema_source
        if source is None:
            raise ConfigurationError(
                "No schema source registered; pass one to CodeGenerator "
                "or to generate_from_source()."
            )
        tables: List[TableInfo] = source.get_tables()
        return self.generate(tables, overwrite=overwrite, selector=selector)

    # -----------------------------------------------------------------
    # Batch: view models
    # -----------------------------------------------------------------

    def generate_view_models(
        self, shapes: Iterable[ResultShape], overwrite: bool = False
    ) -> GenerationReport:
        """One view-model file per shape, each named after its shape."""
        report: GenerationReport = self._new_report()
        with Timer("view models") as t:
            for shape in shapes:
                self._run_isolated(
                    report,
                    f"view model '{shape.name}'",
                    lambda shape=shape: self.generate_view_model(
                        shape, shape.name, overwrite
                    ),
                )
        report.elapsed_seconds = t.elapsed
        return report

    # -----------------------------------------------------------------
    # Everything in a schema definition
    # -----------------------------------------------------------------

    def generate_schema(
        self,
        schema: SchemaDefinition,
        overwrite: bool = False,
        selector: Optional[TableSelector] = None,
        include_view_models: bool = True,
    ) -> GenerationReport:
        """Tables, registered entities and (optionally) view models."""
        report: GenerationReport = self.generate(schema.tables, overwrite, selector)
        if schema.entities:
            report.merge(self.generate_registered(schema.entities, overwrite))
        if include_view_models and schema.view_models:
            report.merge(self.generate_view_models(schema.view_models, overwrite))
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CodeGenerator",
    "GenerationReport",
    "SchemaSource",
    "FileSchemaSource",
    "TableSelector",
    "load_schema_file",
    "parse_raw_schema",
]

logger.debug("layergen.generator loaded.")
