# File: layergen/models.py
"""
LayerGen - Core Data Models
============================
Pydantic V2 models describing the schema input and the generation options.
These models are the single source of truth for the pipeline:
Schema Loading → Validation → Template Rendering → File Output.

Every instance is transient: built per invocation and discarded once the
corresponding files have been written.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.models")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ConfigurationError(ValueError):
    """A required option or collaborator is missing; the run cannot start."""


# ---------------------------------------------------------------------------
# Artifact kinds
# ---------------------------------------------------------------------------


class ArtifactKind(str, Enum):
    """Every kind of file the generator can emit."""

    ENTITY = "entity"
    IREPOSITORY = "irepository"
    REPOSITORY = "repository"
    ISERVICE = "iservice"
    SERVICE = "service"
    CONTROLLER = "controller"
    API_CONTROLLER = "api_controller"
    VIEW_MODEL = "view_model"

    @property
    def template_name(self) -> str:
        return _ARTIFACT_LAYOUT[self][0]

    @property
    def folder(self) -> str:
        return _ARTIFACT_LAYOUT[self][1]

    @property
    def prefix(self) -> str:
        return _ARTIFACT_LAYOUT[self][2]

    @property
    def suffix(self) -> str:
        return _ARTIFACT_LAYOUT[self][3]

    def file_name(self, entity_name: str, extension: str = ".cs") -> str:
        """``<prefix><EntityName><suffix><ext>`` for this artifact."""
        return f"{self.prefix}{entity_name}{self.suffix}{extension}"


# kind → (template, folder, file prefix, file suffix)
_ARTIFACT_LAYOUT: Dict[ArtifactKind, tuple] = {
    ArtifactKind.ENTITY: ("ModelTemplate.txt", "Models", "", ""),
    ArtifactKind.IREPOSITORY: ("IRepositoryTemplate.txt", "IRepositories", "I", "Repository"),
    ArtifactKind.REPOSITORY: ("RepositoryTemplate.txt", "Repositories", "", "Repository"),
    ArtifactKind.ISERVICE: ("IServiceTemplate.txt", "IServices", "I", "Service"),
    ArtifactKind.SERVICE: ("ServiceTemplate.txt", "Services", "", "Service"),
    ArtifactKind.CONTROLLER: ("ControllerTemplate.txt", "Controllers", "", "Controller"),
    ArtifactKind.API_CONTROLLER: (
        "ApiControllerTemplate.txt", "Controllers", "", "ApiController",
    ),
    ArtifactKind.VIEW_MODEL: ("ViewModelTemplate.txt", "ViewModels", "", ""),
}

# The six companion artifacts generated for every entity, in emission order.
ENTITY_COMPANIONS: tuple = (
    ArtifactKind.IREPOSITORY,
    ArtifactKind.REPOSITORY,
    ArtifactKind.ISERVICE,
    ArtifactKind.SERVICE,
    ArtifactKind.CONTROLLER,
    ArtifactKind.API_CONTROLLER,
)


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Schema primitives
# ---------------------------------------------------------------------------


class ColumnInfo(BaseModel):
    """
    One database column as supplied by the schema source.

    ``type_name`` is the semantic (C#) type used in the generated property.
    When only a raw ``db_type`` such as ``varchar(50)`` is given, the
    semantic type is resolved from it.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Column name as stored.")
    type_name: Optional[str] = Field(
        default=None,
        alias="type",
        description="Semantic type name, e.g. 'int', 'string', 'DateTime'.",
    )
    db_type: Optional[str] = Field(
        default=None, description="Raw SQL type, e.g. 'varchar(50)'."
    )
    nullable: bool = Field(default=True, description="Whether NULL is allowed.")
    primary_key: bool = Field(default=False, description="Primary-key column?")
    identity: bool = Field(
        default=False,
        alias="autoincrement",
        description="Identity / auto-increment column.",
    )
    max_length: Optional[int] = Field(
        default=None, ge=0, description="Max length for text columns."
    )
    comment: Optional[str] = Field(default=None, description="Column comment.")

    @model_validator(mode="after")
    def _resolve_type_name(self) -> "ColumnInfo":
        if self.type_name:
            return self
        if not self.db_type:
            raise ValueError(
                f"Column '{self.name}' needs either 'type' or 'db_type'."
            )
        from layergen.properties import resolve_csharp_type

        object.__setattr__(self, "type_name", resolve_csharp_type(self.db_type))
        logger.debug(
            "Resolved column '%s' db_type '%s' → '%s'.",
            self.name,
            self.db_type,
            self.type_name,
        )
        return self

    def __repr__(self) -> str:
        pk_flag: str = " PK" if self.primary_key else ""
        null_flag: str = " NULL" if self.nullable else " NOT NULL"
        return f"<Column {self.name} {self.type_name}{pk_flag}{null_flag}>"


class TableInfo(BaseModel):
    """A table: name, optional comment and its ordered columns."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Table name as stored.")
    comment: Optional[str] = Field(default=None, description="Table comment.")
    columns: List[ColumnInfo] = Field(
        default_factory=list, description="Columns in declaration order."
    )

    @property
    def primary_keys(self) -> List[ColumnInfo]:
        return [c for c in self.columns if c.primary_key]

    @property
    def primary_key(self) -> Optional[ColumnInfo]:
        """The key column that drives generation (first PK column)."""
        pks: List[ColumnInfo] = self.primary_keys
        return pks[0] if pks else None

    @property
    def has_primary_key(self) -> bool:
        return any(c.primary_key for c in self.columns)

    def __repr__(self) -> str:
        return f"<Table {self.name} ({len(self.columns)} cols)>"


class EntityRegistration(BaseModel):
    """
    Statically declared entity: its key type and, optionally, its columns.

    The registry (``{entity_name: EntityRegistration}``) replaces runtime
    type discovery.
    """

    model_config = _SHARED_CONFIG

    key_type: str = Field(default="int", min_length=1, description="Key type name.")
    comment: Optional[str] = Field(default=None)
    columns: List[ColumnInfo] = Field(default_factory=list)

    def to_table(self, entity_name: str) -> TableInfo:
        return TableInfo(name=entity_name, comment=self.comment, columns=self.columns)


# ---------------------------------------------------------------------------
# Tabular result shapes (view models)
# ---------------------------------------------------------------------------

# Python value type → .NET runtime type name
_RUNTIME_TYPE_NAMES: Dict[type, str] = {
    bool: "Boolean",
    int: "Int32",
    float: "Double",
    Decimal: "Decimal",
    str: "String",
    bytes: "Byte[]",
    datetime: "DateTime",
    date: "DateTime",
    time: "TimeSpan",
    timedelta: "TimeSpan",
    UUID: "Guid",
}


def runtime_type_name(value: Any) -> str:
    """Return the .NET runtime type name for a Python value."""
    if value is None:
        return "Object"
    # bool before int: bool is an int subclass
    for py_type, clr_name in _RUNTIME_TYPE_NAMES.items():
        if isinstance(value, py_type):
            return clr_name
    return "Object"


class ResultColumn(BaseModel):
    """A named column of a tabular result with its runtime value type."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1)
    type_name: str = Field(default="String", alias="type", min_length=1)


class ResultShape(BaseModel):
    """The shape of a tabular query result, used to emit a view model."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Shape (result table) name.")
    columns: List[ResultColumn] = Field(default_factory=list)

    @classmethod
    def from_rows(
        cls, name: str, rows: Iterable[Mapping[str, Any]]
    ) -> "ResultShape":
        """
        Infer a shape from result rows.

        Column order follows first appearance; the type comes from the first
        non-None value seen for each column.
        """
        types: Dict[str, Optional[str]] = {}
        for row in rows:
            for key, value in row.items():
                if types.get(key) is None:
                    types[key] = None if value is None else runtime_type_name(value)
        columns: List[ResultColumn] = [
            ResultColumn(name=key, type_name=type_name or "Object")
            for key, type_name in types.items()
        ]
        return cls(name=name, columns=columns)


# ---------------------------------------------------------------------------
# Generation options
# ---------------------------------------------------------------------------


class GenerateOptions(BaseModel):
    """
    Every option the generator recognises.

    Field names are snake_case; the PascalCase aliases (``OutputPath``,
    ``ModelsNamespace``, ``IsPascalCase`` ...) are accepted as well.
    """

    model_config = _SHARED_CONFIG

    output_path: Optional[str] = Field(
        default=None, alias="OutputPath", description="Root output directory."
    )
    models_namespace: str = Field(default="Models", alias="ModelsNamespace")
    irepositories_namespace: str = Field(
        default="IRepositories", alias="IRepositoriesNamespace"
    )
    repositories_namespace: str = Field(
        default="Repositories", alias="RepositoriesNamespace"
    )
    iservices_namespace: str = Field(default="IServices", alias="IServicesNamespace")
    services_namespace: str = Field(default="Services", alias="ServicesNamespace")
    controllers_namespace: str = Field(
        default="Controllers", alias="ControllersNamespace"
    )
    view_models_namespace: str = Field(
        default="ViewModels", alias="ViewModelsNamespace"
    )
    is_pascal_case: bool = Field(
        default=False,
        alias="IsPascalCase",
        description="Rename tables / columns to PascalCase.",
    )
    template_dir: Optional[str] = Field(
        default=None,
        alias="TemplateDir",
        description="Template directory (None → bundled templates).",
    )
    file_extension: str = Field(default=".cs", min_length=1)

    @field_validator("file_extension")
    @classmethod
    def _dotted_extension(cls, v: str) -> str:
        return v if v.startswith(".") else f".{v}"

    def namespace_tokens(self) -> Dict[str, str]:
        """All namespace placeholders and their configured values."""
        return {
            "ModelsNamespace": self.models_namespace,
            "IRepositoriesNamespace": self.irepositories_namespace,
            "RepositoriesNamespace": self.repositories_namespace,
            "IServicesNamespace": self.iservices_namespace,
            "ServicesNamespace": self.services_namespace,
            "ControllersNamespace": self.controllers_namespace,
            "ViewModelsNamespace": self.view_models_namespace,
        }


# ---------------------------------------------------------------------------
# Schema definition (top-level container)
# ---------------------------------------------------------------------------


class SchemaDefinition(BaseModel):
    """
    Everything a schema file can describe: tables, an explicit entity
    registry and view-model result shapes.
    """

    model_config = _SHARED_CONFIG

    tables: List[TableInfo] = Field(default_factory=list)
    entities: Dict[str, EntityRegistration] = Field(default_factory=dict)
    view_models: List[ResultShape] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_unique_table_names(self) -> "SchemaDefinition":
        names: List[str] = [t.name for t in self.tables]
        if len(names) != len(set(names)):
            dupes: List[str] = [n for n in names if names.count(n) > 1]
            raise ValueError(f"Duplicate table names: {sorted(set(dupes))}")
        return self

    @computed_field  # type: ignore[misc]
    @property
    def table_names(self) -> List[str]:
        return [t.name for t in self.tables]

    def get_table(self, name: str) -> Optional[TableInfo]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def __repr__(self) -> str:
        return (
            f"<SchemaDefinition {len(self.tables)} tables, "
            f"{len(self.entities)} entities, "
            f"{len(self.view_models)} view models>"
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ConfigurationError",
    "ArtifactKind",
    "ENTITY_COMPANIONS",
    "ColumnInfo",
    "TableInfo",
    "EntityRegistration",
    "ResultColumn",
    "ResultShape",
    "runtime_type_name",
    "GenerateOptions",
    "SchemaDefinition",
]

logger.debug("layergen.models loaded — %d public symbols.", len(__all__))
