# File: layergen/properties.py
"""
LayerGen - Column → C# Property Mapping
========================================
Turns column metadata into C# property declarations with their
data-annotation attributes (``[Key]``, ``[Required]``, ``[MaxLength]`` ...).

Annotations are plain output text keyed by a column condition; the
generated properties are composed by the caller into a class body.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, List, Tuple

from layergen.models import ColumnInfo, ResultColumn
from layergen.utils import apply_naming

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.properties")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_INDENT: str = "\t\t"

ANNOTATION_KEY: str = "[Key]"
ANNOTATION_REQUIRED: str = "[Required]"
ANNOTATION_IDENTITY: str = "[DatabaseGenerated(DatabaseGeneratedOption.Identity)]"

# Type names that already admit null and never take the '?' suffix
_REFERENCE_TYPES: FrozenSet[str] = frozenset({"string", "byte[]", "object"})

_TEXT_TYPE: str = "string"

# Raw SQL type prefix → C# type; first match wins, so longer prefixes go first
_SQL_TYPE_PREFIXES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("tinyint(1)", "bit", "bool", "boolean"), "bool"),
    (("interval",), "TimeSpan"),
    (("bigint", "int8"), "long"),
    (("tinyint", "smallint", "mediumint", "integer", "int", "serial"), "int"),
    (("year",), "int"),
    (("uniqueidentifier", "uuid"), "Guid"),
    (("datetimeoffset",), "DateTimeOffset"),
    (("timestamp", "datetime", "smalldatetime", "date"), "DateTime"),
    (("time",), "TimeSpan"),
    (("decimal", "numeric", "money", "smallmoney"), "decimal"),
    (("real", "float4"), "float"),
    (("double", "float8", "float"), "double"),
    (
        (
            "varchar", "nvarchar", "char", "nchar", "tinytext", "mediumtext",
            "longtext", "ntext", "text", "set", "enum", "json", "xml",
            "character",
        ),
        "string",
    ),
    (
        (
            "tinyblob", "mediumblob", "longblob", "blob", "varbinary",
            "binary", "bytea", "image", "rowversion",
        ),
        "byte[]",
    ),
)

_UNSIGNED_TYPES: Dict[str, str] = {"int": "uint", "long": "ulong"}


# ---------------------------------------------------------------------------
# SQL → C# type resolution
# ---------------------------------------------------------------------------


def resolve_csharp_type(db_type: str) -> str:
    """
    Map a raw database column type to a C# type name.

    Examples:
        >>> resolve_csharp_type("varchar(50)")
        'string'
        >>> resolve_csharp_type("bigint unsigned")
        'ulong'
        >>> resolve_csharp_type("tinyint(1)")
        'bool'

    Unknown types resolve to ``object``.
    """
    lowered: str = db_type.strip().lower()
    for prefixes, csharp_type in _SQL_TYPE_PREFIXES:
        if lowered.startswith(prefixes):
            if "unsigned" in lowered and csharp_type in _UNSIGNED_TYPES:
                return _UNSIGNED_TYPES[csharp_type]
            return csharp_type
    logger.warning("Unknown database type '%s'; using 'object'.", db_type)
    return "object"


def is_value_type(type_name: str) -> bool:
    """True unless the type is text, binary or a generic object."""
    return type_name.lower() not in _REFERENCE_TYPES


def property_type(column: ColumnInfo) -> str:
    """The declared C# type, suffixed with '?' for nullable value types."""
    type_name: str = column.type_name or "object"
    if column.nullable and is_value_type(type_name):
        return f"{type_name}?"
    return type_name


# ---------------------------------------------------------------------------
# Entity properties
# ---------------------------------------------------------------------------


def _column_annotation(column_name: str) -> str:
    return f'[Column("{column_name}")]'


def _max_length_annotation(column: ColumnInfo) -> str:
    """``[MaxLength(n)]`` for text columns with a positive length, else ''."""
    if (column.type_name or "").lower() != _TEXT_TYPE:
        return ""
    if column.max_length is None or column.max_length <= 0:
        return ""
    return f"[MaxLength({column.max_length})]"


def render_entity_property(column: ColumnInfo, is_pascal_case: bool = False) -> str:
    """
    Render the full declaration text for one entity property.

    Primary keys always override the base ``Id`` property::

        [Key]
        [Column("id")]
        [DatabaseGenerated(DatabaseGeneratedOption.Identity)]
        public override int Id {get;set;}
    """
    lines: List[str] = []

    if column.comment:
        lines.append(f"{_INDENT}/// <summary>")
        lines.append(f"{_INDENT}/// {column.comment}")
        lines.append(f"{_INDENT}/// </summary>")

    if column.primary_key:
        lines.append(f"{_INDENT}{ANNOTATION_KEY}")
        lines.append(f"{_INDENT}{_column_annotation(column.name)}")
        if column.identity:
            lines.append(f"{_INDENT}{ANNOTATION_IDENTITY}")
        lines.append(f"{_INDENT}public override {column.type_name} Id {{get;set;}}")
        return "\n".join(lines)

    if is_pascal_case:
        lines.append(f"{_INDENT}{_column_annotation(column.name)}")
    if not column.nullable:
        lines.append(f"{_INDENT}{ANNOTATION_REQUIRED}")
    max_length: str = _max_length_annotation(column)
    if max_length:
        lines.append(f"{_INDENT}{max_length}")
    if column.identity:
        lines.append(f"{_INDENT}{ANNOTATION_IDENTITY}")

    property_name: str = apply_naming(column.name, is_pascal_case)
    lines.append(
        f"{_INDENT}public {property_type(column)} {property_name} {{get;set;}}"
    )
    return "\n".join(lines)


def render_model_properties(
    columns: Iterable[ColumnInfo], is_pascal_case: bool = False
) -> str:
    """All entity properties, each followed by a blank line."""
    blocks: List[str] = [
        render_entity_property(col, is_pascal_case) + "\n" for col in columns
    ]
    return "\n".join(blocks)


# ---------------------------------------------------------------------------
# View-model properties
# ---------------------------------------------------------------------------


def render_view_model_property(
    column: ResultColumn, is_pascal_case: bool = False
) -> str:
    lines: List[str] = []
    if is_pascal_case:
        lines.append(_column_annotation(column.name))
    property_name: str = apply_naming(column.name, is_pascal_case)
    lines.append(f"public {column.type_name} {property_name}{{ get; set; }}")
    return "\n".join(lines)


def render_view_model_properties(
    columns: Iterable[ResultColumn], is_pascal_case: bool = False
) -> str:
    blocks: List[str] = [
        render_view_model_property(col, is_pascal_case) + "\n" for col in columns
    ]
    return "\n".join(blocks)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ANNOTATION_KEY",
    "ANNOTATION_REQUIRED",
    "ANNOTATION_IDENTITY",
    "resolve_csharp_type",
    "is_value_type",
    "property_type",
    "render_entity_property",
    "render_model_properties",
    "render_view_model_property",
    "render_view_model_properties",
]

logger.debug("layergen.properties loaded.")
