# File: layergen/validators.py
"""
LayerGen - Schema & Options Validators
=======================================
Pure-function checks that run on the Pydantic models from
``layergen.models`` before anything is written.

Pydantic already guarantees structural correctness (types, required
fields, unique table names).  The checks here are semantic: tables that
will be skipped for lack of a primary key, names that will not make valid
C# identifiers, options that make generation impossible.

Usage::

    from layergen.validators import validate_full
    result = validate_full(schema, options)
    if not result.is_valid:
        print(result.format_report())
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, FrozenSet, List, Optional, Set

from layergen.models import GenerateOptions, SchemaDefinition
from layergen.utils import apply_naming

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("layergen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight error descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the checks."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def is_valid(self) -> bool:
        return not any(e.is_error for e in self._items)

    def codes(self) -> Set[str]:
        return {e.code for e in self._items}

    def summary(self) -> str:
        return (
            f"Validation: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            prefix: str = "✗" if item.is_error else "⚠"
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            for k, v in item.context.items():
                lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Regex patterns & word lists
# ---------------------------------------------------------------------------

_CSHARP_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^@?[A-Za-z_][A-Za-z0-9_]*$")

# C# keywords that cannot name a class or property without '@'
_CSHARP_KEYWORDS: FrozenSet[str] = frozenset(
    {
        "abstract", "as", "base", "bool", "break", "byte", "case", "catch",
        "char", "checked", "class", "const", "continue", "decimal", "default",
        "delegate", "do", "double", "else", "enum", "event", "explicit",
        "extern", "false", "finally", "fixed", "float", "for", "foreach",
        "goto", "if", "implicit", "in", "int", "interface", "internal", "is",
        "lock", "long", "namespace", "new", "null", "object", "operator",
        "out", "override", "params", "private", "protected", "public",
        "readonly", "ref", "return", "sbyte", "sealed", "short", "sizeof",
        "stackalloc", "static", "string", "struct", "switch", "this",
        "throw", "true", "try", "typeof", "uint", "ulong", "unchecked",
        "unsafe", "ushort", "using", "virtual", "void", "volatile", "while",
    }
)


def _bad_identifier(name: str) -> Optional[str]:
    """Return why *name* is not a usable C# identifier, or None."""
    if not _CSHARP_IDENTIFIER_RE.match(name):
        return "contains characters not allowed in a C# identifier"
    if name in _CSHARP_KEYWORDS:
        return "is a C# keyword"
    return None


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def validate_primary_keys(schema: SchemaDefinition) -> ValidationResult:
    """
    Warn about tables that batch generation will skip (no PK) and tables
    whose composite key will be reduced to its first column.
    """
    result: ValidationResult = ValidationResult()
    for table in schema.tables:
        pk_names: List[str] = [c.name for c in table.primary_keys]
        if not pk_names:
            result.add_warning(
                "NO_PRIMARY_KEY",
                f"Table '{table.name}' has no primary key and will be skipped.",
                {"table": table.name},
            )
        elif len(pk_names) > 1:
            result.add_warning(
                "COMPOSITE_PRIMARY_KEY",
                f"Table '{table.name}' has a composite key {pk_names}; "
                f"only '{pk_names[0]}' is used as the entity Id.",
                {"table": table.name},
            )
    return result


def validate_table_names(
    schema: SchemaDefinition, options: GenerateOptions
) -> ValidationResult:
    """
    Entity names (after the naming transform) must be valid, distinct
    C# identifiers; two tables collapsing to one name would overwrite
    each other's files.  Tables without a primary key are never generated
    and are not checked.
    """
    result: ValidationResult = ValidationResult()
    seen: Dict[str, str] = {}

    names: List[str] = [
        t.name for t in schema.tables if t.has_primary_key
    ] + list(schema.entities)
    for raw_name in names:
        entity_name: str = apply_naming(raw_name, options.is_pascal_case)
        reason: Optional[str] = _bad_identifier(entity_name)
        if reason:
            result.add_error(
                "INVALID_ENTITY_NAME",
                f"Entity name '{entity_name}' (from '{raw_name}') {reason}.",
                {"table": raw_name},
            )
        if entity_name in seen and seen[entity_name] != raw_name:
            result.add_error(
                "ENTITY_NAME_COLLISION",
                f"Tables '{seen[entity_name]}' and '{raw_name}' both map to "
                f"entity '{entity_name}'.",
            )
        seen.setdefault(entity_name, raw_name)
    return result


def validate_column_names(
    schema: SchemaDefinition, options: GenerateOptions
) -> ValidationResult:
    """
    Property names must be valid C# identifiers and distinct per table.
    Only tables that will be generated (those with a primary key) count.
    """
    result: ValidationResult = ValidationResult()
    for table in schema.tables:
        if not table.has_primary_key:
            continue
        seen: Set[str] = set()
        for column in table.columns:
            if column.primary_key:
                prop: str = "Id"
            else:
                prop = apply_naming(column.name, options.is_pascal_case)
            reason: Optional[str] = _bad_identifier(prop)
            if reason:
                result.add_error(
                    "INVALID_PROPERTY_NAME",
                    f"Property '{prop}' on table '{table.name}' {reason}.",
                    {"table": table.name, "column": column.name},
                )
            if prop in seen:
                result.add_error(
                    "DUPLICATE_PROPERTY",
                    f"Table '{table.name}' renders property '{prop}' twice.",
                    {"table": table.name, "column": column.name},
                )
            seen.add(prop)
    return result


def validate_options(options: GenerateOptions) -> ValidationResult:
    """Options that make generation impossible or suspicious."""
    result: ValidationResult = ValidationResult()
    if not options.output_path:
        result.add_error(
            "MISSING_OUTPUT_PATH",
            "No output path configured (options.output_path / OutputPath).",
        )
    for token, namespace in options.namespace_tokens().items():
        if not namespace.strip():
            result.add_warning(
                "EMPTY_NAMESPACE", f"Namespace option '{token}' is empty."
            )
    return result


def validate_full(
    schema: SchemaDefinition, options: GenerateOptions
) -> ValidationResult:
    """Run every check and merge the results."""
    result: ValidationResult = ValidationResult()
    result.merge(validate_options(options))
    result.merge(validate_primary_keys(schema))
    result.merge(validate_table_names(schema, options))
    result.merge(validate_column_names(schema, options))

    logger.info(
        "Validated %d tables, %d entities: %s",
        len(schema.tables),
        len(schema.entities),
        result.summary(),
    )
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_primary_keys",
    "validate_table_names",
    "validate_column_names",
    "validate_options",
    "validate_full",
]

logger.debug("layergen.validators loaded.")
