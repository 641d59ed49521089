# File: repogen/validators.py
"""
repogen - Structure & Configuration Validators
================================================
A **pure-function validation pipeline** that operates on the models defined
in ``repogen.models``.

Pydantic handles per-field structural correctness.  This module adds the
semantic checks that decide whether a ``Structure`` can be rendered into
valid SQL: every field needs a column, Select/Delete need a primary key,
columns must be unique, and so on.

Usage by downstream modules:
    from repogen.validators import validate_structure
    result = validate_structure(structure)
    if not result.is_valid:
        raise ValidationFailedError(structure.name, result)
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

from repogen.models import TAG_PRIMARY, GenerationConfig, Structure

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("repogen.validators")

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
    """Accumulates ``ValidationError`` instances produced by the pipeline."""

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
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(e.is_warning for e in self._items)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

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


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_GO_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_SQL_TABLE_RE: re.Pattern[str] = re.compile(
    r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$"
)


# ---------------------------------------------------------------------------
# Individual validation functions
# ---------------------------------------------------------------------------


def validate_column_tags(structure: Structure) -> ValidationResult:
    """Every field takes part in Create and Select, so every field needs a column."""
    result: ValidationResult = ValidationResult()

    for f in structure.fields:
        if f.column is None:
            result.add_error(
                "MISSING_COLUMN_TAG",
                f"Field '{structure.name}.{f.name}' has no column tag "
                f"(expected e.g. column:\"{f.name.lower()}\").",
                {"structure": structure.name, "field": f.name},
            )

    return result


def validate_primary_keys(structure: Structure) -> ValidationResult:
    """
    Select and Delete filter on the primary key, so at least one field
    must be tagged ``primary:"true"``.
    """
    result: ValidationResult = ValidationResult()

    if not structure.primary_fields:
        result.add_error(
            "MISSING_PRIMARY_KEY",
            f"Structure '{structure.name}' has no field tagged "
            f"primary:\"true\"; Select and Delete need a WHERE clause.",
            {"structure": structure.name},
        )

    for f in structure.fields:
        value: Optional[str] = f.tags.get(TAG_PRIMARY)
        if value is not None and value not in ("true", "false"):
            result.add_warning(
                "NON_BOOLEAN_PRIMARY_TAG",
                f"Field '{structure.name}.{f.name}' has primary:\"{value}\"; "
                f"only \"true\" marks a primary key, so it is treated as a "
                f"regular column.",
                {"structure": structure.name, "field": f.name, "value": value},
            )

    return result


def validate_duplicate_columns(structure: Structure) -> ValidationResult:
    result: ValidationResult = ValidationResult()

    owners: Dict[str, List[str]] = defaultdict(list)
    for f in structure.fields:
        if f.column is not None:
            owners[f.column].append(f.name)

    for column, field_names in owners.items():
        if len(field_names) > 1:
            result.add_error(
                "DUPLICATE_COLUMN",
                f"Column '{column}' is mapped by several fields of "
                f"'{structure.name}': {field_names}.",
                {"structure": structure.name, "column": column},
            )

    return result


def validate_updatable_columns(structure: Structure) -> ValidationResult:
    result: ValidationResult = ValidationResult()

    if structure.fields and not structure.regular_fields:
        result.add_warning(
            "NO_UPDATABLE_COLUMNS",
            f"Every field of '{structure.name}' is part of the primary key; "
            f"the generated Update has an empty SET clause.",
            {"structure": structure.name},
        )

    return result


def validate_structure(structure: Structure) -> ValidationResult:
    """
    Run all structure-level validators.  Returns a merged ``ValidationResult``.
    """
    result: ValidationResult = ValidationResult()

    validators: List[Callable[[Structure], ValidationResult]] = [
        validate_column_tags,
        validate_primary_keys,
        validate_duplicate_columns,
        validate_updatable_columns,
    ]

    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(structure))

    logger.info("Structure '%s': %s", structure.name, result.summary())
    return result


def validate_config(config: GenerationConfig) -> ValidationResult:
    """Check that configured names can be spliced into Go and SQL text."""
    result: ValidationResult = ValidationResult()

    if not _GO_IDENTIFIER_RE.match(config.receiver_type):
        result.add_error(
            "INVALID_RECEIVER_TYPE",
            f"Receiver type '{config.receiver_type}' is not a Go identifier.",
            {"receiver_type": config.receiver_type},
        )

    tables: Dict[str, str] = {"<default>": config.table_name}
    tables.update(config.table_overrides)
    for structure_name, table in tables.items():
        if not _SQL_TABLE_RE.match(table):
            result.add_error(
                "INVALID_TABLE_NAME",
                f"Table name '{table}' (for {structure_name}) is not a plain "
                f"or schema-qualified SQL identifier.",
                {"structure": structure_name, "table": table},
            )

    if "/" in config.file_suffix or "\\" in config.file_suffix:
        result.add_error(
            "INVALID_FILE_SUFFIX",
            f"File suffix '{config.file_suffix}' must not contain a path separator.",
            {"file_suffix": config.file_suffix},
        )

    logger.debug("Config validation complete: %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_column_tags",
    "validate_primary_keys",
    "validate_duplicate_columns",
    "validate_updatable_columns",
    "validate_structure",
    "validate_config",
]
