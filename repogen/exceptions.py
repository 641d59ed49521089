# File: repogen/exceptions.py
"""
repogen - Error Taxonomy
=========================

Every failure the pipeline can raise derives from ``RepogenError`` so the
CLI can map it to an exit code with a single ``except`` clause.

    RepogenError
    ├── InputError              — bad path / unreadable config
    ├── SourceParseError        — Go syntax errors, non-struct declarations
    │   ├── UnsupportedTypeError — field type shape we cannot render
    │   └── TagSyntaxError      — malformed struct tag
    ├── ValidationFailedError   — structure failed semantic validation
    └── ExportError             — destination could not be written
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from repogen.validators import ValidationResult


class RepogenError(Exception):
    """Base class for all repogen errors."""


class InputError(RepogenError):
    """The input path or configuration file could not be used."""


class SourceParseError(RepogenError):
    """The Go source could not be turned into a structural model."""

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        self.path: Optional[str] = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class UnsupportedTypeError(SourceParseError):
    """A struct field uses a type shape the generator cannot render."""

    def __init__(
        self,
        structure: str,
        field_name: str,
        node_kind: str,
        *,
        path: Optional[str] = None,
    ) -> None:
        self.structure: str = structure
        self.field_name: str = field_name
        self.node_kind: str = node_kind
        super().__init__(
            f"field '{structure}.{field_name}' has unsupported type "
            f"'{node_kind}' (only plain identifiers and pkg.Type are allowed)",
            path=path,
        )


class TagSyntaxError(SourceParseError):
    """A struct tag is not a sequence of key:\"value\" pairs."""

    def __init__(
        self,
        tag: str,
        offset: int,
        reason: str,
        *,
        field: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        self.tag: str = tag
        self.offset: int = offset
        self.reason: str = reason
        self.field: Optional[str] = field
        location: str = f" on field '{field}'" if field else ""
        super().__init__(
            f"malformed tag {tag!r}{location} at offset {offset}: {reason}",
            path=path,
        )


class ValidationFailedError(RepogenError):
    """Semantic validation of a structure reported errors."""

    def __init__(self, structure: str, result: "ValidationResult") -> None:
        self.structure: str = structure
        self.result: "ValidationResult" = result
        messages: List[str] = [item.message for item in result.errors]
        if not messages:
            messages = [item.message for item in result.warnings]
        super().__init__(
            f"structure '{structure}' failed validation: " + "; ".join(messages)
        )


class ExportError(RepogenError):
    """A generated file could not be written to its destination."""


__all__: List[str] = [
    "RepogenError",
    "InputError",
    "SourceParseError",
    "UnsupportedTypeError",
    "TagSyntaxError",
    "ValidationFailedError",
    "ExportError",
]
