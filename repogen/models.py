# File: repogen/models.py
"""
repogen - Core Data Models
===========================
Pydantic V2 models representing a Go struct definition, the generated
repository methods and the generation configuration.  These models form the
single source of truth for the entire pipeline:

    Go Parsing → Normalization → Validation → Synthesis → Rendering → Export

The structural models (``StructField``, ``Structure``, ``Method``) are
frozen: they are created once by a single producer and only read afterwards.
"""

from __future__ import annotations

import logging
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("repogen.models")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TAG_COLUMN: str = "column"
TAG_PRIMARY: str = "primary"

DEFAULT_TABLE_NAME: str = "testTable"
DEFAULT_RECEIVER_TYPE: str = "PostgresRepository"

DEFAULT_HEADER: str = (
    "// code generated automatically\n"
    "// can be edited by hand if needed\n"
    "\n"
    "// Package repository contains the repository layer of the application.\n"
    "// generate this file by running: repogen 'path to file holding struct'\n"
    "package repository"
)

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_FROZEN_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Field type references
# ---------------------------------------------------------------------------


class SimpleTypeRef(BaseModel):
    """A bare identifier type such as ``int64`` or ``Status``."""

    model_config = _FROZEN_CONFIG

    kind: Literal["simple"] = "simple"
    name: str = Field(..., min_length=1, description="Type identifier.")

    def render(self) -> str:
        return self.name


class QualifiedTypeRef(BaseModel):
    """A selector type such as ``time.Time`` or ``uuid.UUID``."""

    model_config = _FROZEN_CONFIG

    kind: Literal["qualified"] = "qualified"
    package: str = Field(..., min_length=1, description="Package selector.")
    name: str = Field(..., min_length=1, description="Type identifier.")

    def render(self) -> str:
        return f"{self.package}.{self.name}"


TypeRef = Annotated[
    Union[SimpleTypeRef, QualifiedTypeRef],
    Field(discriminator="kind"),
]


def type_ref_from_name(type_name: str) -> Union[SimpleTypeRef, QualifiedTypeRef]:
    """Build a type reference from its rendered form (``int64``, ``time.Time``)."""
    if "." in type_name:
        package, _, name = type_name.partition(".")
        return QualifiedTypeRef(package=package, name=name)
    return SimpleTypeRef(name=type_name)


# ---------------------------------------------------------------------------
# Structural model
# ---------------------------------------------------------------------------


class StructField(BaseModel):
    """
    One field of a Go struct: its name, its type and its tag mapping.

    Tag keys are unique; ``column`` names the SQL column and
    ``primary:"true"`` marks the field as part of the primary key.
    """

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Go field identifier.")
    type_ref: TypeRef = Field(..., description="Resolved field type.")
    tags: Dict[str, str] = Field(
        default_factory=dict, description="Tag key → tag value."
    )

    @classmethod
    def of(
        cls,
        name: str,
        type_name: str,
        tags: Optional[Dict[str, str]] = None,
    ) -> "StructField":
        """Shorthand constructor taking the rendered type name."""
        return cls(name=name, type_ref=type_ref_from_name(type_name), tags=tags or {})

    @computed_field  # type: ignore[misc]
    @property
    def type_name(self) -> str:
        return self.type_ref.render()

    @computed_field  # type: ignore[misc]
    @property
    def column(self) -> Optional[str]:
        """SQL column from the ``column`` tag, or None when absent/empty."""
        value: Optional[str] = self.tags.get(TAG_COLUMN)
        return value or None

    @computed_field  # type: ignore[misc]
    @property
    def is_primary(self) -> bool:
        return self.tags.get(TAG_PRIMARY) == "true"

    def __repr__(self) -> str:
        pk_flag: str = " PK" if self.is_primary else ""
        return f"<Field {self.name} {self.type_name} column={self.column}{pk_flag}>"


class Structure(BaseModel):
    """
    Normalized representation of one Go struct declaration.

    Field order is significant: it drives placeholder numbering and column
    ordering in every generated statement.
    """

    model_config = _FROZEN_CONFIG

    package_name: str = Field(
        ..., min_length=1, description="Owning Go package of the struct."
    )
    table_name: str = Field(
        default=DEFAULT_TABLE_NAME, min_length=1, description="Target SQL table."
    )
    name: str = Field(..., min_length=1, description="Struct identifier.")
    fields: List[StructField] = Field(
        default_factory=list, description="Fields in declaration order."
    )

    @computed_field  # type: ignore[misc]
    @property
    def qualified_name(self) -> str:
        """Element type as referenced from the repository package."""
        return f"{self.package_name}.{self.name}"

    @computed_field  # type: ignore[misc]
    @property
    def manager_name(self) -> str:
        return f"{self.name}Manager"

    @computed_field  # type: ignore[misc]
    @property
    def primary_fields(self) -> List[StructField]:
        return [f for f in self.fields if f.is_primary]

    @computed_field  # type: ignore[misc]
    @property
    def regular_fields(self) -> List[StructField]:
        return [f for f in self.fields if not f.is_primary]

    def __repr__(self) -> str:
        return (
            f"<Structure {self.qualified_name} → {self.table_name} "
            f"({len(self.fields)} fields, {len(self.primary_fields)} PK)>"
        )


class Method(BaseModel):
    """
    One generated repository method.

    ``i_params`` / ``o_params`` / ``body`` hold rendered Go text; the
    renderer inserts them verbatim.
    """

    model_config = _FROZEN_CONFIG

    name: str = Field(..., min_length=1, description="Go method name.")
    comment: str = Field(default="", description="Doc comment line(s).")
    i_params: str = Field(default="", description="Input parameter list.")
    o_params: str = Field(default="", description="Output parameter list.")
    body: str = Field(default="", description="Method body statements.")

    @property
    def signature(self) -> str:
        return f"{self.name}({self.i_params}) ({self.o_params})"

    def __repr__(self) -> str:
        return f"<Method {self.signature}>"


# ---------------------------------------------------------------------------
# Code Generation Configuration
# ---------------------------------------------------------------------------


class GenerationConfig(BaseModel):
    """
    Settings that control how repositories are rendered and where they go.

    Every field has a default reproducing the historical output, so an
    empty configuration is valid.
    """

    model_config = _SHARED_CONFIG

    # -- SQL ----------------------------------------------------------------
    table_name: str = Field(
        default=DEFAULT_TABLE_NAME,
        min_length=1,
        description="Table used when no per-structure override exists.",
    )
    table_overrides: Dict[str, str] = Field(
        default_factory=dict,
        description="Struct name → table name.",
    )

    # -- Rendering ----------------------------------------------------------
    receiver_type: str = Field(
        default=DEFAULT_RECEIVER_TYPE,
        min_length=1,
        description="Go type the generated methods are bound to.",
    )
    header: str = Field(
        default=DEFAULT_HEADER,
        description="Provenance comment and package clause.",
    )
    imports: List[str] = Field(
        default_factory=lambda: ["context", "fmt"],
        description="Import paths, rendered in order.",
    )

    # -- Output -------------------------------------------------------------
    repository_dir: str = Field(
        default="repository",
        min_length=1,
        description="Directory (under the output root) receiving the files.",
    )
    file_suffix: str = Field(
        default="_repository.go",
        min_length=1,
        description="Appended to the struct name to form the file name.",
    )

    @field_validator("imports")
    @classmethod
    def _no_blank_imports(cls, v: List[str]) -> List[str]:
        blanks: List[int] = [i for i, imp in enumerate(v) if not imp.strip()]
        if blanks:
            raise ValueError(f"Blank import path at position(s): {blanks}")
        return v

    def table_for(self, structure_name: str) -> str:
        """Table for a struct, honouring ``table_overrides``."""
        return self.table_overrides.get(structure_name, self.table_name)

    def file_name_for(self, structure_name: str) -> str:
        return f"{structure_name}{self.file_suffix}"


__all__: List[str] = [
    "TAG_COLUMN",
    "TAG_PRIMARY",
    "DEFAULT_HEADER",
    "DEFAULT_TABLE_NAME",
    "DEFAULT_RECEIVER_TYPE",
    "SimpleTypeRef",
    "QualifiedTypeRef",
    "TypeRef",
    "type_ref_from_name",
    "StructField",
    "Structure",
    "Method",
    "GenerationConfig",
]
