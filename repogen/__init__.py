# File: repogen/__init__.py
"""
repogen — Go Repository Layer Generator
=========================================

Reads Go struct declarations whose fields carry ``column`` / ``primary``
tags and generates, for each struct, a ``repository/<Type>_repository.go``
file with a ``<Type>Manager`` interface and Create / Select / Update /
Delete methods over a pgx-style ``p.db`` handle.

Architecture overview::

    ┌──────────────┐     ┌────────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ RepositoryGenerator│────▶│ TemplateGenerator│
    │   (cli.py)   │     │  (generator.py)    │     │  (templates.py)  │
    └──────────────┘     └─────────┬──────────┘     └──────────────────┘
                                   │
              ┌──────────────┬─────┴───────┬──────────────┐
              ▼              ▼             ▼              ▼
        ┌──────────┐  ┌───────────┐  ┌──────────┐  ┌───────────┐
        │  parser  │  │validators │  │  models  │  │ exporters │
        │ + tags   │  │  (.py)    │  │  (.py)   │  │  (.py)    │
        └──────────┘  └───────────┘  └──────────┘  └───────────┘

Usage::

    # As a library
    from repogen import GenerationConfig, RepositoryGenerator
    generator = RepositoryGenerator(GenerationConfig(table_name="users"))
    generator.generate_from_path(Path("model/user.go"), Path("."))

    # From the command line
    repogen model/user.go --table-name users -v

Public API:
    - RepositoryGenerator — Master orchestrator
    - GenerationConfig    — Generation settings model
    - Structure           — Normalized Go struct
    - TemplateGenerator   — Repository file builder
    - RepositoryExporter  — File-system writer
    - validate_structure  — Structure validation entry point
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from repogen.exceptions import (
    ExportError,
    InputError,
    RepogenError,
    SourceParseError,
    TagSyntaxError,
    UnsupportedTypeError,
    ValidationFailedError,
)
from repogen.models import (
    GenerationConfig,
    Method,
    QualifiedTypeRef,
    SimpleTypeRef,
    StructField,
    Structure,
)
from repogen.tags import parse_tag
from repogen.parser import GoSourceParser, extract_structures
from repogen.validators import ValidationResult, validate_structure
from repogen.templates import (
    RepositoryFile,
    TemplateGenerator,
    generate_create,
    generate_delete,
    generate_select,
    generate_update,
)
from repogen.exporters import FileRecord, RepositoryExporter
from repogen.generator import GenerationReport, RepositoryGenerator, load_config_file

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Core orchestrator
    "RepositoryGenerator",
    "GenerationReport",
    "load_config_file",
    # Models
    "GenerationConfig",
    "Method",
    "QualifiedTypeRef",
    "SimpleTypeRef",
    "StructField",
    "Structure",
    # Parsing
    "GoSourceParser",
    "extract_structures",
    "parse_tag",
    # Validation
    "validate_structure",
    "ValidationResult",
    # Templates
    "RepositoryFile",
    "TemplateGenerator",
    "generate_create",
    "generate_select",
    "generate_update",
    "generate_delete",
    # Exporters
    "FileRecord",
    "RepositoryExporter",
    # Errors
    "RepogenError",
    "InputError",
    "SourceParseError",
    "UnsupportedTypeError",
    "TagSyntaxError",
    "ValidationFailedError",
    "ExportError",
]
