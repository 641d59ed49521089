# File: repogen/generator.py
"""
repogen - Master Generation Pipeline (Orchestrator)
=====================================================

Connects every phase together:

    Go Source → Parse → Normalize → Validate → Synthesize → Render → Export

The ``RepositoryGenerator`` class provides both a programmatic API and the
backend for the CLI.

Workflow::

    1. Resolve the input path into Go files (a file, or a directory's *.go).
    2. Parse each file with tree-sitter (parser.py).
    3. Normalize each top-level struct into a ``Structure`` (parser.py).
    4. Validate the structure (validators.py).
    5. Run the four synthesizers and build a ``RepositoryFile`` (templates.py).
    6. Write it to ``repository/<Type>_repository.go`` (exporters.py).
    7. Return a ``GenerationReport`` with metrics.

Error handling strategy:
    - Fail fast: the first error of any kind aborts the whole run.
    - Files are processed strictly in sorted order, structures in
      declaration order, so output is byte-identical across runs.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import pydantic
import yaml

from repogen.exceptions import InputError, ValidationFailedError
from repogen.exporters import FileRecord, RepositoryExporter
from repogen.models import GenerationConfig, Structure
from repogen.parser import GoSourceParser, ParsedSource, extract_structures
from repogen.templates import RepositoryFile, TemplateGenerator
from repogen.utils import Timer, discover_go_files
from repogen.validators import ValidationResult, validate_config, validate_structure

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("repogen.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``RepositoryGenerator.generate_from_path()``.

    Only successful runs produce a report; failures raise.
    """

    input_path: str = ""
    output_root: str = ""
    dry_run: bool = False

    source_files: List[str] = field(default_factory=list)
    structures: List[str] = field(default_factory=list)
    files: List[FileRecord] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    total_elapsed_seconds: float = 0.0

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        mode: str = " (dry run)" if self.dry_run else ""
        lines.append(f"{'='*60}")
        lines.append(f"  repogen — Generation Report{mode}")
        lines.append(f"{'='*60}")
        lines.append(f"  Input:            {self.input_path}")
        lines.append(f"  Output root:      {self.output_root}")
        lines.append(f"  Source files:     {len(self.source_files)}")
        lines.append(f"  Structures:       {len(self.structures)}")
        lines.append(f"  Files generated:  {len(self.files)}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")

        if self.step_metrics:
            lines.append(f"{'─'*60}")
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                lines.append(
                    f"    ✓ {step.step_name:<32s} "
                    f"{step.elapsed_seconds:>7.3f}s  {step.detail}"
                )

        if self.files:
            lines.append(f"{'─'*60}")
            lines.append("  Files:")
            for record in self.files:
                lines.append(f"    → {record.relative_path}")

        if self.validation_warnings:
            lines.append(f"{'─'*60}")
            lines.append(f"  Warnings ({len(self.validation_warnings)}):")
            for warn in self.validation_warnings:
                lines.append(f"    ⚠ {warn}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Config loader helpers
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
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def parse_raw_config(
    raw: Dict[str, Any],
    overrides: Optional[Dict[str, Any]] = None,
) -> GenerationConfig:
    """
    Build a ``GenerationConfig`` from a raw mapping.

    The settings live under a top-level ``config`` key, or the whole
    mapping is the config.  *overrides* win over file values.

    Raises:
        InputError: If the mapping does not validate.
    """
    data: Any = raw.get("config", raw)
    if not isinstance(data, dict):
        raise InputError(
            f"'config' must be a mapping, got {type(data).__name__}."
        )
    merged: Dict[str, Any] = {**data, **(overrides or {})}

    try:
        return GenerationConfig.model_validate(merged)
    except pydantic.ValidationError as exc:
        raise InputError(f"Config validation failed: {exc}") from exc


def load_config_file(
    path: Path,
    overrides: Optional[Dict[str, Any]] = None,
) -> GenerationConfig:
    """
    Load a generation config file (JSON or YAML), dispatching on extension.

    Raises:
        InputError: If the file is missing, unparsable or invalid.
    """
    if not path.is_file():
        raise InputError(f"Config file not found: {path}")

    try:
        if path.suffix.lower() == ".json":
            raw: Dict[str, Any] = _load_json_file(path)
        else:
            raw = _load_yaml_file(path)
    except (OSError, ValueError) as exc:
        raise InputError(str(exc)) from exc

    logger.info("Loaded config file: %s (%d top-level keys).", path, len(raw))
    return parse_raw_config(raw, overrides)


# ---------------------------------------------------------------------------
# RepositoryGenerator — Master orchestrator
# ---------------------------------------------------------------------------


class RepositoryGenerator:
    """
    Master pipeline orchestrator.

    Usage::

        generator = RepositoryGenerator(GenerationConfig(table_name="users"))

        # From a file or directory
        report = generator.generate_from_path(Path("model/user.go"), Path("."))

        # Pure, in-memory
        text = generator.render_structure(structure)

    The generator is reusable: create once, call generate many times.
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        *,
        fail_on_warnings: bool = False,
        dry_run: bool = False,
        atomic_writes: bool = True,
    ) -> None:
        """
        Initialise the generator.

        Args:
            config: Generation settings (defaults reproduce the historical
                    output: table ``testTable``, receiver ``PostgresRepository``).
            fail_on_warnings: Treat validation warnings as errors.
            dry_run: Render everything but write nothing.
            atomic_writes: Write through a temp file + rename.

        Raises:
            ValidationFailedError: If *config* is not usable.
        """
        self._config: GenerationConfig = config or GenerationConfig()
        self._fail_on_warnings: bool = fail_on_warnings
        self._dry_run: bool = dry_run
        self._atomic_writes: bool = atomic_writes

        config_result: ValidationResult = validate_config(self._config)
        if not config_result.is_valid:
            raise ValidationFailedError("<config>", config_result)

        self._parser: GoSourceParser = GoSourceParser()
        self._templates: TemplateGenerator = TemplateGenerator(self._config)

        logger.debug(
            "RepositoryGenerator initialised: fail_on_warnings=%s, dry_run=%s.",
            fail_on_warnings,
            dry_run,
        )

    @property
    def config(self) -> GenerationConfig:
        return self._config

    # -----------------------------------------------------------------
    # Structure level (pure)
    # -----------------------------------------------------------------

    def check_structure(self, structure: Structure) -> ValidationResult:
        """
        Validate *structure*, raising on errors (and on warnings when
        ``fail_on_warnings`` is set).
        """
        result: ValidationResult = validate_structure(structure)

        for warn in result.warnings:
            logger.warning("  ⚠ %s", warn)

        if result.has_errors or (self._fail_on_warnings and result.has_warnings):
            for err in result.errors:
                logger.error("  ✗ %s", err)
            raise ValidationFailedError(structure.name, result)

        return result

    def generate_structure(self, structure: Structure) -> RepositoryFile:
        """Validate and synthesize the repository file for one structure."""
        self.check_structure(structure)
        return self._templates.build_file(structure)

    def render_structure(self, structure: Structure) -> str:
        return self.generate_structure(structure).render()

    # -----------------------------------------------------------------
    # Source level
    # -----------------------------------------------------------------

    def load_structures(self, path: Path) -> List[Structure]:
        parsed: ParsedSource = self._parser.parse_file(path)
        return extract_structures(parsed, self._config)

    def render_source(
        self,
        source: Union[str, bytes],
        *,
        path: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Render every struct of in-memory Go source.

        Returns a dict of relative_path → file_content, in declaration order.
        """
        parsed: ParsedSource = self._parser.parse_source(source, path=path)
        rendered: Dict[str, str] = {}
        for structure in extract_structures(parsed, self._config):
            repo_file: RepositoryFile = self.generate_structure(structure)
            rendered[repo_file.relative_path] = repo_file.render()
        return rendered

    # -----------------------------------------------------------------
    # Full pipeline
    # -----------------------------------------------------------------

    def generate_from_path(self, path: Path, output_root: Path) -> GenerationReport:
        """
        Full pipeline: discover → parse → validate → generate → export.

        Args:
            path: A Go file, or a directory whose ``*.go`` files are read.
            output_root: Directory holding ``repository/``.

        Returns:
            GenerationReport with metrics.

        Raises:
            RepogenError: On the first failure of any step.
        """
        pipeline_start: float = time.perf_counter()
        report: GenerationReport = GenerationReport(
            input_path=str(path),
            output_root=str(output_root),
            dry_run=self._dry_run,
        )

        try:
            sources: List[Path] = discover_go_files(path)
        except FileNotFoundError as exc:
            raise InputError(str(exc)) from exc
        if not sources:
            raise InputError(f"No Go source files found in {path}")

        exporter: RepositoryExporter = RepositoryExporter(
            output_root,
            atomic_writes=self._atomic_writes,
            dry_run=self._dry_run,
        )

        for source_path in sources:
            logger.info("Processing %s", source_path)
            report.source_files.append(str(source_path))

            with Timer(f"parse {source_path.name}") as t_parse:
                structures: List[Structure] = self.load_structures(source_path)
            report.step_metrics.append(GenerationStepMetric(
                step_name=f"Parse {source_path.name}",
                elapsed_seconds=t_parse.elapsed,
                detail=f"{len(structures)} struct(s)",
            ))

            for structure in structures:
                record, warnings = self._generate_and_export(structure, exporter)
                report.structures.append(structure.name)
                report.files.append(record)
                report.validation_warnings.extend(warnings)

        report.total_elapsed_seconds = time.perf_counter() - pipeline_start
        logger.info(
            "Generation complete: %d file(s) in %.3fs.",
            len(report.files),
            report.total_elapsed_seconds,
        )
        return report

    def _generate_and_export(
        self,
        structure: Structure,
        exporter: RepositoryExporter,
    ) -> Tuple[FileRecord, List[str]]:
        result: ValidationResult = self.check_structure(structure)
        repo_file: RepositoryFile = self._templates.build_file(structure)
        record: FileRecord = exporter.export(repo_file)
        return record, [str(w) for w in result.warnings]


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "RepositoryGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "load_config_file",
    "parse_raw_config",
]

logger.debug("repogen.generator loaded.")
