# File: repogen/templates.py
"""
repogen - Repository Template Engine
======================================
Pure-Python code generation for Go repository files.

This module turns a ``Structure`` into Go source text in three layers:

    1. Statement assembler — ``build_exec_body`` / ``build_query_row_body``
       wrap an SQL string and its arguments in driver-call glue.
    2. Operation synthesizers — ``generate_create``, ``generate_select``,
       ``generate_update``, ``generate_delete``: one ``Method`` each.
    3. ``RepositoryFile`` — an immutable builder that sequences header,
       imports, the ``<Type>Manager`` interface and the method bodies.

**Performance contract:**
    - All string assembly uses ``List[str]`` + ``"\\n".join()``.
    - Synthesizers are pure functions of the ``Structure``.

Placeholder numbering:
    - Create numbers every field ``$1..$n`` in declaration order.
    - Select / Delete number the primary-key fields ``$1..$k``.
    - Update shares one counter across SET and WHERE, so the argument list
      is simply every field in declaration order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Sequence, Tuple

from repogen.models import (
    DEFAULT_RECEIVER_TYPE,
    GenerationConfig,
    Method,
    Structure,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("repogen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_INDENT: str = "\t"
_DOUBLE_INDENT: str = "\t\t"

_CONTEXT_PARAM: str = "ctx context.Context"
_ERROR_RESULT: str = "err error"


def _placeholder(index: int) -> str:
    return f"${index}"


_GO_STRING_ESCAPES: Dict[int, str] = {
    ord("\\"): "\\\\",
    ord('"'): '\\"',
    ord("\n"): "\\n",
    ord("\r"): "\\r",
    ord("\t"): "\\t",
}


def _go_string(text: str) -> str:
    """Render *text* as a Go interpreted string literal (single line)."""
    return f'"{text.translate(_GO_STRING_ESCAPES)}"'


def _call_args(sql: str, values: Sequence[str]) -> str:
    return ", ".join(["ctx", _go_string(sql), *values])


# ---------------------------------------------------------------------------
# Statement assembler
# ---------------------------------------------------------------------------


def build_exec_body(method_name: str, sql: str, values: Sequence[str]) -> str:
    """
    Body for a mutating call: driver error and zero rows affected are both
    returned as errors carrying the method name.
    """
    lines: List[str] = [
        f"{_INDENT}ctg, err := p.db.Exec({_call_args(sql, values)})",
        f"{_INDENT}if err != nil {{",
        f'{_DOUBLE_INDENT}return fmt.Errorf("{method_name} error: %w ", err)',
        f"{_INDENT}}}",
        f"{_INDENT}if ctg.RowsAffected() == 0 {{",
        f'{_DOUBLE_INDENT}return fmt.Errorf("{method_name} error: no rows affected")',
        f"{_INDENT}}}",
        "",
        f"{_INDENT}return nil",
    ]
    return "\n".join(lines)


def build_query_row_body(
    method_name: str,
    sql: str,
    values: Sequence[str],
    scan_targets: Sequence[str],
) -> str:
    """Body for a single-row query scanned into ``element``."""
    lines: List[str] = [
        f"{_INDENT}err = p.db.QueryRow({_call_args(sql, values)})"
        f".Scan({', '.join(scan_targets)})",
        f"{_INDENT}if err != nil {{",
        f'{_DOUBLE_INDENT}return nil, fmt.Errorf("{method_name} error: %w ", err)',
        f"{_INDENT}}}",
        "",
        f"{_INDENT}return element, nil",
    ]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Shared clause builders
# ---------------------------------------------------------------------------


def _primary_key_clause(structure: Structure) -> Tuple[List[str], List[str], List[str]]:
    """
    Return ``(params, where_terms, where_values)`` for the primary-key
    fields, numbered ``$1..$k`` independently of any other clause.
    """
    params: List[str] = []
    where_terms: List[str] = []
    where_values: List[str] = []
    for index, f in enumerate(structure.primary_fields, start=1):
        params.append(f"{f.name} {f.type_name}")
        where_terms.append(f"{f.column or ''} = {_placeholder(index)}")
        where_values.append(f.name)
    return params, where_terms, where_values


# ---------------------------------------------------------------------------
# Operation synthesizers
# ---------------------------------------------------------------------------


def generate_create(structure: Structure) -> Method:
    """``<Type>Create``: INSERT every field, one placeholder per field."""
    name: str = f"{structure.name}Create"

    placeholders: List[str] = []
    columns: List[str] = []
    values: List[str] = []
    for index, f in enumerate(structure.fields, start=1):
        placeholders.append(_placeholder(index))
        columns.append(f.column or "")
        values.append(f"data.{f.name}")

    sql: str = (
        f"INSERT INTO {structure.table_name} ({', '.join(columns)}) "
        f"VALUES ({', '.join(placeholders)})"
    )

    return Method(
        name=name,
        comment=f"// {name} add new {structure.name} to database",
        i_params=f"{_CONTEXT_PARAM}, data *{structure.qualified_name}",
        o_params=_ERROR_RESULT,
        body=build_exec_body(name, sql, values),
    )


def generate_select(structure: Structure) -> Method:
    """``<Type>Select``: fetch one row by primary key into ``element``."""
    name: str = f"{structure.name}Select"

    params, where_terms, where_values = _primary_key_clause(structure)
    columns: List[str] = [f.column or "" for f in structure.fields]
    scan_targets: List[str] = [f"element.{f.name}" for f in structure.fields]

    sql: str = (
        f"SELECT ({', '.join(columns)}) FROM {structure.table_name} "
        f"WHERE ({' AND '.join(where_terms)})"
    )

    return Method(
        name=name,
        comment=f"// {name} get {structure.name} from database by pk",
        i_params=", ".join([_CONTEXT_PARAM, *params]),
        o_params=f"element *{structure.qualified_name}, {_ERROR_RESULT}",
        body=build_query_row_body(name, sql, where_values, scan_targets),
    )


def generate_update(structure: Structure) -> Method:
    """
    ``<Type>Update``: SET the regular fields, WHERE on the primary key.

    Placeholders come from a single counter over all fields, so ``$i``
    always binds ``data.<field i>``.
    """
    name: str = f"{structure.name}Update"

    set_terms: List[str] = []
    where_terms: List[str] = []
    values: List[str] = []
    for index, f in enumerate(structure.fields, start=1):
        term: str = f"{f.column or ''} = {_placeholder(index)}"
        if f.is_primary:
            where_terms.append(term)
        else:
            set_terms.append(term)
        values.append(f"data.{f.name}")

    sql: str = (
        f"UPDATE {structure.table_name} SET ({', '.join(set_terms)}) "
        f"WHERE ({' AND '.join(where_terms)})"
    )

    return Method(
        name=name,
        comment=f"// {name} update {structure.name} in database by pk",
        i_params=f"{_CONTEXT_PARAM}, data *{structure.qualified_name}",
        o_params=_ERROR_RESULT,
        body=build_exec_body(name, sql, values),
    )


def generate_delete(structure: Structure) -> Method:
    """``<Type>Delete``: DELETE by primary key."""
    name: str = f"{structure.name}Delete"

    params, where_terms, where_values = _primary_key_clause(structure)

    sql: str = (
        f"DELETE FROM {structure.table_name} WHERE ({' AND '.join(where_terms)})"
    )

    return Method(
        name=name,
        comment=f"// {name} delete {structure.name} from database by pk",
        i_params=", ".join([_CONTEXT_PARAM, *params]),
        o_params=_ERROR_RESULT,
        body=build_exec_body(name, sql, where_values),
    )


# Rendering order of the interface and the method bodies.
SYNTHESIZERS: Tuple[Callable[[Structure], Method], ...] = (
    generate_create,
    generate_select,
    generate_update,
    generate_delete,
)


# ---------------------------------------------------------------------------
# File builder / renderer
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RepositoryFile:
    """
    Everything that goes into one ``<Type>_repository.go`` file.

    Immutable: each ``with_*`` call returns a new instance, so a partially
    built file can be shared or inspected without side effects.  Imports
    keep insertion order and are not de-duplicated.
    """

    structure: Structure
    relative_path: str
    receiver_type: str = DEFAULT_RECEIVER_TYPE
    header: str = ""
    imports: Tuple[str, ...] = ()
    methods: Tuple[Method, ...] = ()

    def with_header(self, header: str) -> "RepositoryFile":
        return replace(self, header=header)

    def with_import(self, package_name: str) -> "RepositoryFile":
        return replace(self, imports=self.imports + (package_name,))

    def with_method(self, method: Method) -> "RepositoryFile":
        return replace(self, methods=self.methods + (method,))

    def render(self) -> str:
        """Header, imports, ``<Type>Manager`` interface, then each method."""
        manager: str = self.structure.manager_name
        lines: List[str] = [self.header, ""]

        lines.append("import (")
        lines.extend(f'{_INDENT}"{name}"' for name in self.imports)
        lines.append(")")
        lines.append("")

        lines.append(f"// {manager} interface to interact with database")
        lines.append(f"type {manager} interface {{")
        lines.extend(f"{_INDENT}{m.signature}" for m in self.methods)
        lines.append("}")
        lines.append("")

        for m in self.methods:
            lines.append(m.comment)
            lines.append(f"func (p *{self.receiver_type}) {m.signature}{{")
            lines.append(m.body)
            lines.append("}")
            lines.append("")

        return "\n".join(lines) + "\n"


class TemplateGenerator:
    """
    Builds ``RepositoryFile`` values from structures using one
    ``GenerationConfig``.

    Thread-safe: no mutable instance state.
    """

    def __init__(self, config: GenerationConfig) -> None:
        self._config: GenerationConfig = config
        logger.debug(
            "TemplateGenerator initialised (receiver=%s, imports=%s).",
            config.receiver_type,
            config.imports,
        )

    def relative_path_for(self, structure: Structure) -> str:
        return (
            f"{self._config.repository_dir}/"
            f"{self._config.file_name_for(structure.name)}"
        )

    def build_file(self, structure: Structure) -> RepositoryFile:
        repo_file: RepositoryFile = RepositoryFile(
            structure=structure,
            relative_path=self.relative_path_for(structure),
            receiver_type=self._config.receiver_type,
        ).with_header(self._config.header)

        for package_name in self._config.imports:
            repo_file = repo_file.with_import(package_name)

        for synthesize in SYNTHESIZERS:
            repo_file = repo_file.with_method(synthesize(structure))

        logger.debug(
            "Built %s: %d methods.", repo_file.relative_path, len(repo_file.methods)
        )
        return repo_file

    def render(self, structure: Structure) -> str:
        content: str = self.build_file(structure).render()
        logger.debug(
            "Rendered repository for '%s': %d lines.",
            structure.name,
            content.count("\n"),
        )
        return content


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "build_exec_body",
    "build_query_row_body",
    "generate_create",
    "generate_select",
    "generate_update",
    "generate_delete",
    "SYNTHESIZERS",
    "RepositoryFile",
    "TemplateGenerator",
]
