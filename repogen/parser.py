# File: repogen/parser.py
"""
repogen - Go Front-End & Metadata Normalizer
==============================================

Parses Go source with tree-sitter and converts every top-level struct
declaration into a ``Structure``.  The tree-sitter tree is only walked
here; nothing downstream depends on its node shapes.

Normalization rules:
    - Top-level ``type`` declarations are read in file order; other
      declarations are skipped.
    - Only the first spec of a grouped ``type ( ... )`` declaration is read.
    - Field types must be a bare identifier or ``pkg.Type``.
    - ``A, B int`` yields one field per name.
    - Tags are tokenized by ``repogen.tags.parse_tag``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from repogen.exceptions import (
    InputError,
    SourceParseError,
    TagSyntaxError,
    UnsupportedTypeError,
)
from repogen.models import (
    DEFAULT_TABLE_NAME,
    GenerationConfig,
    QualifiedTypeRef,
    SimpleTypeRef,
    StructField,
    Structure,
)
from repogen.tags import parse_tag, unquote_tag_literal

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("repogen.parser")

# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------

GO_LANGUAGE: Language = Language(tree_sitter_go.language())

_TYPE_SPEC_KINDS = ("type_spec", "type_alias")


def _text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8")


def _first_error(node: Node) -> Optional[Node]:
    """Depth-first search for an ERROR or MISSING node."""
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found: Optional[Node] = _first_error(child)
            if found is not None:
                return found
    return None


# ---------------------------------------------------------------------------
# Parsed source
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ParsedSource:
    """A syntactically valid Go file reduced to what normalization needs."""

    package_name: str
    source: bytes
    type_declarations: List[Node] = field(default_factory=list)
    path: Optional[str] = None


class GoSourceParser:
    """
    Thin wrapper around a tree-sitter ``Parser`` for Go.

    Usage::

        parsed = GoSourceParser().parse_file(Path("model/user.go"))
        structures = extract_structures(parsed)
    """

    def __init__(self) -> None:
        self._parser: Parser = Parser(GO_LANGUAGE)

    def parse_file(self, path: Path) -> ParsedSource:
        try:
            source: bytes = path.read_bytes()
        except OSError as exc:
            raise InputError(f"Cannot read Go source {path}: {exc}") from exc
        return self.parse_source(source, path=str(path))

    def parse_source(
        self, source: Union[str, bytes], *, path: Optional[str] = None
    ) -> ParsedSource:
        """
        Parse Go source text.

        Raises:
            SourceParseError: On invalid UTF-8, syntax errors or a missing
                package clause.
        """
        if isinstance(source, str):
            source = source.encode("utf-8")

        try:
            source.decode("utf-8")
        except UnicodeDecodeError as exc:
            line: int = source.count(b"\n", 0, exc.start) + 1
            raise SourceParseError(
                f"invalid UTF-8 byte at offset {exc.start} (line {line})", path=path
            ) from exc

        tree = self._parser.parse(source)
        root: Node = tree.root_node

        if root.has_error:
            bad: Optional[Node] = _first_error(root)
            row, col = (bad.start_point if bad is not None else root.start_point)
            raise SourceParseError(
                f"syntax error at line {row + 1}, column {col + 1}", path=path
            )

        package_name: Optional[str] = None
        declarations: List[Node] = []
        for child in root.named_children:
            if child.type == "package_clause":
                for sub in child.named_children:
                    if sub.type == "package_identifier":
                        package_name = _text(sub, source)
            elif child.type == "type_declaration":
                declarations.append(child)

        if package_name is None:
            raise SourceParseError("missing package clause", path=path)

        logger.debug(
            "Parsed %s: package %s, %d type declaration(s).",
            path or "<memory>",
            package_name,
            len(declarations),
        )
        return ParsedSource(
            package_name=package_name,
            source=source,
            type_declarations=declarations,
            path=path,
        )


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------


def _resolve_type(
    type_node: Node,
    source: bytes,
    structure: str,
    field_name: str,
    path: Optional[str],
) -> Union[SimpleTypeRef, QualifiedTypeRef]:
    if type_node.type == "type_identifier":
        return SimpleTypeRef(name=_text(type_node, source))

    if type_node.type == "qualified_type":
        package_node: Optional[Node] = type_node.child_by_field_name("package")
        name_node: Optional[Node] = type_node.child_by_field_name("name")
        if package_node is not None and name_node is not None:
            return QualifiedTypeRef(
                package=_text(package_node, source),
                name=_text(name_node, source),
            )

    raise UnsupportedTypeError(structure, field_name, type_node.type, path=path)


def _normalize_fields(
    list_node: Node,
    source: bytes,
    structure: str,
    path: Optional[str],
) -> List[StructField]:
    fields: List[StructField] = []

    for decl in list_node.named_children:
        if decl.type != "field_declaration":
            continue

        type_node: Optional[Node] = decl.child_by_field_name("type")
        if type_node is None:
            raise SourceParseError(
                f"field without a type in struct '{structure}'", path=path
            )

        names: List[str] = [
            _text(n, source) for n in decl.children_by_field_name("name")
        ]
        if not names:
            raise UnsupportedTypeError(
                structure, _text(type_node, source), "embedded_field", path=path
            )

        tags: Dict[str, str] = {}
        tag_node: Optional[Node] = decl.child_by_field_name("tag")
        if tag_node is not None:
            literal: str = _text(tag_node, source)
            try:
                tags = parse_tag(unquote_tag_literal(literal))
            except TagSyntaxError as exc:
                raise TagSyntaxError(
                    exc.tag,
                    exc.offset,
                    exc.reason,
                    field=f"{structure}.{names[0]}",
                    path=path,
                ) from exc

        type_ref = _resolve_type(type_node, source, structure, names[0], path)
        for name in names:
            fields.append(StructField(name=name, type_ref=type_ref, tags=dict(tags)))

    return fields


def normalize_type_declaration(
    package_name: str,
    declaration: Node,
    source: bytes,
    *,
    table_name: Optional[str] = None,
    path: Optional[str] = None,
) -> Structure:
    """
    Convert one ``type_declaration`` node into a ``Structure``.

    Only the first spec of a grouped declaration is read; the others are
    reported at WARNING level.

    Raises:
        SourceParseError: Empty group, alias, generic or non-struct type.
        UnsupportedTypeError: A field type other than ``T`` / ``pkg.T``.
        TagSyntaxError: A malformed field tag.
    """
    specs: List[Node] = [
        c for c in declaration.named_children if c.type in _TYPE_SPEC_KINDS
    ]
    if not specs:
        row: int = declaration.start_point[0]
        raise SourceParseError(
            f"empty type declaration group at line {row + 1}", path=path
        )

    spec: Node = specs[0]
    for ignored in specs[1:]:
        ignored_name: Optional[Node] = ignored.child_by_field_name("name")
        logger.warning(
            "Skipping type '%s' in %s: only the first spec of a type group is read.",
            _text(ignored_name, source) if ignored_name is not None else "?",
            path or "<memory>",
        )

    name_node: Optional[Node] = spec.child_by_field_name("name")
    type_node: Optional[Node] = spec.child_by_field_name("type")
    if name_node is None or type_node is None:
        raise SourceParseError("incomplete type declaration", path=path)
    name: str = _text(name_node, source)

    if spec.type == "type_alias":
        raise SourceParseError(f"type '{name}' is an alias, not a struct", path=path)
    if spec.child_by_field_name("type_parameters") is not None:
        raise SourceParseError(
            f"generic struct '{name}' is not supported", path=path
        )
    if type_node.type != "struct_type":
        raise SourceParseError(
            f"type '{name}' is a {type_node.type}, not a struct", path=path
        )

    fields: List[StructField] = []
    for child in type_node.named_children:
        if child.type == "field_declaration_list":
            fields = _normalize_fields(child, source, name, path)

    structure: Structure = Structure(
        package_name=package_name,
        table_name=table_name or DEFAULT_TABLE_NAME,
        name=name,
        fields=fields,
    )

    logger.info("Normalized %r", structure)
    return structure


def extract_structures(
    parsed: ParsedSource,
    config: Optional[GenerationConfig] = None,
) -> List[Structure]:
    """
    Normalize every top-level type declaration of a parsed file.

    The table name of each structure comes from *config* when given.
    """
    structures: List[Structure] = []
    for declaration in parsed.type_declarations:
        structure: Structure = normalize_type_declaration(
            parsed.package_name,
            declaration,
            parsed.source,
            path=parsed.path,
        )
        if config is not None:
            structure = structure.model_copy(
                update={"table_name": config.table_for(structure.name)}
            )
        structures.append(structure)
    return structures


__all__: List[str] = [
    "GO_LANGUAGE",
    "GoSourceParser",
    "ParsedSource",
    "normalize_type_declaration",
    "extract_structures",
]
