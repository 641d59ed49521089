"""
tests/test_templates.py
Unit tests for repogen.templates: statement assembler, the four operation
synthesizers and the RepositoryFile builder/renderer.
"""

from __future__ import annotations

import re
from typing import List

import pytest

from repogen.models import DEFAULT_HEADER, GenerationConfig, Method, StructField, Structure
from repogen.templates import (
    SYNTHESIZERS,
    RepositoryFile,
    TemplateGenerator,
    build_exec_body,
    build_query_row_body,
    generate_create,
    generate_delete,
    generate_select,
    generate_update,
)

_SQL_RE = re.compile(r'"((?:INSERT|SELECT|UPDATE|DELETE)[^"]*)"')


def _sql(method: Method) -> str:
    match = _SQL_RE.search(method.body)
    assert match is not None, method.body
    return match.group(1)


def _placeholders(text: str) -> List[int]:
    return [int(n) for n in re.findall(r"\$(\d+)", text)]


EXPECTED_USER_FILE: str = (
    DEFAULT_HEADER
    + "\n"
    + "\n"
    + "import (\n"
    + '\t"context"\n'
    + '\t"fmt"\n'
    + ")\n"
    + "\n"
    + "// UserManager interface to interact with database\n"
    + "type UserManager interface {\n"
    + "\tUserCreate(ctx context.Context, data *model.User) (err error)\n"
    + "\tUserSelect(ctx context.Context, ID int64) (element *model.User, err error)\n"
    + "\tUserUpdate(ctx context.Context, data *model.User) (err error)\n"
    + "\tUserDelete(ctx context.Context, ID int64) (err error)\n"
    + "}\n"
    + "\n"
    + "// UserCreate add new User to database\n"
    + "func (p *PostgresRepository) UserCreate(ctx context.Context, data *model.User) (err error){\n"
    + '\tctg, err := p.db.Exec(ctx, "INSERT INTO testTable (id, name) VALUES ($1, $2)", data.ID, data.Name)\n'
    + "\tif err != nil {\n"
    + '\t\treturn fmt.Errorf("UserCreate error: %w ", err)\n'
    + "\t}\n"
    + "\tif ctg.RowsAffected() == 0 {\n"
    + '\t\treturn fmt.Errorf("UserCreate error: no rows affected")\n'
    + "\t}\n"
    + "\n"
    + "\treturn nil\n"
    + "}\n"
    + "\n"
    + "// UserSelect get User from database by pk\n"
    + "func (p *PostgresRepository) UserSelect(ctx context.Context, ID int64) (element *model.User, err error){\n"
    + '\terr = p.db.QueryRow(ctx, "SELECT (id, name) FROM testTable WHERE (id = $1)", ID).Scan(element.ID, element.Name)\n'
    + "\tif err != nil {\n"
    + '\t\treturn nil, fmt.Errorf("UserSelect error: %w ", err)\n'
    + "\t}\n"
    + "\n"
    + "\treturn element, nil\n"
    + "}\n"
    + "\n"
    + "// UserUpdate update User in database by pk\n"
    + "func (p *PostgresRepository) UserUpdate(ctx context.Context, data *model.User) (err error){\n"
    + '\tctg, err := p.db.Exec(ctx, "UPDATE testTable SET (name = $2) WHERE (id = $1)", data.ID, data.Name)\n'
    + "\tif err != nil {\n"
    + '\t\treturn fmt.Errorf("UserUpdate error: %w ", err)\n'
    + "\t}\n"
    + "\tif ctg.RowsAffected() == 0 {\n"
    + '\t\treturn fmt.Errorf("UserUpdate error: no rows affected")\n'
    + "\t}\n"
    + "\n"
    + "\treturn nil\n"
    + "}\n"
    + "\n"
    + "// UserDelete delete User from database by pk\n"
    + "func (p *PostgresRepository) UserDelete(ctx context.Context, ID int64) (err error){\n"
    + '\tctg, err := p.db.Exec(ctx, "DELETE FROM testTable WHERE (id = $1)", ID)\n'
    + "\tif err != nil {\n"
    + '\t\treturn fmt.Errorf("UserDelete error: %w ", err)\n'
    + "\t}\n"
    + "\tif ctg.RowsAffected() == 0 {\n"
    + '\t\treturn fmt.Errorf("UserDelete error: no rows affected")\n'
    + "\t}\n"
    + "\n"
    + "\treturn nil\n"
    + "}\n"
    + "\n"
)


# ===========================================================================
# Statement assembler
# ===========================================================================


class TestStatementAssembler:
    def test_exec_body_checks_rows_affected(self) -> None:
        body = build_exec_body("XDelete", "DELETE FROM t WHERE (id = $1)", ["ID"])
        lines = body.split("\n")
        assert lines[0] == '\tctg, err := p.db.Exec(ctx, "DELETE FROM t WHERE (id = $1)", ID)'
        assert '\t\treturn fmt.Errorf("XDelete error: %w ", err)' in lines
        assert "\tif ctg.RowsAffected() == 0 {" in lines
        assert '\t\treturn fmt.Errorf("XDelete error: no rows affected")' in lines
        assert lines[-1] == "\treturn nil"

    def test_exec_body_without_values(self) -> None:
        body = build_exec_body("X", "DELETE FROM t", [])
        assert body.startswith('\tctg, err := p.db.Exec(ctx, "DELETE FROM t")')

    def test_query_row_body(self) -> None:
        body = build_query_row_body(
            "XSelect", "SELECT (a) FROM t WHERE (a = $1)", ["A"], ["element.A"]
        )
        lines = body.split("\n")
        assert lines[0] == (
            '\terr = p.db.QueryRow(ctx, "SELECT (a) FROM t WHERE (a = $1)", A)'
            ".Scan(element.A)"
        )
        assert '\t\treturn nil, fmt.Errorf("XSelect error: %w ", err)' in lines
        assert lines[-1] == "\treturn element, nil"

    def test_sql_is_escaped_as_go_string(self) -> None:
        body = build_exec_body("X", 'SELECT "quoted"', [])
        assert '"SELECT \\"quoted\\""' in body

    def test_control_characters_are_escaped(self) -> None:
        body = build_exec_body("X", "INSERT INTO t (a\nb, c\td\r) VALUES ($1)", [])
        first_line = body.split("\n")[0]
        assert first_line == (
            '\tctg, err := p.db.Exec(ctx, "INSERT INTO t (a\\nb, c\\td\\r) VALUES ($1)")'
        )
        assert "\t" not in first_line[1:]


# ===========================================================================
# Synthesizers: the User scenario
# ===========================================================================


class TestUserScenario:
    def test_create(self, user_structure: Structure) -> None:
        method = generate_create(user_structure)
        assert method.name == "UserCreate"
        assert method.comment == "// UserCreate add new User to database"
        assert method.i_params == "ctx context.Context, data *model.User"
        assert method.o_params == "err error"
        assert _sql(method) == "INSERT INTO testTable (id, name) VALUES ($1, $2)"
        assert "data.ID, data.Name)" in method.body

    def test_select(self, user_structure: Structure) -> None:
        method = generate_select(user_structure)
        assert method.name == "UserSelect"
        assert method.i_params == "ctx context.Context, ID int64"
        assert method.o_params == "element *model.User, err error"
        assert _sql(method) == "SELECT (id, name) FROM testTable WHERE (id = $1)"
        assert ".Scan(element.ID, element.Name)" in method.body

    def test_update(self, user_structure: Structure) -> None:
        method = generate_update(user_structure)
        assert method.name == "UserUpdate"
        assert method.i_params == "ctx context.Context, data *model.User"
        assert _sql(method) == "UPDATE testTable SET (name = $2) WHERE (id = $1)"
        assert "data.ID, data.Name)" in method.body

    def test_delete(self, user_structure: Structure) -> None:
        method = generate_delete(user_structure)
        assert method.name == "UserDelete"
        assert method.i_params == "ctx context.Context, ID int64"
        assert method.o_params == "err error"
        assert _sql(method) == "DELETE FROM testTable WHERE (id = $1)"

    def test_synthesizer_order(self, user_structure: Structure) -> None:
        names = [synthesize(user_structure).name for synthesize in SYNTHESIZERS]
        assert names == ["UserCreate", "UserSelect", "UserUpdate", "UserDelete"]

    def test_custom_table(self, user_structure: Structure) -> None:
        structure = user_structure.model_copy(update={"table_name": "users"})
        assert _sql(generate_delete(structure)) == "DELETE FROM users WHERE (id = $1)"


# ===========================================================================
# Synthesizers: placeholder properties
# ===========================================================================


class TestPlaceholderNumbering:
    def test_create_has_one_placeholder_per_field(self, order_structure: Structure) -> None:
        sql = _sql(generate_create(order_structure))
        assert _placeholders(sql) == [1, 2, 3, 4]
        assert "(shop_id, number, created_at, note)" in sql

    def test_select_and_delete_number_primary_keys_from_one(
        self, order_structure: Structure
    ) -> None:
        for synthesize in (generate_select, generate_delete):
            sql = _sql(synthesize(order_structure))
            where = sql[sql.index("WHERE"):]
            assert where == "WHERE (shop_id = $1 AND number = $2)"

    def test_select_and_delete_take_primary_key_params(
        self, order_structure: Structure
    ) -> None:
        for synthesize in (generate_select, generate_delete):
            method = synthesize(order_structure)
            assert method.i_params == "ctx context.Context, ShopID int64, Number int64"
            assert "ShopID, Number)" in method.body

    def test_update_partitions_one_range(self, order_structure: Structure) -> None:
        sql = _sql(generate_update(order_structure))
        assert sql == (
            "UPDATE testTable SET (created_at = $3, note = $4) "
            "WHERE (shop_id = $1 AND number = $2)"
        )
        assert sorted(_placeholders(sql)) == [1, 2, 3, 4]

    def test_update_value_list_follows_declaration_order(
        self, order_structure: Structure
    ) -> None:
        body = generate_update(order_structure).body
        assert "data.ShopID, data.Number, data.CreatedAt, data.Note)" in body

    def test_update_interleaved_primary_key(self) -> None:
        structure = Structure(
            package_name="m",
            name="T",
            fields=[
                StructField.of("A", "string", {"column": "a"}),
                StructField.of("ID", "int", {"column": "id", "primary": "true"}),
                StructField.of("B", "string", {"column": "b"}),
            ],
        )
        sql = _sql(generate_update(structure))
        assert sql == "UPDATE testTable SET (a = $1, b = $3) WHERE (id = $2)"

    def test_primary_other_than_true_is_regular(self) -> None:
        structure = Structure(
            package_name="m",
            name="T",
            fields=[
                StructField.of("ID", "int", {"column": "id", "primary": "true"}),
                StructField.of("N", "int", {"column": "n", "primary": "false"}),
            ],
        )
        assert _sql(generate_delete(structure)) == "DELETE FROM testTable WHERE (id = $1)"
        assert "SET (n = $2)" in _sql(generate_update(structure))

    def test_qualified_type_in_params(self) -> None:
        structure = Structure(
            package_name="m",
            name="Event",
            fields=[
                StructField.of("At", "time.Time", {"column": "at", "primary": "true"}),
            ],
        )
        assert generate_select(structure).i_params == "ctx context.Context, At time.Time"


# ===========================================================================
# RepositoryFile builder / renderer
# ===========================================================================


class TestRepositoryFile:
    def test_builder_is_immutable(self, user_structure: Structure) -> None:
        empty = RepositoryFile(structure=user_structure, relative_path="repository/x.go")
        with_import = empty.with_import("context")
        assert empty.imports == ()
        assert with_import.imports == ("context",)
        assert with_import is not empty

    def test_imports_keep_order_and_duplicates(self, user_structure: Structure) -> None:
        repo_file = (
            RepositoryFile(structure=user_structure, relative_path="r.go")
            .with_import("fmt")
            .with_import("context")
            .with_import("fmt")
        )
        assert repo_file.imports == ("fmt", "context", "fmt")
        rendered = repo_file.render()
        assert 'import (\n\t"fmt"\n\t"context"\n\t"fmt"\n)\n' in rendered

    def test_render_layout(self, user_structure: Structure) -> None:
        rendered = TemplateGenerator(GenerationConfig()).render(user_structure)
        assert rendered == EXPECTED_USER_FILE

    def test_render_is_deterministic(self, user_structure: Structure) -> None:
        generator = TemplateGenerator(GenerationConfig())
        assert generator.render(user_structure) == generator.render(user_structure)

    def test_interface_lists_every_signature(self, order_structure: Structure) -> None:
        repo_file = TemplateGenerator(GenerationConfig()).build_file(order_structure)
        rendered = repo_file.render()
        for method in repo_file.methods:
            assert f"\t{method.signature}\n" in rendered
            assert f"func (p *PostgresRepository) {method.signature}{{\n" in rendered


class TestTemplateGenerator:
    def test_relative_path(self, user_structure: Structure) -> None:
        generator = TemplateGenerator(GenerationConfig())
        assert generator.relative_path_for(user_structure) == "repository/User_repository.go"

    def test_config_is_applied(self, user_structure: Structure) -> None:
        config = GenerationConfig(
            receiver_type="Repo",
            header="package repo",
            imports=["context", "fmt", "errors"],
            repository_dir="internal/repo",
            file_suffix="_repo.go",
        )
        repo_file = TemplateGenerator(config).build_file(user_structure)
        assert repo_file.relative_path == "internal/repo/User_repo.go"
        assert repo_file.imports == ("context", "fmt", "errors")
        rendered = repo_file.render()
        assert rendered.startswith("package repo\n\nimport (\n")
        assert "func (p *Repo) UserCreate(" in rendered

    def test_four_methods(self, user_structure: Structure) -> None:
        repo_file = TemplateGenerator(GenerationConfig()).build_file(user_structure)
        assert len(repo_file.methods) == 4

    @pytest.mark.parametrize("name", ["Account", "LineItem"])
    def test_manager_name(self, name: str) -> None:
        structure = Structure(
            package_name="m",
            name=name,
            fields=[StructField.of("ID", "int", {"column": "id", "primary": "true"})],
        )
        rendered = TemplateGenerator(GenerationConfig()).render(structure)
        assert f"type {name}Manager interface {{" in rendered
