"""
tests/conftest.py
Shared fixtures for the repogen test suite.

No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import logging
import pathlib
import textwrap
from typing import Iterator

import pytest

from repogen.models import StructField, Structure


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_repogen_logging() -> Iterator[None]:
    """Undo the handler/propagation changes ``cli_main`` makes."""
    yield
    root_logger = logging.getLogger("repogen")
    root_logger.handlers.clear()
    root_logger.propagate = True
    root_logger.setLevel(logging.NOTSET)
    logging.disable(logging.NOTSET)


# ---------------------------------------------------------------------------
# Go source fixtures
# ---------------------------------------------------------------------------

USER_SOURCE: str = textwrap.dedent(
    """\
    package model

    type User struct {
    \tID   int64  `column:"id" primary:"true"`
    \tName string `column:"name"`
    }
    """
)

ORDER_SOURCE: str = textwrap.dedent(
    """\
    package shop

    import "time"

    type Order struct {
    \tShopID    int64     `column:"shop_id" primary:"true"`
    \tNumber    int64     `column:"number" primary:"true"`
    \tCreatedAt time.Time `column:"created_at"`
    \tNote      string    `column:"note"`
    }
    """
)


@pytest.fixture()
def user_source() -> str:
    """A single-struct file: the canonical User example."""
    return USER_SOURCE


@pytest.fixture()
def order_source() -> str:
    """Composite primary key plus a qualified field type."""
    return ORDER_SOURCE


@pytest.fixture()
def user_structure() -> Structure:
    """The normalized form of USER_SOURCE."""
    return Structure(
        package_name="model",
        name="User",
        fields=[
            StructField.of("ID", "int64", {"column": "id", "primary": "true"}),
            StructField.of("Name", "string", {"column": "name"}),
        ],
    )


@pytest.fixture()
def order_structure() -> Structure:
    return Structure(
        package_name="shop",
        name="Order",
        fields=[
            StructField.of("ShopID", "int64", {"column": "shop_id", "primary": "true"}),
            StructField.of("Number", "int64", {"column": "number", "primary": "true"}),
            StructField.of("CreatedAt", "time.Time", {"column": "created_at"}),
            StructField.of("Note", "string", {"column": "note"}),
        ],
    )


# ---------------------------------------------------------------------------
# Workspace fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def workspace(tmp_path: pathlib.Path) -> pathlib.Path:
    """An output root that already contains ``repository/``."""
    (tmp_path / "repository").mkdir()
    return tmp_path


@pytest.fixture()
def user_go_file(tmp_path: pathlib.Path) -> pathlib.Path:
    """USER_SOURCE written to ``<tmp>/model/user.go``."""
    model_dir = tmp_path / "model"
    model_dir.mkdir()
    path = model_dir / "user.go"
    path.write_text(USER_SOURCE, encoding="utf-8")
    return path


@pytest.fixture()
def model_dir(user_go_file: pathlib.Path) -> pathlib.Path:
    """A directory with user.go, order.go, a test file and a non-Go file."""
    directory = user_go_file.parent
    (directory / "order.go").write_text(
        ORDER_SOURCE.replace("package shop", "package model"), encoding="utf-8"
    )
    (directory / "user_test.go").write_text(
        "package model\n\ntype Broken struct {\n\tX *int\n}\n", encoding="utf-8"
    )
    (directory / "notes.txt").write_text("not go", encoding="utf-8")
    return directory
