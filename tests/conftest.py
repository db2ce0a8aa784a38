"""Shared fixtures: throwaway Laravel projects and SQLite schemas."""

from __future__ import annotations

import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text

from modeldoc.php.classes import ClassIndex
from modeldoc.php.parser import PhpParser

USERS_TABLE = """
    CREATE TABLE users (
        id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
        name VARCHAR(255) NOT NULL,
        age INTEGER,
        birth_date DATE,
        created_at DATETIME,
        updated_at DATETIME
    )
"""

POSTS_TABLE = """
    CREATE TABLE posts (
        id INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
        user_id INTEGER,
        title VARCHAR(255) NOT NULL
    )
"""


def write_php(root: Path, relative: str, source: str) -> Path:
    """Write dedented PHP source under ``root`` and return its path."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(source).lstrip())
    return path


@pytest.fixture
def php_parser() -> PhpParser:
    return PhpParser()


@pytest.fixture
def laravel_project(tmp_path: Path) -> Path:
    """Minimal Laravel layout: composer.json plus an empty app/Models."""
    root = tmp_path / "project"
    (root / "app" / "Models").mkdir(parents=True)
    (root / "composer.json").write_text('{"name": "acme/shop"}\n')
    return root


@pytest.fixture
def write_model(laravel_project: Path) -> Callable[[str, str], Path]:
    def _write(relative: str, source: str) -> Path:
        return write_php(laravel_project, relative, source)

    return _write


@pytest.fixture
def build_index(laravel_project: Path) -> Callable[[], ClassIndex]:
    def _build() -> ClassIndex:
        return ClassIndex.scan([laravel_project / "app"])

    return _build


@pytest.fixture
def sqlite_url(tmp_path: Path) -> Iterator[str]:
    """SQLite database with ``users`` and ``posts`` tables."""
    db_path = tmp_path / "database.sqlite"
    url = f"sqlite:///{db_path}"
    engine = create_engine(url)
    with engine.begin() as conn:
        conn.execute(text(USERS_TABLE))
        conn.execute(text(POSTS_TABLE))
    engine.dispose()
    yield url
