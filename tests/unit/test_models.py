"""The sample Todo model mirrors the packaged migrations."""

from __future__ import annotations

from ephemeral_db import Base
from ephemeral_db.examples import Todo


def test_todo_registered_on_base():
    assert Base.metadata.tables["todos"] is Todo.__table__


def test_todo_columns():
    cols = Todo.__table__.columns
    assert set(cols.keys()) == {"id", "title", "completed", "created_at", "updated_at"}
    assert cols["id"].primary_key
    assert cols["completed"].nullable
    assert not cols["title"].nullable
    assert cols["created_at"].server_default is not None


def test_todo_title_index_matches_migration():
    assert {ix.name for ix in Todo.__table__.indexes} == {"ix_todos_title"}
