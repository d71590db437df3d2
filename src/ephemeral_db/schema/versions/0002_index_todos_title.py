"""index todos.title

Revision ID: 0002_index_todos_title
Revises: 0001_create_todos
Create Date: 2024-03-09 16:40:22

"""
from alembic import op

revision = "0002_index_todos_title"
down_revision = "0001_create_todos"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_index("ix_todos_title", "todos", ["title"])


def downgrade() -> None:
    op.drop_index("ix_todos_title", table_name="todos")
