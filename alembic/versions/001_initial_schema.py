"""Initial schema: course materials, taxonomies, import runs.

Revision ID: 001
Revises: (none)
Create Date: 2026-10-17 10:00:00.000000

For FRESH databases:
    alembic upgrade head
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TAXONOMY_TABLES = ("material_types", "school_types", "competences", "topics")


def _taxonomy_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title_nl", sa.String(length=255), nullable=True),
        sa.Column("title_de", sa.String(length=255), nullable=True),
        sa.Column("slug", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug", name=f"uq_{name}_slug"),
    )
    op.create_index(f"ix_{name}_title_nl", name, ["title_nl"])


def _association_table(target: str) -> None:
    op.create_table(
        f"course_material_{target}",
        sa.Column("course_material_id", sa.String(length=36), nullable=False),
        sa.Column("term_id", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(["course_material_id"], ["course_materials.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["term_id"], [f"{target}.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("course_material_id", "term_id"),
    )


def upgrade() -> None:
    # ── taxonomies ───────────────────────────────────────────────────────
    for name in TAXONOMY_TABLES:
        _taxonomy_table(name)

    # ── course_materials ─────────────────────────────────────────────────
    op.create_table(
        "course_materials",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title_nl", sa.String(length=1000), nullable=True),
        sa.Column("title_de", sa.String(length=1000), nullable=True),
        sa.Column("description_nl", sa.Text(), nullable=True),
        sa.Column("description_de", sa.Text(), nullable=True),
        sa.Column("link", sa.String(length=2000), nullable=True),
        sa.Column("links", sa.JSON(), nullable=True),
        sa.Column("license", sa.String(length=500), nullable=True),
        sa.Column("contact", sa.String(length=500), nullable=True),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("cefr", sa.JSON(), nullable=True),
        sa.Column("language", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("slug", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_course_materials_title_nl", "course_materials", ["title_nl"])
    op.create_index("ix_course_materials_status", "course_materials", ["status"])
    op.create_index("ix_course_materials_slug", "course_materials", ["slug"], unique=True)
    op.create_index("ix_course_materials_created_at", "course_materials", ["created_at"])

    # ── course_material_<taxonomy> ───────────────────────────────────────
    for name in TAXONOMY_TABLES:
        _association_table(name)

    # ── import_runs ──────────────────────────────────────────────────────
    op.create_table(
        "import_runs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("source", sa.String(length=20), nullable=False),
        sa.Column("filename", sa.String(length=500), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("created_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("duplicate_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("error_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("errors_json", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_import_runs_source", "import_runs", ["source"])
    op.create_index("ix_import_runs_started_at", "import_runs", ["started_at"])


def downgrade() -> None:
    op.drop_table("import_runs")
    for name in TAXONOMY_TABLES:
        op.drop_table(f"course_material_{name}")
    op.drop_table("course_materials")
    for name in TAXONOMY_TABLES:
        op.drop_table(name)
