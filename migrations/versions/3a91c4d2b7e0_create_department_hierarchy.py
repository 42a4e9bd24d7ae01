"""Create department hierarchy tables

Creates the ``department`` forest table with its materialized path
columns, the HR directory tables that reference it (``position``,
``employee``), and ``audit_log``.

``ix_department_dep_path`` backs every subtree / descendant query,
which is a ``LIKE '<path>/%'`` prefix scan.  On PostgreSQL the index
uses ``text_pattern_ops`` so the planner can use it regardless of the
database collation.

Revision ID: 3a91c4d2b7e0
Revises:
Create Date: 2026-10-18 09:14:02.511364

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3a91c4d2b7e0"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create department, position, employee and audit_log."""
    op.create_table(
        "department",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column(
            "dep_path",
            sa.String(length=500),
            nullable=False,
            comment="Ancestor ids root-first including self, e.g. /1/4/9",
        ),
        sa.Column(
            "level",
            sa.Integer(),
            nullable=False,
            comment="Depth from the root; roots are 0",
        ),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("manager_id", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.CheckConstraint("level >= 0", name="ck_department_level"),
        sa.CheckConstraint("sort_order >= 0", name="ck_department_sort_order"),
        sa.ForeignKeyConstraint(["parent_id"], ["department.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.UniqueConstraint("code"),
    )
    op.create_index(
        "ix_department_dep_path",
        "department",
        ["dep_path"],
        postgresql_ops={"dep_path": "text_pattern_ops"},
    )
    op.create_index("ix_department_parent_sort", "department", ["parent_id", "sort_order"])
    op.create_index("ix_department_parent_id", "department", ["parent_id"])
    op.create_index("ix_department_level", "department", ["level"])
    op.create_index("ix_department_manager_id", "department", ["manager_id"])

    op.create_table(
        "position",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=False),
        sa.Column("position_code", sa.String(length=20), nullable=False),
        sa.Column("position_title", sa.String(length=200), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["department_id"], ["department.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("position_code"),
    )
    op.create_index("ix_position_department_id", "position", ["department_id"])

    op.create_table(
        "employee",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=False),
        sa.Column("position_id", sa.Integer(), nullable=True),
        sa.Column("employee_number", sa.String(length=50), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["department_id"], ["department.id"]),
        sa.ForeignKeyConstraint(["position_id"], ["position.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_number"),
    )
    op.create_index("ix_employee_department_id", "employee", ["department_id"])
    op.create_index("ix_employee_position_id", "employee", ["position_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("action_type", sa.String(length=50), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("previous_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_user_id", "audit_log", ["user_id"])


def downgrade() -> None:
    """Drop all hierarchy tables, dependents first."""
    op.drop_index("ix_audit_log_user_id", table_name="audit_log")
    op.drop_table("audit_log")

    op.drop_index("ix_employee_position_id", table_name="employee")
    op.drop_index("ix_employee_department_id", table_name="employee")
    op.drop_table("employee")

    op.drop_index("ix_position_department_id", table_name="position")
    op.drop_table("position")

    op.drop_index("ix_department_manager_id", table_name="department")
    op.drop_index("ix_department_level", table_name="department")
    op.drop_index("ix_department_parent_id", table_name="department")
    op.drop_index("ix_department_parent_sort", table_name="department")
    op.drop_index("ix_department_dep_path", table_name="department")
    op.drop_table("department")
