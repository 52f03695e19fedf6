"""reporting schema

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


role_type = postgresql.ENUM("admin", "hr", "finance", "rtl", "artl", "iva", name="role_type", create_type=False)


def upgrade() -> None:
    role_type.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("microsoft_oid", sa.String(length=128), nullable=False, unique=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "role_assignments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("role", role_type, nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "role", name="uq_role_assignments_user_role"),
    )
    op.create_index("ix_role_assignments_user_id", "role_assignments", ["user_id"])

    op.create_table(
        "regions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("region_order", sa.Integer(), nullable=False, server_default="10"),
    )
    op.create_index("ix_regions_name", "regions", ["name"])

    op.create_table(
        "cohorts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("cohort_order", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("start_date", sa.Date(), nullable=True),
    )
    op.create_index("ix_cohorts_name", "cohorts", ["name"])

    op.create_table(
        "configuration_setting_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("key", sa.String(length=128), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("setting_category", sa.String(length=32), nullable=False, server_default="other"),
    )

    op.create_table(
        "configuration_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "setting_type_id",
            sa.Integer(),
            sa.ForeignKey("configuration_setting_types.id"),
            nullable=False,
        ),
        sa.Column("setting_value", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("order", sa.SmallInteger(), nullable=False, server_default="0"),
    )
    op.create_index(
        "ix_configuration_settings_type_order", "configuration_settings", ["setting_type_id", "order"]
    )
    op.create_index(
        "ix_configuration_settings_value_active", "configuration_settings", ["setting_value", "is_active"]
    )

    op.create_table(
        "report_categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("cat_name", sa.String(length=255), nullable=False),
        sa.Column("cat_description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("category_order", sa.Integer(), nullable=False, server_default="20"),
        sa.Column(
            "category_type",
            sa.Integer(),
            sa.ForeignKey("configuration_settings.id"),
            nullable=False,
        ),
    )
    op.create_index("ix_report_categories_active", "report_categories", ["is_active"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("timedoctor_version", sa.SmallInteger(), nullable=False, server_default="1"),
        sa.Column("project_name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )

    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("timedoctor_version", sa.SmallInteger(), nullable=False, server_default="1"),
        sa.Column("task_name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_tasks_task_name", "tasks", ["task_name"])

    op.create_table(
        "task_report_categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("task_id", sa.Integer(), sa.ForeignKey("tasks.id"), nullable=False),
        sa.Column("cat_id", sa.Integer(), sa.ForeignKey("report_categories.id"), nullable=False),
    )
    op.create_index("ix_task_report_categories_task_cat", "task_report_categories", ["task_id", "cat_id"])

    op.create_table(
        "iva_users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("job_title", sa.String(length=255), nullable=True),
        sa.Column("hire_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("region_id", sa.Integer(), sa.ForeignKey("regions.id"), nullable=True),
        sa.Column("cohort_id", sa.Integer(), sa.ForeignKey("cohorts.id"), nullable=True),
        sa.Column("work_status", sa.String(length=64), nullable=True),
        sa.Column("timedoctor_version", sa.SmallInteger(), nullable=False, server_default="1"),
    )
    op.create_index("ix_iva_users_region_id", "iva_users", ["region_id"])
    op.create_index("ix_iva_users_is_active", "iva_users", ["is_active"])

    op.create_table(
        "iva_managers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("iva_id", sa.Integer(), sa.ForeignKey("iva_users.id"), nullable=False),
        sa.Column("iva_manager_id", sa.Integer(), sa.ForeignKey("iva_users.id"), nullable=False),
        sa.Column(
            "manager_type_id",
            sa.Integer(),
            sa.ForeignKey("configuration_settings.id"),
            nullable=True,
        ),
        sa.Column("region_id", sa.Integer(), sa.ForeignKey("regions.id"), nullable=True),
    )
    op.create_index("ix_iva_managers_manager_id", "iva_managers", ["iva_manager_id"])
    op.create_index("ix_iva_managers_region_id", "iva_managers", ["region_id"])

    op.create_table(
        "worklogs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("iva_id", sa.Integer(), sa.ForeignKey("iva_users.id"), nullable=False),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=True),
        sa.Column("task_id", sa.Integer(), sa.ForeignKey("tasks.id"), nullable=True),
        sa.Column("work_mode", sa.String(length=32), nullable=False, server_default="0"),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("api_type", sa.String(length=32), nullable=False, server_default="timedoctor"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("timedoctor_version", sa.SmallInteger(), nullable=False, server_default="1"),
        sa.CheckConstraint("duration >= 0", name="ck_worklogs_duration_non_negative"),
    )
    op.create_index("ix_worklogs_user_start", "worklogs", ["iva_id", "start_time"])
    op.create_index("ix_worklogs_active_start", "worklogs", ["is_active", "start_time"])


def downgrade() -> None:
    op.drop_index("ix_worklogs_active_start", table_name="worklogs")
    op.drop_index("ix_worklogs_user_start", table_name="worklogs")
    op.drop_table("worklogs")

    op.drop_index("ix_iva_managers_region_id", table_name="iva_managers")
    op.drop_index("ix_iva_managers_manager_id", table_name="iva_managers")
    op.drop_table("iva_managers")

    op.drop_index("ix_iva_users_is_active", table_name="iva_users")
    op.drop_index("ix_iva_users_region_id", table_name="iva_users")
    op.drop_table("iva_users")

    op.drop_index("ix_task_report_categories_task_cat", table_name="task_report_categories")
    op.drop_table("task_report_categories")

    op.drop_index("ix_tasks_task_name", table_name="tasks")
    op.drop_table("tasks")
    op.drop_table("projects")

    op.drop_index("ix_report_categories_active", table_name="report_categories")
    op.drop_table("report_categories")

    op.drop_index("ix_configuration_settings_value_active", table_name="configuration_settings")
    op.drop_index("ix_configuration_settings_type_order", table_name="configuration_settings")
    op.drop_table("configuration_settings")
    op.drop_table("configuration_setting_types")

    op.drop_index("ix_cohorts_name", table_name="cohorts")
    op.drop_table("cohorts")

    op.drop_index("ix_regions_name", table_name="regions")
    op.drop_table("regions")

    op.drop_index("ix_role_assignments_user_id", table_name="role_assignments")
    op.drop_table("role_assignments")
    op.drop_table("users")

    role_type.drop(op.get_bind(), checkfirst=True)
