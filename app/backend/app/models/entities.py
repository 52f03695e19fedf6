"""ORM entities for the worklog reporting schema."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class RoleType(str, enum.Enum):
    ADMIN = "admin"
    HR = "hr"
    FINANCE = "finance"
    RTL = "rtl"
    ARTL = "artl"
    IVA = "iva"


# ---------- Application principals ----------
class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    microsoft_oid: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="active")
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class RoleAssignment(Base):
    __tablename__ = "role_assignments"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_role_assignments_user_role"),
        Index("ix_role_assignments_user_id", "user_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    role: Mapped[RoleType] = mapped_column(
        SQLEnum(
            RoleType,
            name="role_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


# ---------- Organization structure ----------
class Region(Base):
    __tablename__ = "regions"
    __table_args__ = (Index("ix_regions_name", "name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    region_order: Mapped[int] = mapped_column(Integer, nullable=False, default=10)


class Cohort(Base):
    __tablename__ = "cohorts"
    __table_args__ = (Index("ix_cohorts_name", "name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    cohort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)


# ---------- Configuration ----------
class ConfigurationSettingType(Base):
    __tablename__ = "configuration_setting_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    setting_category: Mapped[str] = mapped_column(String(32), nullable=False, default="other")


class ConfigurationSetting(Base):
    __tablename__ = "configuration_settings"
    __table_args__ = (
        Index("ix_configuration_settings_type_order", "setting_type_id", "order"),
        Index("ix_configuration_settings_value_active", "setting_value", "is_active"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    setting_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("configuration_setting_types.id"), nullable=False
    )
    setting_value: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    display_order: Mapped[int] = mapped_column("order", SmallInteger, nullable=False, default=0)

    setting_type: Mapped[ConfigurationSettingType] = relationship()


class ReportCategory(Base):
    __tablename__ = "report_categories"
    __table_args__ = (Index("ix_report_categories_active", "is_active"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cat_name: Mapped[str] = mapped_column(String(255), nullable=False)
    cat_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    category_order: Mapped[int] = mapped_column(Integer, nullable=False, default=20)
    category_type: Mapped[int] = mapped_column(Integer, ForeignKey("configuration_settings.id"), nullable=False)


# ---------- Tracked work ----------
class Project(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timedoctor_version: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=1)
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (Index("ix_tasks_task_name", "task_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timedoctor_version: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=1)
    task_name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class TaskReportCategory(Base):
    __tablename__ = "task_report_categories"
    __table_args__ = (Index("ix_task_report_categories_task_cat", "task_id", "cat_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(Integer, ForeignKey("tasks.id"), nullable=False)
    cat_id: Mapped[int] = mapped_column(Integer, ForeignKey("report_categories.id"), nullable=False)


# ---------- Workforce directory ----------
class IvaUser(Base):
    __tablename__ = "iva_users"
    __table_args__ = (
        Index("ix_iva_users_region_id", "region_id"),
        Index("ix_iva_users_is_active", "is_active"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    job_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    hire_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    region_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("regions.id"), nullable=True)
    cohort_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("cohorts.id"), nullable=True)
    work_status: Mapped[str | None] = mapped_column(String(64), nullable=True)
    timedoctor_version: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=1)

    region: Mapped[Region | None] = relationship()
    cohort: Mapped[Cohort | None] = relationship()


class IvaManager(Base):
    __tablename__ = "iva_managers"
    __table_args__ = (
        Index("ix_iva_managers_manager_id", "iva_manager_id"),
        Index("ix_iva_managers_region_id", "region_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    iva_id: Mapped[int] = mapped_column(Integer, ForeignKey("iva_users.id"), nullable=False)
    iva_manager_id: Mapped[int] = mapped_column(Integer, ForeignKey("iva_users.id"), nullable=False)
    manager_type_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("configuration_settings.id"), nullable=True
    )
    region_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("regions.id"), nullable=True)


class Worklog(Base):
    __tablename__ = "worklogs"
    __table_args__ = (
        CheckConstraint("duration >= 0", name="ck_worklogs_duration_non_negative"),
        Index("ix_worklogs_user_start", "iva_id", "start_time"),
        Index("ix_worklogs_active_start", "is_active", "start_time"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    iva_id: Mapped[int] = mapped_column(Integer, ForeignKey("iva_users.id"), nullable=False)
    project_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("projects.id"), nullable=True)
    task_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("tasks.id"), nullable=True)
    work_mode: Mapped[str] = mapped_column(String(32), nullable=False, default="0")
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    api_type: Mapped[str] = mapped_column(String(32), nullable=False, default="timedoctor")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    timedoctor_version: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=1)
