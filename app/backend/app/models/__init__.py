"""ORM model package."""

from app.models.entities import (
    Cohort,
    ConfigurationSetting,
    ConfigurationSettingType,
    IvaManager,
    IvaUser,
    Project,
    Region,
    ReportCategory,
    RoleAssignment,
    Task,
    TaskReportCategory,
    User,
    Worklog,
)

__all__ = [
    "Cohort",
    "ConfigurationSetting",
    "ConfigurationSettingType",
    "IvaManager",
    "IvaUser",
    "Project",
    "Region",
    "ReportCategory",
    "RoleAssignment",
    "Task",
    "TaskReportCategory",
    "User",
    "Worklog",
]
