from __future__ import annotations

from datetime import datetime

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from conftest import REPORT_DAY, add_user, add_worklog, assign_role
from app.core.auth import AppRole
from app.models.entities import (
    ConfigurationSetting,
    ConfigurationSettingType,
    IvaManager,
    Project,
    Region,
    ReportCategory,
    Task,
    TaskReportCategory,
)


def _at(hour: int) -> datetime:
    return datetime.combine(REPORT_DAY, datetime.min.time()).replace(hour=hour)


def _get_nsh(client: TestClient, headers: dict[str, str], **params: object) -> dict:
    response = client.get(
        "/api/v1/reports/nsh",
        headers=headers,
        params={"date": REPORT_DAY.isoformat(), **params},
    )
    assert response.status_code == 200
    return response.json()


def test_nsh_picks_longest_worklog_per_user(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.ADMIN)
    region = Region(name="APAC")
    task = Task(task_name="Client call")
    project = Project(project_name="Acme")
    db_session.add_all([region, task, project])
    db_session.commit()

    ana = add_user(db_session, full_name="Ana Reyes", region_id=region.id)
    ben = add_user(db_session, full_name="Ben Cruz")
    add_user(db_session, full_name="Cid Lim")
    first_peak = add_worklog(
        db_session, user=ana, start=_at(8), duration=7200, task_id=task.id, project_id=project.id, comment="first"
    )
    add_worklog(db_session, user=ana, start=_at(11), duration=7200, comment="second")
    add_worklog(db_session, user=ana, start=_at(14), duration=3600)
    add_worklog(db_session, user=ben, start=_at(9), duration=16200)

    payload = _get_nsh(client, headers)

    rows = payload["nsh_data"]
    assert [row["full_name"] for row in rows] == ["Ben Cruz", "Ana Reyes"]

    ana_row = rows[1]
    assert ana_row["worklog_id"] == first_peak.id
    assert ana_row["hours"] == 2.0
    assert ana_row["task_name"] == "Client call"
    assert ana_row["project_name"] == "Acme"
    assert ana_row["region"] == "APAC"
    assert ana_row["comment"] == "first"
    assert ana_row["start_time"] == "2024-01-10T08:00:00"
    assert ana_row["end_time"] == "2024-01-10T10:00:00"

    ben_row = rows[0]
    assert ben_row["hours"] == 4.5
    assert ben_row["task_name"] == "Unknown Task"
    assert ben_row["project_name"] == "Unknown Project"
    assert ben_row["region"] == "Unknown Region"

    summary = payload["summary"]
    assert summary["total_users"] == 2
    assert summary["total_hours"] == 6.5
    assert summary["average_hours"] == 3.25
    assert summary["max_hours"] == 4.5
    assert summary["users_over_6h"] == 0
    assert summary["users_over_10h"] == 0


def test_nsh_paginates_sorted_rows(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.HR, oid="oid-hr", email="hr@test.local")
    for index, hours in enumerate((1, 5, 3), start=1):
        user = add_user(db_session, full_name=f"User {index}")
        add_worklog(db_session, user=user, start=_at(8), duration=hours * 3600)

    first_page = _get_nsh(client, headers, page=1, per_page=2)
    second_page = _get_nsh(client, headers, page=2, per_page=2)

    assert [row["hours"] for row in first_page["nsh_data"]] == [5.0, 3.0]
    assert [row["hours"] for row in second_page["nsh_data"]] == [1.0]
    assert second_page["pagination"] == {
        "current_page": 2,
        "per_page": 2,
        "total": 3,
        "last_page": 2,
        "from": 3,
        "to": 3,
    }
    assert first_page["summary"]["total_users"] == 3


def test_nsh_page_past_the_end_is_empty(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.ADMIN)
    user = add_user(db_session, full_name="Ana Reyes")
    add_worklog(db_session, user=user, start=_at(8), duration=3600)

    payload = _get_nsh(client, headers, page=5, per_page=10)

    assert payload["nsh_data"] == []
    assert payload["pagination"]["from"] is None
    assert payload["pagination"]["to"] is None
    assert payload["pagination"]["last_page"] == 1


def test_nsh_page_size_is_capped(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.ADMIN)

    payload = _get_nsh(client, headers, per_page=500)

    assert payload["pagination"]["per_page"] == 100
    assert payload["nsh_data"] == []
    assert payload["summary"]["total_users"] == 0


def test_nsh_rejects_invalid_paging(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.ADMIN)

    response = client.get("/api/v1/reports/nsh", headers=headers, params={"page": 0, "per_page": 0})

    assert response.status_code == 422
    errors = response.json()["errors"]
    assert "page" in errors
    assert "per_page" in errors


def test_nsh_threshold_counts(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.ADMIN)
    for name, hours in (("Ana Reyes", 11), ("Ben Cruz", 7), ("Cid Lim", 2)):
        user = add_user(db_session, full_name=name)
        add_worklog(db_session, user=user, start=_at(0), duration=hours * 3600)

    summary = _get_nsh(client, headers)["summary"]

    assert summary["users_over_6h"] == 2
    assert summary["users_over_10h"] == 1
    assert summary["max_hours"] == 11.0


def test_nsh_rows_carry_task_category_links(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.ADMIN)
    category_type = ConfigurationSettingType(key="report_category_type", name="Report category type")
    db_session.add(category_type)
    db_session.flush()
    billable_type = ConfigurationSetting(setting_type_id=category_type.id, setting_value="Billable")
    task = Task(task_name="Client call")
    db_session.add_all([billable_type, task])
    db_session.flush()
    client_work = ReportCategory(cat_name="Client Work", category_type=billable_type.id)
    db_session.add(client_work)
    db_session.flush()
    db_session.add(TaskReportCategory(task_id=task.id, cat_id=client_work.id))
    db_session.commit()

    ana = add_user(db_session, full_name="Ana Reyes")
    ben = add_user(db_session, full_name="Ben Cruz")
    add_worklog(db_session, user=ana, start=_at(8), duration=7200, task_id=task.id)
    add_worklog(db_session, user=ben, start=_at(8), duration=3600)

    rows = {row["full_name"]: row for row in _get_nsh(client, headers)["nsh_data"]}

    assert rows["Ana Reyes"]["category"] == "billable"
    assert rows["Ana Reyes"]["task_categories"] == ["Client Work"]
    assert rows["Ben Cruz"]["category"] == "uncategorized"
    assert rows["Ben Cruz"]["task_categories"] == []


def test_nsh_team_lead_only_sees_assigned_region(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.RTL, oid="oid-rtl", email="lead@test.local", display_name="Lead")
    apac = Region(name="APAC")
    emea = Region(name="EMEA")
    db_session.add_all([apac, emea])
    db_session.commit()
    lead = add_user(db_session, full_name="Team Lead", email="lead@test.local")
    ana = add_user(db_session, full_name="Ana Reyes", region_id=apac.id)
    ben = add_user(db_session, full_name="Ben Cruz", region_id=emea.id)
    db_session.add(IvaManager(iva_id=ana.id, iva_manager_id=lead.id, region_id=apac.id))
    db_session.commit()
    add_worklog(db_session, user=ana, start=_at(8), duration=3600)
    add_worklog(db_session, user=ben, start=_at(8), duration=36000)

    payload = _get_nsh(client, headers)

    assert [row["full_name"] for row in payload["nsh_data"]] == ["Ana Reyes"]
    assert payload["summary"]["total_users"] == 1
    assert payload["region_filter"]["applied"] is True
    assert payload["region_filter"]["region_id"] == apac.id


def test_nsh_team_lead_without_region_is_rejected(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.RTL, oid="oid-rtl", email="lead@test.local")
    add_user(db_session, full_name="Team Lead", email="lead@test.local")

    response = client.get("/api/v1/reports/nsh", headers=headers, params={"date": REPORT_DAY.isoformat()})

    assert response.status_code == 403
    assert response.json()["detail"]["region_access_error"] is True
