from __future__ import annotations

import csv
import io
from datetime import datetime

from fastapi.testclient import TestClient
from openpyxl import load_workbook
from sqlalchemy.orm import Session

from conftest import REPORT_DAY, add_user, add_worklog, assign_role
from app.core.auth import AppRole


def _seed_worklogs(db: Session) -> None:
    start = datetime.combine(REPORT_DAY, datetime.min.time()).replace(hour=9)
    ana = add_user(db, full_name="Ana Reyes")
    add_user(db, full_name="Ben Cruz")
    add_worklog(db, user=ana, start=start, duration=5400, comment="Long call")


def test_daily_performance_csv_export(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.FINANCE, oid="oid-fin", email="fin@test.local")
    _seed_worklogs(db_session)

    response = client.get(
        "/api/v1/exports/daily-performance",
        headers=headers,
        params={"format": "csv", "date": REPORT_DAY.isoformat()},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="daily-performance-2024-01-10.csv"' in response.headers["content-disposition"]

    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert [row["full_name"] for row in rows] == ["Ana Reyes", "Ben Cruz"]
    assert rows[0]["uncategorized_hours"] == "1.5"
    assert rows[0]["total_hours"] == "1.5"


def test_nsh_xlsx_export(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.ADMIN)
    _seed_worklogs(db_session)

    response = client.get(
        "/api/v1/exports/nsh",
        headers=headers,
        params={"date": REPORT_DAY.isoformat()},
    )

    assert response.status_code == 200
    assert 'filename="nsh-2024-01-10.xlsx"' in response.headers["content-disposition"]

    workbook = load_workbook(io.BytesIO(response.content))
    sheet = workbook["nsh"]
    values = list(sheet.iter_rows(values_only=True))
    assert values[0][:3] == ("id", "full_name", "email")
    assert len(values) == 2
    assert values[1][1] == "Ana Reyes"
    assert values[1][6] == 1.5
    assert values[1][-1] == "Long call"


def test_export_rejects_unknown_report(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.ADMIN)

    response = client.get("/api/v1/exports/payroll", headers=headers, params={"format": "csv"})

    assert response.status_code == 404


def test_export_rejects_unknown_format(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.ADMIN)

    response = client.get("/api/v1/exports/nsh", headers=headers, params={"format": "pdf"})

    assert response.status_code == 422


def test_export_requires_export_permission(client: TestClient, db_session: Session) -> None:
    headers = assign_role(db_session, role=AppRole.IVA, oid="oid-iva", email="iva@test.local")

    response = client.get("/api/v1/exports/nsh", headers=headers, params={"format": "csv"})

    assert response.status_code == 403
