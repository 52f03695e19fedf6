from __future__ import annotations

from collections.abc import Generator
from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.auth import APP_ROLE_TO_DB_ROLE, AppRole, ensure_user_principal
from app.db.base import Base
from app.db.dependencies import get_db_session
import app.models.entities  # noqa: F401
from app.main import create_app
from app.models.entities import IvaUser, RoleAssignment, Worklog


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(
    *,
    oid: str = "oid-admin",
    email: str = "admin@test.local",
    display_name: str = "Admin",
) -> dict[str, str]:
    return {
        "X-MS-OID": oid,
        "X-MS-EMAIL": email,
        "X-MS-DISPLAY-NAME": display_name,
    }


def assign_role(
    db: Session,
    *,
    role: AppRole,
    oid: str = "oid-admin",
    email: str = "admin@test.local",
    display_name: str = "Admin",
) -> dict[str, str]:
    """Persist a role for the principal and return its identity headers."""

    user = ensure_user_principal(db, microsoft_oid=oid, email=email, display_name=display_name)
    now = datetime.utcnow()
    db.add(
        RoleAssignment(
            user_id=user.id,
            role=APP_ROLE_TO_DB_ROLE[role],
            active=True,
            created_at=now,
            updated_at=now,
        )
    )
    db.commit()
    return auth_headers(oid=oid, email=email, display_name=display_name)


def add_user(db: Session, *, full_name: str, email: str | None = None, **fields: object) -> IvaUser:
    user = IvaUser(
        full_name=full_name,
        email=email or f"{full_name.lower().replace(' ', '.')}@test.local",
        is_active=fields.pop("is_active", True),
        work_status=fields.pop("work_status", "full-time"),
        **fields,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def add_worklog(
    db: Session,
    *,
    user: IvaUser,
    start: datetime,
    duration: int,
    task_id: int | None = None,
    project_id: int | None = None,
    comment: str | None = None,
    is_active: bool = True,
) -> Worklog:
    worklog = Worklog(
        iva_id=user.id,
        task_id=task_id,
        project_id=project_id,
        start_time=start,
        end_time=start + timedelta(seconds=duration),
        duration=duration,
        comment=comment,
        is_active=is_active,
    )
    db.add(worklog)
    db.commit()
    db.refresh(worklog)
    return worklog


REPORT_DAY = date(2024, 1, 10)
