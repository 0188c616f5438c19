from __future__ import annotations
from datetime import date, datetime, time
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from timeoff.config import Settings
from timeoff.models import Employee, RequestStatus, TimeOffKind, TimeOffRequest

LOCAL = ZoneInfo("America/Los_Angeles")


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, timezone="America/Los_Angeles")


@pytest.fixture
def employees() -> dict[str, Employee]:
    return {
        "E1": Employee(id="E1", name="Ellen Dock", position="Dockhand", pto_hours=40, psl_hours=24),
        "E2": Employee(id="E2", name="Sam Harbor", position="Office", pto_hours=0, psl_hours=None),
    }


def local(day: date, hour: int = 8, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute), tzinfo=LOCAL)


def make_request(
    employee_id: str,
    kind: TimeOffKind | str,
    start: date,
    end: date | None = None,
    status: RequestStatus = RequestStatus.APPROVED,
    hours: float | None = None,
    start_hour: int = 8,
    end_hour: int = 16,
) -> TimeOffRequest:
    end = end or start
    days = (end - start).days + 1
    return TimeOffRequest(
        id=str(uuid4()),
        employee_id=employee_id,
        kind=kind,
        start=local(start, start_hour),
        end=local(end, end_hour),
        hours=hours if hours is not None else days * 8.0,
        status=status,
        created_at=datetime(2025, 1, 1, tzinfo=LOCAL),
    )
