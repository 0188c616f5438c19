from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from .config import Settings, get_settings
from .dates import local_date, localize, zone
from .models import Employee, EmployeeTotals, RequestStatus, TimeOffKind, TimeOffRequest

TotalsRow = Dict[str, Any]

TOTALS_COLUMNS = ["Year", "Employee", "Position", "Requested(hrs)", "Approved(hrs)", "Taken(hrs)"]


def aggregate(
    year: int,
    requests: Iterable[TimeOffRequest],
    employees: Iterable[Employee],
    now: datetime,
    settings: Settings | None = None,
) -> Dict[str, EmployeeTotals]:
    """Roll up requested, approved and taken hours per employee and kind for ``year``.

    A request belongs to the year when its local start or end date falls in it.
    Every known employee gets a row; requests for unknown employees and of
    unrecognized kinds are ignored.
    """

    settings = settings or get_settings()
    tz = zone(settings.timezone)
    now_utc = localize(now, tz).astimezone(timezone.utc)

    totals: Dict[str, EmployeeTotals] = {
        employee.id: EmployeeTotals(employee_id=employee.id, name=employee.name, position=employee.position)
        for employee in employees
    }
    for request in requests:
        row = totals.get(request.employee_id)
        kind = request.known_kind
        if row is None or kind is None:
            continue
        if year not in (local_date(request.start, tz).year, local_date(request.end, tz).year):
            continue
        approved = request.status is RequestStatus.APPROVED
        row.add(kind, request.hours, approved=approved, taken=request.end < now_utc)
    return totals


def totals_rows(totals: Dict[str, EmployeeTotals], year: int, kind: TimeOffKind = TimeOffKind.PTO) -> List[TotalsRow]:
    rows: List[TotalsRow] = []
    for employee_totals in sorted(totals.values(), key=lambda t: t.name.lower()):
        bucket = employee_totals.by_kind[kind]
        rows.append(
            {
                "Year": year,
                "Employee": employee_totals.name,
                "Position": employee_totals.position,
                "Requested(hrs)": round(bucket.requested_hours, 2),
                "Approved(hrs)": round(bucket.approved_hours, 2),
                "Taken(hrs)": round(bucket.taken_hours, 2),
            }
        )
    return rows
