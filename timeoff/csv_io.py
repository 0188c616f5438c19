from __future__ import annotations
import csv
from pathlib import Path
from typing import Iterable, Mapping

from .config import Settings, get_settings
from .dates import localize, zone
from .models import Employee, TimeOffKind, TimeOffRequest
from .totals import TOTALS_COLUMNS, TotalsRow


REQUEST_COLUMNS = ["Start", "End", "Type", "Employee", "Status"]


def employee_label(employees: Mapping[str, Employee], employee_id: str) -> str:
    employee = employees.get(employee_id)
    return employee.name if employee else f"Unknown ({employee_id})"


def export_totals(path: Path, rows: Iterable[TotalsRow]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=TOTALS_COLUMNS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    return path


def export_requests(
    path: Path,
    requests: Iterable[TimeOffRequest],
    employees: Mapping[str, Employee],
    settings: Settings | None = None,
) -> Path:
    tz = zone((settings or get_settings()).timezone)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=REQUEST_COLUMNS)
        writer.writeheader()
        for request in sorted(requests, key=lambda r: r.start):
            kind = request.kind.value if isinstance(request.kind, TimeOffKind) else request.kind
            writer.writerow(
                {
                    "Start": localize(request.start, tz).strftime("%Y-%m-%d %H:%M"),
                    "End": localize(request.end, tz).strftime("%Y-%m-%d %H:%M"),
                    "Type": kind,
                    "Employee": employee_label(employees, request.employee_id),
                    "Status": request.status.value,
                }
            )
    return path
