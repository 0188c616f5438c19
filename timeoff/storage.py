from __future__ import annotations
import json
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .dates import parse_clock, parse_iso, to_iso
from .errors import StoreError
from .models import Employee, RequestStatus, Shift, TimeOffKind, TimeOffRequest


def normalize_name(value: Optional[str]) -> str:
    return " ".join(str(value or "").split()).lower()


class RecordStore:
    """JSON-backed home of the employee roster, the request history and shifts.

    ``path=None`` keeps everything in memory, and ``save`` becomes a no-op.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path
        self.employees: Dict[str, Employee] = {}
        self.time_off_requests: List[TimeOffRequest] = []
        self.shifts: List[Shift] = []
        if path is not None and path.exists():
            self.load()

    def load(self) -> None:
        try:
            content = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Could not read record store at {self.path}: {exc}") from exc
        try:
            employees = [self.deserialize_employee(e) for e in content.get("employees", [])]
            requests = [self._deserialize_request(r) for r in content.get("timeOffRequests", [])]
            shifts = [self._deserialize_shift(s) for s in content.get("employeeSchedules", [])]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise StoreError(f"Invalid record in store at {self.path}: {exc!r}") from exc
        self.employees = {employee.id: employee for employee in employees}
        self.time_off_requests = requests
        self.shifts = shifts

    def save(self) -> None:
        if self.path is None:
            return
        payload = {
            "employees": [self.serialize_employee(e) for e in self.employees.values()],
            "timeOffRequests": [self._serialize_request(r) for r in self.time_off_requests],
            "employeeSchedules": [self._serialize_shift(s) for s in self.shifts],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def add_employee(self, employee: Employee) -> None:
        self.employees[employee.id] = employee

    def replace_employees(self, employees: Iterable[Employee]) -> None:
        self.employees = {employee.id: employee for employee in employees}

    def get_employee(self, employee_id) -> Optional[Employee]:
        return self.employees.get(str(employee_id))

    def find_employee_by_name(self, name: str) -> Optional[Employee]:
        return find_employee_by_name(self.employees.values(), name)

    def list_employees(self) -> List[Employee]:
        """Return employees ordered by display name."""

        return sorted(self.employees.values(), key=lambda e: e.name.lower())

    def add_request(self, request: TimeOffRequest) -> None:
        self.time_off_requests.append(request)

    def find_requests(self, employee_id: Optional[str] = None) -> List[TimeOffRequest]:
        requests = list(self.time_off_requests)
        if employee_id:
            requests = [r for r in requests if r.employee_id == str(employee_id)]
        return sorted(requests, key=lambda r: r.start)

    def add_shift(self, shift: Shift) -> None:
        self.shifts.append(shift)

    @staticmethod
    def serialize_employee(employee: Employee) -> dict:
        return {
            "id": employee.id,
            "name": employee.name,
            "position": employee.position,
            "color": employee.color,
            "ptoHours": employee.pto_hours,
            "pslHours": employee.psl_hours,
        }

    @staticmethod
    def deserialize_employee(data: dict) -> Employee:
        return Employee(
            id=str(data["id"]),
            name=data.get("name") or "",
            position=data.get("position") or "",
            color=data.get("color") or "",
            pto_hours=_optional_float(data.get("ptoHours")),
            psl_hours=_optional_float(data.get("pslHours")),
        )

    @staticmethod
    def _serialize_request(request: TimeOffRequest) -> dict:
        kind = request.kind.value if isinstance(request.kind, TimeOffKind) else request.kind
        return {
            "id": request.id,
            "employeeId": request.employee_id,
            "kind": kind,
            "startISO": to_iso(request.start),
            "endISO": to_iso(request.end),
            "hours": request.hours,
            "notes": request.notes,
            "status": request.status.value,
            "createdAtISO": to_iso(request.created_at),
            "verificationNeeded": request.verification_needed,
        }

    @staticmethod
    def _deserialize_request(data: dict) -> TimeOffRequest:
        raw_kind = data.get("kind") or ""
        return TimeOffRequest(
            id=str(data["id"]),
            employee_id=str(data.get("employeeId", "")),
            kind=TimeOffKind.parse(raw_kind) or raw_kind,
            start=parse_iso(data["startISO"]),
            end=parse_iso(data["endISO"]),
            hours=float(data.get("hours") or 0.0),
            status=RequestStatus(data.get("status", RequestStatus.PENDING.value)),
            created_at=parse_iso(data["createdAtISO"]),
            notes=data.get("notes") or "",
            verification_needed=bool(data.get("verificationNeeded", False)),
        )

    @staticmethod
    def _serialize_shift(shift: Shift) -> dict:
        return {
            "name": shift.employee_name,
            "date": shift.day.isoformat(),
            "startTime": shift.start_time.strftime("%H:%M"),
            "endTime": shift.end_time.strftime("%H:%M"),
            "notes": shift.notes,
        }

    @staticmethod
    def _deserialize_shift(data: dict) -> Shift:
        return Shift(
            employee_name=data["name"],
            day=date.fromisoformat(data["date"]),
            start_time=parse_clock(data["startTime"]),
            end_time=parse_clock(data["endTime"]),
            notes=data.get("notes") or "",
        )


def find_employee_by_name(employees: Iterable[Employee], name: str) -> Optional[Employee]:
    needle = normalize_name(name)
    if not needle:
        return None
    return next((e for e in employees if normalize_name(e.name) == needle), None)


def _optional_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)
