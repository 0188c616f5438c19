from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Dict, List, Optional, Union


class TimeOffKind(str, Enum):
    PTO = "PTO"
    SICK = "SICK"
    PFML = "PFML"

    @classmethod
    def parse(cls, value: Union[str, "TimeOffKind", None]) -> Optional["TimeOffKind"]:
        """Return the matching kind, or None for anything unrecognized."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return None


class RequestStatus(str, Enum):
    APPROVED = "approved"
    PENDING = "pending"
    DENIED = "denied"


@dataclass
class Employee:
    id: str
    name: str
    position: str = ""
    color: str = ""
    pto_hours: Optional[float] = None
    psl_hours: Optional[float] = None


@dataclass
class TimeOffRequest:
    id: str
    employee_id: str
    # Unrecognized kinds loaded from storage stay as their raw string.
    kind: Union[TimeOffKind, str]
    start: datetime
    end: datetime
    hours: float
    status: RequestStatus
    created_at: datetime
    notes: str = ""
    verification_needed: bool = False

    @property
    def known_kind(self) -> Optional[TimeOffKind]:
        return TimeOffKind.parse(self.kind)


@dataclass
class RequestDraft:
    kind: TimeOffKind
    employee_id: str
    start_date: date
    end_date: date
    full_day: bool = True
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    notes: str = ""


@dataclass
class Decision:
    """Outcome of evaluating a draft.

    ``approved`` means the draft was accepted and ``record`` is ready to be
    persisted; a PFML record is accepted with a ``pending`` status. A rejected
    decision carries the reason of the first failing check.
    """

    approved: bool
    record: Optional[TimeOffRequest] = None
    reasons: List[str] = field(default_factory=list)
    error: Optional[Exception] = None

    @classmethod
    def accept(cls, record: TimeOffRequest) -> "Decision":
        return cls(approved=True, record=record)

    @classmethod
    def reject(cls, error: Exception) -> "Decision":
        return cls(approved=False, reasons=[str(error)], error=error)


@dataclass
class KindTotals:
    requested_hours: float = 0.0
    approved_hours: float = 0.0
    taken_hours: float = 0.0


@dataclass
class EmployeeTotals:
    employee_id: str
    name: str
    position: str
    by_kind: Dict[TimeOffKind, KindTotals] = field(default_factory=lambda: {kind: KindTotals() for kind in TimeOffKind})

    def add(self, kind: TimeOffKind, hours: float, approved: bool, taken: bool) -> None:
        bucket = self.by_kind[kind]
        bucket.requested_hours += hours
        if approved:
            bucket.approved_hours += hours
            if taken:
                bucket.taken_hours += hours


@dataclass
class Shift:
    employee_name: str
    day: date
    start_time: time
    end_time: time
    notes: str = ""


@dataclass
class SignIn:
    employee: Employee
    is_admin: bool = False
