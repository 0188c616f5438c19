from __future__ import annotations

from .logging import get_logger
from .models import Employee, RequestStatus, TimeOffKind, TimeOffRequest

logger = get_logger(__name__)

BALANCE_FIELDS = {
    TimeOffKind.PTO: "pto_hours",
    TimeOffKind.SICK: "psl_hours",
}


def apply_approval(employee: Employee, record: TimeOffRequest) -> Employee:
    """Charge an approved PTO or SICK record against the employee's balance.

    Balances never go below zero. PFML, unknown kinds and records that are
    not approved leave the employee untouched.
    """

    if record.status is not RequestStatus.APPROVED:
        return employee
    balance_field = BALANCE_FIELDS.get(record.known_kind)
    if balance_field is None:
        return employee
    current = getattr(employee, balance_field) or 0.0
    updated = max(current - record.hours, 0.0)
    setattr(employee, balance_field, updated)
    logger.info(
        "balance_applied",
        employee_id=employee.id,
        request_id=record.id,
        balance=balance_field,
        before=current,
        after=updated,
    )
    return employee
