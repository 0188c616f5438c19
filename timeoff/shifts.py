from __future__ import annotations
from datetime import date
from typing import List, Optional

from .errors import ValidationError
from .logging import get_logger
from .models import Shift
from .storage import RecordStore, normalize_name

logger = get_logger(__name__)


def overlaps(first: Shift, second: Shift) -> bool:
    if normalize_name(first.employee_name) != normalize_name(second.employee_name) or first.day != second.day:
        return False
    return first.start_time < second.end_time and first.end_time > second.start_time


def add_shift(store: RecordStore, shift: Shift) -> Shift:
    if not normalize_name(shift.employee_name):
        raise ValidationError("Please provide an employee name.")
    if shift.end_time <= shift.start_time:
        raise ValidationError("End time must be after start time.")
    if any(overlaps(existing, shift) for existing in store.shifts):
        raise ValidationError("This shift overlaps with an existing shift for this employee.")
    store.add_shift(shift)
    store.save()
    logger.info("shift_added", employee=shift.employee_name, day=shift.day.isoformat())
    return shift


def remove_shift(store: RecordStore, index: int) -> Shift:
    if not 0 <= index < len(store.shifts):
        raise ValidationError(f"No shift at position {index}")
    removed = store.shifts.pop(index)
    store.save()
    return removed


def shifts_for(store: RecordStore, day: Optional[date] = None) -> List[Shift]:
    shifts = store.shifts if day is None else [s for s in store.shifts if s.day == day]
    return sorted(shifts, key=lambda s: (s.day, s.start_time, s.employee_name))
