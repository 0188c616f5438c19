from __future__ import annotations
from typing import Iterable

from .config import Settings
from .dates import in_summer, iter_days, local_date, zone
from .models import TimeOffKind, TimeOffRequest


def summer_days_used(employee_id: str, year: int, requests: Iterable[TimeOffRequest], settings: Settings) -> int:
    """Count the summer calendar days of ``year`` already claimed by PTO requests.

    Every stored PTO request counts, whatever its status, so pending and
    denied requests consume the cap as well. Each request is walked day by
    day over its inclusive local date range.
    """

    tz = zone(settings.timezone)
    used = 0
    for request in requests:
        if request.employee_id != str(employee_id) or request.known_kind is not TimeOffKind.PTO:
            continue
        first = local_date(request.start, tz)
        last = local_date(request.end, tz)
        if first.year > year or last.year < year:
            continue
        for day in iter_days(first, last):
            if day.year == year and in_summer(day, settings.summer_start, settings.summer_end):
                used += 1
    return used
