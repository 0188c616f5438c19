from __future__ import annotations
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Iterable, List, Mapping, Optional, Sequence
from uuid import uuid4

from .config import Settings, get_settings
from .dates import in_summer, inclusive_day_count, iter_days, local_date, local_hour_instant, local_instant, localize, zone
from .errors import PolicyRejection, TimeOffError, ValidationError
from .logging import get_logger
from .models import Decision, Employee, RequestDraft, RequestStatus, TimeOffKind, TimeOffRequest
from .usage import summer_days_used

logger = get_logger(__name__)


@dataclass
class Evaluation:
    """Values derived from a draft, shared by every rule in the chain."""

    draft: RequestDraft
    start: datetime
    end: datetime
    hours: float
    requested_days: int
    today: date
    employees: Mapping[str, Employee]
    prior_requests: Sequence[TimeOffRequest]
    employee: Optional[Employee] = None


@dataclass
class PolicyRule:
    """Base policy rule interface."""

    def check(self, evaluation: Evaluation) -> None:
        raise NotImplementedError


@dataclass
class TimeOrderRule(PolicyRule):
    def check(self, evaluation: Evaluation) -> None:
        if evaluation.end <= evaluation.start:
            raise ValidationError("End must be after start")


@dataclass
class EmployeeExistsRule(PolicyRule):
    def check(self, evaluation: Evaluation) -> None:
        employee = evaluation.employees.get(str(evaluation.draft.employee_id))
        if employee is None:
            raise ValidationError("Employee not found")
        evaluation.employee = employee


@dataclass
class LeadTimeRule(PolicyRule):
    lead_days: int = 14

    def check(self, evaluation: Evaluation) -> None:
        if evaluation.draft.kind is not TimeOffKind.PTO:
            return
        notice = (evaluation.draft.start_date - evaluation.today).days
        if notice < self.lead_days:
            raise PolicyRejection(
                f"PTO must be requested at least {self.lead_days} days in advance ({notice} days notice given)"
            )


@dataclass
class SummerCapRule(PolicyRule):
    settings: Settings = field(default_factory=get_settings)

    def summer_year(self, draft: RequestDraft) -> Optional[int]:
        """Year of the first summer day the draft touches, if any."""

        for day in iter_days(draft.start_date, draft.end_date):
            if in_summer(day, self.settings.summer_start, self.settings.summer_end):
                return day.year
        return None

    def check(self, evaluation: Evaluation) -> None:
        draft = evaluation.draft
        if draft.kind is not TimeOffKind.PTO:
            return
        year = self.summer_year(draft)
        if year is None:
            return
        used = summer_days_used(draft.employee_id, year, evaluation.prior_requests, self.settings)
        cap = self.settings.summer_cap_days
        if used + evaluation.requested_days > cap:
            raise PolicyRejection(
                f"Summer PTO is limited to {cap} days per year "
                f"({used} already used, {evaluation.requested_days} requested)"
            )


@dataclass
class BalanceRule(PolicyRule):
    def check(self, evaluation: Evaluation) -> None:
        kind = evaluation.draft.kind
        if kind is TimeOffKind.PTO:
            available, label = evaluation.employee.pto_hours, "PTO"
        elif kind is TimeOffKind.SICK:
            available, label = evaluation.employee.psl_hours, "sick leave"
        else:
            return
        available = available or 0.0
        if evaluation.hours > available:
            raise PolicyRejection(
                f"Insufficient {label} balance: {evaluation.hours:g}h requested, {available:g}h available"
            )


def default_rules(settings: Settings) -> List[PolicyRule]:
    return [
        TimeOrderRule(),
        EmployeeExistsRule(),
        LeadTimeRule(lead_days=settings.pto_lead_days),
        SummerCapRule(settings=settings),
        BalanceRule(),
    ]


class PolicyEvaluator:
    """Runs a draft through the ordered rule chain; the first failure wins."""

    def __init__(self, settings: Settings | None = None, rules: List[PolicyRule] | None = None) -> None:
        self.settings = settings or get_settings()
        self.tz = zone(self.settings.timezone)
        self.rules = rules if rules is not None else default_rules(self.settings)

    def evaluate(
        self,
        draft: RequestDraft,
        employees: Iterable[Employee] | Mapping[str, Employee],
        prior_requests: Iterable[TimeOffRequest],
        now: datetime,
    ) -> Decision:
        try:
            evaluation = self.prepare(draft, employees, prior_requests, now)
            for rule in self.rules:
                rule.check(evaluation)
        except TimeOffError as exc:
            logger.info(
                "request_evaluated",
                employee_id=draft.employee_id,
                kind=draft.kind.value,
                approved=False,
                reason=str(exc),
            )
            return Decision.reject(exc)

        status = RequestStatus.PENDING if draft.kind is TimeOffKind.PFML else RequestStatus.APPROVED
        record = self.build_record(evaluation, status, now)
        logger.info(
            "request_evaluated",
            employee_id=draft.employee_id,
            kind=draft.kind.value,
            approved=True,
            status=status.value,
            hours=record.hours,
        )
        return Decision.accept(record)

    def denied_record(self, draft: RequestDraft, now: datetime) -> TimeOffRequest:
        """Build a ``denied`` record for a rejected draft without re-checking policy."""

        evaluation = self.prepare(draft, {}, [], now)
        TimeOrderRule().check(evaluation)
        return self.build_record(evaluation, RequestStatus.DENIED, now)

    def prepare(
        self,
        draft: RequestDraft,
        employees: Iterable[Employee] | Mapping[str, Employee],
        prior_requests: Iterable[TimeOffRequest],
        now: datetime,
    ) -> Evaluation:
        start, end = self.instants(draft)
        hours = self.hours_for(draft, start, end)
        if not isinstance(employees, Mapping):
            employees = {employee.id: employee for employee in employees}
        return Evaluation(
            draft=draft,
            start=start,
            end=end,
            hours=hours,
            requested_days=self.requested_days(draft, hours),
            today=local_date(now, self.tz),
            employees=employees,
            prior_requests=list(prior_requests),
        )

    def instants(self, draft: RequestDraft) -> tuple[datetime, datetime]:
        if draft.full_day:
            window = self.settings.daily_window
            return (
                local_hour_instant(draft.start_date, window.start_hour, self.tz),
                local_hour_instant(draft.end_date, window.end_hour, self.tz),
            )
        if draft.start_time is None or draft.end_time is None:
            raise ValidationError("Start and end times are required for partial-day requests")
        return (
            local_instant(draft.start_date, draft.start_time, self.tz),
            local_instant(draft.end_date, draft.end_time, self.tz),
        )

    def hours_for(self, draft: RequestDraft, start: datetime, end: datetime) -> float:
        if draft.full_day:
            return inclusive_day_count(draft.start_date, draft.end_date) * self.settings.hours_per_full_day
        elapsed = (end - start).total_seconds() / 3600
        return max(self.settings.min_partial_hours, elapsed)

    def requested_days(self, draft: RequestDraft, hours: float) -> int:
        if draft.full_day:
            return inclusive_day_count(draft.start_date, draft.end_date)
        return math.ceil(hours / self.settings.hours_per_full_day)

    def build_record(self, evaluation: Evaluation, status: RequestStatus, now: datetime) -> TimeOffRequest:
        draft = evaluation.draft
        verification = (
            draft.kind is TimeOffKind.SICK and evaluation.requested_days > self.settings.sick_verification_days
        )
        return TimeOffRequest(
            id=str(uuid4()),
            employee_id=str(draft.employee_id),
            kind=draft.kind,
            start=evaluation.start,
            end=evaluation.end,
            hours=evaluation.hours,
            status=status,
            created_at=localize(now, self.tz).astimezone(timezone.utc),
            notes=draft.notes,
            verification_needed=verification,
        )


def evaluate(
    draft: RequestDraft,
    employees: Iterable[Employee] | Mapping[str, Employee],
    prior_requests: Iterable[TimeOffRequest],
    now: datetime,
    settings: Settings | None = None,
) -> Decision:
    return PolicyEvaluator(settings).evaluate(draft, employees, prior_requests, now)
