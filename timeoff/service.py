from __future__ import annotations
from datetime import datetime
from typing import List, Optional

from .config import Settings, get_settings
from .dates import local_date, zone
from .errors import PolicyRejection
from .ledger import apply_approval
from .logging import get_logger
from .models import Decision, RequestDraft, RequestStatus, TimeOffRequest
from .policy import PolicyEvaluator
from .storage import RecordStore

logger = get_logger(__name__)


def submit_request(
    store: RecordStore,
    draft: RequestDraft,
    now: Optional[datetime] = None,
    settings: Settings | None = None,
    record_denials: bool = True,
) -> Decision:
    """Evaluate a draft against the store and persist the outcome.

    Accepted records are appended and, when approved, charged to the
    employee's balance in the same save. Policy rejections are logged to the
    history as ``denied`` records unless ``record_denials`` is off; malformed
    drafts are never stored.
    """

    settings = settings or get_settings()
    now = now or datetime.now(zone(settings.timezone))
    evaluator = PolicyEvaluator(settings)
    decision = evaluator.evaluate(draft, store.employees, store.time_off_requests, now)

    if decision.approved:
        record = decision.record
        store.add_request(record)
        if record.status is RequestStatus.APPROVED:
            apply_approval(store.employees[record.employee_id], record)
        store.save()
        logger.info("request_recorded", request_id=record.id, status=record.status.value)
        return decision

    if record_denials and isinstance(decision.error, PolicyRejection):
        denied = evaluator.denied_record(draft, now)
        store.add_request(denied)
        store.save()
        logger.info("request_recorded", request_id=denied.id, status=denied.status.value)
    return decision


def requests_for(
    store: RecordStore,
    employee_id: Optional[str] = None,
    year: Optional[int] = None,
    settings: Settings | None = None,
) -> List[TimeOffRequest]:
    requests = store.find_requests(employee_id)
    if year is None:
        return requests
    tz = zone((settings or get_settings()).timezone)
    return [r for r in requests if year in (local_date(r.start, tz).year, local_date(r.end, tz).year)]
