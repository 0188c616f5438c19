from __future__ import annotations
import json
from pathlib import Path
from typing import List, Optional, Union

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator

from .config import Settings, get_settings
from .errors import RosterError, ValidationError
from .logging import get_logger
from .models import Employee, SignIn
from .storage import RecordStore, normalize_name

logger = get_logger(__name__)


class RosterEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    position: str = ""
    color: str = ""
    pto_hours: Optional[float] = Field(default=None, alias="ptoHours", ge=0)
    psl_hours: Optional[float] = Field(default=None, alias="pslHours", ge=0)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Union[str, int]) -> str:
        return str(value)

    @field_validator("position", "color", mode="before")
    @classmethod
    def blank_if_missing(cls, value: Optional[str]) -> str:
        return value or ""

    def to_employee(self) -> Employee:
        return Employee(
            id=self.id,
            name=self.name,
            position=self.position,
            color=self.color,
            pto_hours=self.pto_hours,
            psl_hours=self.psl_hours,
        )


def _read_source(source: str, timeout: float) -> object:
    if source.startswith(("http://", "https://")):
        response = requests.get(source, timeout=timeout, headers={"Cache-Control": "no-store"})
        response.raise_for_status()
        return response.json()
    with Path(source).open("r", encoding="utf-8") as handle:
        return json.load(handle)


def load_roster(source: str, timeout: float = 10.0) -> List[Employee]:
    """Read and validate a roster from a JSON file path or an http(s) URL.

    Raises:
        RosterError: If the source cannot be read or is not a list of employees.
    """
    try:
        payload = _read_source(source, timeout)
    except (OSError, ValueError, requests.RequestException) as exc:
        raise RosterError(f"Roster not available from {source}: {exc}") from exc
    if not isinstance(payload, list):
        raise RosterError(f"Roster at {source} must be a JSON array")
    try:
        return [RosterEntry.model_validate(item).to_employee() for item in payload]
    except PydanticValidationError as exc:
        raise RosterError(f"Roster at {source} has invalid entries: {exc}") from exc


def sync_roster(store: RecordStore, source: str, timeout: float = 10.0) -> bool:
    """Replace the store's employees with the roster; keep prior state on failure."""
    try:
        employees = load_roster(source, timeout)
    except RosterError as exc:
        logger.warning("roster_sync_failed", source=source, error=str(exc))
        return False
    store.replace_employees(employees)
    store.save()
    logger.info("roster_synced", source=source, employees=len(employees))
    return True


def check_shared_password(password: str, shared_password: str) -> bool:
    return password == shared_password


def sign_in(store: RecordStore, name: str, password: str, settings: Optional[Settings] = None) -> SignIn:
    """Identify a roster employee by full name and the shared password.

    Raises:
        ValidationError: If the name is not on the roster or the password is wrong.
    """
    settings = settings or get_settings()
    employee = store.find_employee_by_name(name)
    if employee is None:
        raise ValidationError("Name not found. Please enter your full name as it appears in the roster.")
    if not check_shared_password(password, settings.shared_password):
        raise ValidationError("Incorrect password.")
    is_admin = normalize_name(employee.name) == normalize_name(settings.admin_name)
    logger.info("signed_in", employee_id=employee.id, admin=is_admin)
    return SignIn(employee=employee, is_admin=is_admin)
