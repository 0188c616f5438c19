from __future__ import annotations


class TimeOffError(Exception):
    """Base class for every error raised by the time-off engine."""


class ValidationError(TimeOffError):
    """The draft itself is malformed (bad ordering, unknown employee)."""


class PolicyRejection(TimeOffError):
    """The draft is well formed but an HR policy rule denies it."""


class RosterError(TimeOffError):
    pass


class StoreError(TimeOffError):
    pass
