"""
Status and token rules for a loan request.

Administrators may move a request to any status in ``LoanStatusEnum``; no
transition is refused for being out of order. Token assignment is the one
automatic transition: it promotes ``pending`` to ``under-review`` unless the
caller names a status explicitly.

The helpers here only mutate the request object in memory; persisting it is
the caller's job.
"""

import random
import time
from datetime import datetime, date, time as dt_time
from typing import Any, Callable, Optional, Union

from qarz_portal.schemas.loan_schema import LoanStatusEnum, TokenAssignmentRequest

TOKEN_TIME_DIGITS = 8
TOKEN_RANDOM_DIGITS = 3


def generate_token_number(prefix: str = "SWF", now_ms: Optional[int] = None, tie_breaker: Optional[int] = None) -> str:
    """Build ``<prefix><last 8 digits of epoch ms><3-digit tie breaker>``.

    Uniqueness is enforced by the storage index, not here.
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    if tie_breaker is None:
        tie_breaker = random.randint(0, 10 ** TOKEN_RANDOM_DIGITS - 1)
    time_part = str(now_ms)[-TOKEN_TIME_DIGITS:].zfill(TOKEN_TIME_DIGITS)
    return f"{prefix}{time_part}{tie_breaker:0{TOKEN_RANDOM_DIGITS}d}"


def parse_status(value: Any) -> LoanStatusEnum:
    if isinstance(value, LoanStatusEnum):
        return value
    if value is None or value == "":
        raise ValueError("Status is required")
    valid = ", ".join(s.value for s in LoanStatusEnum)
    if not isinstance(value, str):
        raise ValueError(f"Invalid status. Valid statuses are: {valid}")
    try:
        return LoanStatusEnum(value.strip().lower())
    except ValueError:
        raise ValueError(f"Invalid status. Valid statuses are: {valid}")


def apply_status(loan_request, new_status: Union[str, LoanStatusEnum]) -> LoanStatusEnum:
    status = parse_status(new_status)
    loan_request.status = status
    loan_request.updated_at = datetime.utcnow()
    return status


def _as_datetime(value: Union[date, datetime]) -> datetime:
    # BSON has no plain date type
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, dt_time.min)


def apply_token_assignment(
    loan_request,
    assignment: TokenAssignmentRequest,
    token_factory: Callable[[], str],
    default_office_location: Optional[str] = None,
) -> bool:
    """Give the request a token (once) and update its appointment.

    Returns True when a new token number was generated. A request that
    already holds a token keeps it; only the appointment fields change.
    An invalid status raises ValueError before anything is modified.
    """
    explicit_status = parse_status(assignment.status) if assignment.status is not None else None

    generated = False
    if not loan_request.token_number:
        loan_request.token_number = token_factory()
        generated = True

    if assignment.appointment_date:
        loan_request.appointment_date = _as_datetime(assignment.appointment_date)
    if assignment.appointment_time:
        loan_request.appointment_time = assignment.appointment_time
    if assignment.office_location:
        loan_request.office_location = assignment.office_location
    elif not loan_request.office_location and default_office_location:
        loan_request.office_location = default_office_location

    if explicit_status is not None:
        loan_request.status = explicit_status
    elif loan_request.status == LoanStatusEnum.pending:
        loan_request.status = LoanStatusEnum.under_review

    loan_request.updated_at = datetime.utcnow()
    return generated
