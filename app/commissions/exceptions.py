"""
Commission-specific exceptions.

Exception Hierarchy:
    NotFoundError
    ├── CommissionNotFoundError
    └── MilestoneNotFoundError
    PermissionDeniedError
    └── NotCommissionParticipantError - Caller is neither client nor artist,
        or acts in the wrong role
    ConflictError
    ├── InvalidStateTransitionError - Operation not allowed in current state
    └── AdmissionRejectedError - Artist is closed or the queue is full
    ValidationError
    └── MilestonePlanError - Malformed plan (empty, bad percentage total)

Usage:
    from commissions.exceptions import InvalidStateTransitionError

    raise InvalidStateTransitionError(
        "Cannot accept a commission in 'completed' state",
        details={"current_state": "completed", "transition": "accept"},
    )
"""

from __future__ import annotations

from core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


class CommissionNotFoundError(NotFoundError):
    default_error_code: str = "COMMISSION_NOT_FOUND"


class MilestoneNotFoundError(NotFoundError):
    default_error_code: str = "MILESTONE_NOT_FOUND"


class NotCommissionParticipantError(PermissionDeniedError):
    """
    Raised when the caller may not act on a commission.

    Covers non-participants as well as participants acting in the wrong
    role, e.g. a client trying to accept their own request.
    """

    default_error_code: str = "NOT_COMMISSION_PARTICIPANT"


class InvalidStateTransitionError(ConflictError):
    """
    Raised when an operation is not allowed in the current state.

    Wraps django-fsm's TransitionNotAllowed and the service-level state
    checks (confirmed plans, locked milestones, released escrow).

    Attributes:
        details: Contains current_state and the attempted transition
    """

    default_error_code: str = "INVALID_STATE_TRANSITION"


class AdmissionRejectedError(ConflictError):
    """
    Raised when the artist cannot take a new commission.

    ``details["reason"]`` is ``closed`` or ``queue_full``.
    """

    default_error_code: str = "ADMISSION_REJECTED"


class MilestonePlanError(ValidationError):
    default_error_code: str = "INVALID_MILESTONE_PLAN"


__all__ = [
    "CommissionNotFoundError",
    "MilestoneNotFoundError",
    "NotCommissionParticipantError",
    "InvalidStateTransitionError",
    "AdmissionRejectedError",
    "MilestonePlanError",
]
