"""
Lookup and role checks shared by the commission services.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from commissions.exceptions import (
    CommissionNotFoundError,
    MilestoneNotFoundError,
    NotCommissionParticipantError,
)
from commissions.models import Commission, Milestone

if TYPE_CHECKING:
    from authentication.models import User


def get_commission(commission_id, *, for_update: bool = False) -> Commission:
    """
    Fetch a commission or raise CommissionNotFoundError.

    ``for_update`` takes a row lock; callers must be inside a transaction.
    """
    queryset = Commission.objects.all()
    if for_update:
        queryset = queryset.select_for_update()
    commission = queryset.filter(pk=commission_id).first()
    if commission is None:
        raise CommissionNotFoundError(
            f"Commission {commission_id} not found",
            details={"commission_id": str(commission_id)},
        )
    return commission


def get_milestone(milestone_id, *, for_update: bool = False) -> Milestone:
    queryset = Milestone.objects.select_related("commission")
    if for_update:
        queryset = queryset.select_for_update()
    milestone = queryset.filter(pk=milestone_id).first()
    if milestone is None:
        raise MilestoneNotFoundError(
            f"Milestone {milestone_id} not found",
            details={"milestone_id": str(milestone_id)},
        )
    return milestone


def require_participant(commission: Commission, user: User) -> None:
    if not commission.is_participant(user):
        raise NotCommissionParticipantError(
            "You are not a participant in this commission",
            details={"commission_id": str(commission.pk)},
        )


def require_artist(commission: Commission, user: User, action: str) -> None:
    require_participant(commission, user)
    if commission.artist_id != user.pk:
        raise NotCommissionParticipantError(
            f"Only the artist can {action}",
            details={"commission_id": str(commission.pk)},
        )


def require_client(commission: Commission, user: User, action: str) -> None:
    require_participant(commission, user)
    if commission.client_id != user.pk:
        raise NotCommissionParticipantError(
            f"Only the client can {action}",
            details={"commission_id": str(commission.pk)},
        )
