"""
State machine enums for commission models.
"""

from commissions.state_machines.states import (
    ApprovalStatus,
    CommissionPaymentStatus,
    CommissionStatus,
    EscrowStatus,
    MilestonePaymentStatus,
    MilestoneStage,
    PaymentType,
    ProgressUpdateType,
    ReviewType,
)

__all__ = [
    "ApprovalStatus",
    "CommissionPaymentStatus",
    "CommissionStatus",
    "EscrowStatus",
    "MilestonePaymentStatus",
    "MilestoneStage",
    "PaymentType",
    "ProgressUpdateType",
    "ReviewType",
]
