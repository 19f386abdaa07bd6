"""
Commission services.

Usage:
    from commissions.services import (
        AdmissionService,
        CommissionLifecycleService,
        MilestonePlanService,
    )
"""

from commissions.services.admission import AdmissionDecision, AdmissionService, QueueStatus
from commissions.services.lifecycle import CommissionLifecycleService
from commissions.services.milestones import (
    MilestonePaymentInfo,
    MilestonePlanService,
    StartResult,
)

__all__ = [
    "AdmissionDecision",
    "AdmissionService",
    "QueueStatus",
    "CommissionLifecycleService",
    "MilestonePaymentInfo",
    "MilestonePlanService",
    "StartResult",
]
