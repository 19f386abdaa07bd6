"""
Commission models.

Usage:
    from commissions.models import Commission, Milestone
"""

from commissions.models.artist_settings import ArtistSettings
from commissions.models.commission import Commission
from commissions.models.milestone import Milestone, MilestoneStageTemplate
from commissions.models.progress import PendingReview, ProgressUpdate

__all__ = [
    "ArtistSettings",
    "Commission",
    "Milestone",
    "MilestoneStageTemplate",
    "PendingReview",
    "ProgressUpdate",
]
