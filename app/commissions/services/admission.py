"""
Admission gate for new commission requests.

The gate is advisory: it counts the artist's active commissions without
locking, so two concurrent requests may both be admitted into the last slot.
The queue can overshoot by the number of racing requests; nothing else
depends on the count being exact.

Usage:
    from commissions.services.admission import AdmissionService

    decision = AdmissionService.can_admit(artist.id)
    if not decision.allowed:
        raise AdmissionRejectedError(...)
"""

from __future__ import annotations

from dataclasses import dataclass

from core.services import BaseService

from commissions.models import ArtistSettings, Commission
from commissions.state_machines import CommissionStatus

ACTIVE_STATUSES = (CommissionStatus.PENDING, CommissionStatus.IN_PROGRESS)

REASON_CLOSED = "closed"
REASON_QUEUE_FULL = "queue_full"


@dataclass(frozen=True)
class AdmissionDecision:
    """
    Outcome of an admission check.

    Attributes:
        allowed: Whether a new request may be created
        reason: "closed" or "queue_full" when rejected
        waitlisted: Admitted past the queue limit because the artist allows a waitlist
    """

    allowed: bool
    reason: str | None = None
    waitlisted: bool = False


@dataclass(frozen=True)
class QueueStatus:
    slots_total: int
    slots_used: int
    slots_available: int
    is_full: bool
    commissions_paused: bool
    waitlist_enabled: bool
    accepting_commissions: bool


class AdmissionService(BaseService):
    """
    Decides whether an artist can take a new commission.

    Methods:
        can_admit: Admission decision for a new request
        queue_status: Queue summary shown on the artist's profile
    """

    @classmethod
    def _settings_for(cls, artist_id) -> ArtistSettings:
        artist_settings = ArtistSettings.objects.filter(artist_id=artist_id).first()
        return artist_settings or ArtistSettings.defaults_for(artist_id)

    @classmethod
    def active_count(cls, artist_id) -> int:
        return Commission.objects.filter(
            artist_id=artist_id,
            status__in=ACTIVE_STATUSES,
        ).count()

    @classmethod
    def can_admit(cls, artist_id) -> AdmissionDecision:
        artist_settings = cls._settings_for(artist_id)

        if not artist_settings.is_open or artist_settings.commissions_paused:
            return AdmissionDecision(allowed=False, reason=REASON_CLOSED)

        if cls.active_count(artist_id) >= artist_settings.max_queue_slots:
            if artist_settings.allow_waitlist:
                return AdmissionDecision(allowed=True, waitlisted=True)
            return AdmissionDecision(allowed=False, reason=REASON_QUEUE_FULL)

        return AdmissionDecision(allowed=True)

    @classmethod
    def queue_status(cls, artist_id) -> QueueStatus:
        artist_settings = cls._settings_for(artist_id)
        used = cls.active_count(artist_id)
        total = artist_settings.max_queue_slots
        is_full = used >= total
        open_for_work = artist_settings.is_open and not artist_settings.commissions_paused

        return QueueStatus(
            slots_total=total,
            slots_used=used,
            slots_available=max(total - used, 0),
            is_full=is_full,
            commissions_paused=artist_settings.commissions_paused,
            waitlist_enabled=artist_settings.allow_waitlist,
            accepting_commissions=open_for_work and (not is_full or artist_settings.allow_waitlist),
        )
