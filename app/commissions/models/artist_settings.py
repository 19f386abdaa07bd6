"""
Per-artist admission settings.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.models import BaseModel


class ArtistSettings(BaseModel):
    """
    Controls whether an artist accepts new commissions.

    An artist without a settings row is treated as open, with
    COMMISSION_DEFAULT_QUEUE_SLOTS slots and no waitlist.

    Fields:
        max_queue_slots: Active (pending + in progress) commissions allowed
        is_open: Artist accepts commissions at all
        commissions_paused: Temporary pause, e.g. during holidays
        allow_waitlist: Admit beyond max_queue_slots, flagged as waitlisted
    """

    artist = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="artist_settings",
    )

    max_queue_slots = models.PositiveIntegerField(default=5)
    is_open = models.BooleanField(default=True)
    commissions_paused = models.BooleanField(default=False)
    allow_waitlist = models.BooleanField(default=False)

    class Meta:
        verbose_name = "artist settings"
        verbose_name_plural = "artist settings"

    def __str__(self) -> str:
        return f"ArtistSettings(artist={self.artist_id})"

    @classmethod
    def defaults_for(cls, artist_id) -> ArtistSettings:
        """Unsaved settings used when the artist never configured any."""
        return cls(
            artist_id=artist_id,
            max_queue_slots=settings.COMMISSION_DEFAULT_QUEUE_SLOTS,
        )
