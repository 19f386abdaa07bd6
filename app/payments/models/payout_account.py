"""
PayoutAccount model for Stripe Connect payouts.

Each artist who receives escrow releases has one PayoutAccount pointing
at their Stripe Connect account.

Usage:
    from payments.models import PayoutAccount

    account = PayoutAccount.objects.create(
        artist=artist,
        stripe_account_id="acct_1234567890",
        onboarding_status=OnboardingStatus.IN_PROGRESS,
    )

    if account.is_ready_for_payouts:
        # Escrow can be released to this account
        pass
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin, VersionedMixin
from core.models import BaseModel

from payments.state_machines import OnboardingStatus


class PayoutAccount(UUIDPrimaryKeyMixin, VersionedMixin, BaseModel):
    """
    An artist's Stripe Connected Account.

    Fields:
        artist: OneToOne link to the artist
        stripe_account_id: Unique Stripe Account ID (acct_xxx)
        onboarding_status: Current state of Stripe Connect onboarding
        payouts_enabled: Whether Stripe has enabled payouts
        metadata: Flexible JSON storage for additional data

    Note:
        The artist field uses PROTECT so a user with a payout account
        cannot be deleted while transfers may still reference it.
    """

    artist = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="payout_account",
    )

    stripe_account_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Account ID (acct_xxx)",
    )

    onboarding_status = models.CharField(
        max_length=20,
        choices=OnboardingStatus.choices,
        default=OnboardingStatus.NOT_STARTED,
        db_index=True,
    )

    payouts_enabled = models.BooleanField(
        default=False,
        help_text="Whether Stripe has enabled payouts for this account",
    )

    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payout Account"
        verbose_name_plural = "Payout Accounts"

    def __str__(self) -> str:
        return f"PayoutAccount({self.stripe_account_id}, {self.onboarding_status})"

    @property
    def is_ready_for_payouts(self) -> bool:
        """Onboarding is complete and Stripe has enabled payouts."""
        return self.onboarding_status == OnboardingStatus.COMPLETE and self.payouts_enabled
