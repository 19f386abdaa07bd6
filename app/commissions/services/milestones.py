"""
Milestone plan service.

A milestone plan splits a commission's price into ordered stages that the
client pays one at a time:

    1. Artist generates a plan from templates or builds a custom one
    2. Artist may edit milestones while the plan is unconfirmed
    3. Client confirms the plan (percentages must sum to 100 ± 0.01)
    4. Client pays the unlocked milestone; the payment credits it, locks it
       and unlocks the next one
    5. Artist starts and completes milestones; completion creates an
       approval checkpoint for the client

Only the lowest unpaid milestone is ever unlocked, so payments always
advance the plan in order.

Usage:
    from commissions.services.milestones import MilestonePlanService

    milestones = MilestonePlanService.generate_plan(commission.id, artist)
    MilestonePlanService.confirm_plan(commission.id, client)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from django.db import transaction
from django.db.models import F, Sum
from django.utils import timezone

from core.exceptions import ValidationError
from core.services import BaseService

from commissions.exceptions import InvalidStateTransitionError, MilestonePlanError
from commissions.models import Commission, Milestone, MilestoneStageTemplate, ProgressUpdate
from commissions.services.access import (
    get_commission,
    get_milestone,
    require_artist,
    require_client,
)
from commissions.state_machines import (
    ApprovalStatus,
    CommissionStatus,
    MilestonePaymentStatus,
    MilestoneStage,
    PaymentType,
    ProgressUpdateType,
)
from notifications.models import NotificationEvent
from notifications.services import notify
from payments.money import to_cents

if TYPE_CHECKING:
    from typing import Any

    from authentication.models import User

HUNDRED = Decimal("100")
PERCENTAGE_TOLERANCE = Decimal("0.01")

OPEN_STATUSES = (CommissionStatus.PENDING, CommissionStatus.IN_PROGRESS)

EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "stage",
        "amount",
        "percentage",
        "due_date",
        "payment_required_before_work",
    }
)


def percentages_balance(total: Decimal) -> bool:
    """Whether a plan's percentage total is 100 within tolerance."""
    return abs(total - HUNDRED) <= PERCENTAGE_TOLERANCE


@dataclass(frozen=True)
class StartResult:
    """
    Outcome of starting a milestone.

    ``requires_payment`` is set when the milestone must be paid before the
    artist may begin; nothing is changed in that case.
    """

    milestone: Milestone
    started: bool
    requires_payment: bool = False


@dataclass(frozen=True)
class MilestonePaymentInfo:
    milestone: Milestone
    can_pay: bool


class MilestonePlanService(BaseService):
    """
    Service for milestone plans.

    Methods:
        list_templates: Active stage templates
        generate_plan / create_custom_plan: Build a plan (artist)
        update_milestone: Edit an unconfirmed plan (artist)
        confirm_plan: Freeze the plan (client)
        start_milestone / complete_milestone: Work on a stage (artist)
        mark_lowest_unpaid_paid: Credit a payment to the plan (reconciliation)
        payment_status_for: Whether the client can pay a milestone now
        request_revision: Record a revision request, charging past the free quota
    """

    @classmethod
    def list_templates(cls):
        return MilestoneStageTemplate.objects.filter(is_active=True).order_by("typical_order")

    # ==========================================================================
    # Plan creation
    # ==========================================================================

    @classmethod
    def generate_plan(
        cls,
        commission_id,
        user: User,
        template_ids: list[int] | None = None,
    ) -> list[Milestone]:
        """
        Generate a plan from stage templates.

        Template weights are scaled so the plan sums to exactly 100%; the
        last milestone absorbs rounding in both percentage and amount.
        """
        with transaction.atomic():
            commission = cls._lock_for_planning(commission_id, user)
            price = cls._require_price(commission)

            templates = cls.list_templates()
            if template_ids:
                templates = templates.filter(pk__in=template_ids)
            templates = list(templates)
            if not templates:
                raise MilestonePlanError(
                    "No milestone templates available",
                    error_code="NO_TEMPLATES",
                )

            weights = [template.default_percentage for template in templates]
            percentages = cls._split(HUNDRED, weights)
            amounts = cls._split(price, percentages)

            milestones = [
                Milestone(
                    commission=commission,
                    milestone_number=number,
                    title=template.title,
                    description=template.description,
                    stage=template.stage,
                    percentage=percentage,
                    amount=amount,
                )
                for number, (template, percentage, amount) in enumerate(
                    zip(templates, percentages, amounts), start=1
                )
            ]
            return cls._save_plan(commission, milestones)

    @classmethod
    def create_custom_plan(
        cls,
        commission_id,
        user: User,
        items: list[dict[str, Any]],
    ) -> list[Milestone]:
        """
        Build a plan from explicit items.

        Each item needs ``title`` and ``percentage``; ``amount`` is derived
        from the price when omitted.
        """
        if not items:
            raise MilestonePlanError(
                "A milestone plan needs at least one milestone",
                error_code="EMPTY_PLAN",
            )
        if any(not item.get("title") or item.get("percentage") is None for item in items):
            raise MilestonePlanError(
                "Every milestone needs a title and a percentage",
                error_code="INCOMPLETE_MILESTONE",
            )

        percentages = [Decimal(str(item["percentage"])) for item in items]
        if any(percentage <= 0 for percentage in percentages):
            raise MilestonePlanError(
                "Milestone percentages must be positive",
                error_code="INVALID_PERCENTAGE",
            )
        total = sum(percentages, Decimal("0"))
        if not percentages_balance(total):
            raise MilestonePlanError(
                "Milestone percentages must sum to 100",
                error_code="INVALID_PERCENTAGE_TOTAL",
                details={"total": str(total)},
            )

        with transaction.atomic():
            commission = cls._lock_for_planning(commission_id, user)

            explicit = [item.get("amount") for item in items]
            if all(amount is not None for amount in explicit):
                amounts = [to_cents(Decimal(str(amount))) for amount in explicit]
            elif all(amount is None for amount in explicit):
                amounts = cls._split(cls._require_price(commission), percentages)
            else:
                price = cls._require_price(commission)
                amounts = [
                    to_cents(Decimal(str(amount))) if amount is not None
                    else to_cents(price * percentage / HUNDRED)
                    for amount, percentage in zip(explicit, percentages)
                ]
            if any(amount <= 0 for amount in amounts):
                raise MilestonePlanError(
                    "Milestone amounts must be positive",
                    error_code="INVALID_AMOUNT",
                )

            milestones = [
                Milestone(
                    commission=commission,
                    milestone_number=number,
                    title=item["title"],
                    description=item.get("description", ""),
                    stage=item.get("stage") or MilestoneStage.CUSTOM,
                    percentage=to_cents(percentage),
                    amount=amount,
                    payment_required_before_work=item.get("payment_required_before_work", True),
                )
                for number, (item, percentage, amount) in enumerate(
                    zip(items, percentages, amounts), start=1
                )
            ]
            return cls._save_plan(commission, milestones)

    @classmethod
    def update_milestone(cls, milestone_id, user: User, **fields) -> Milestone:
        """Edit a milestone of an unconfirmed plan."""
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                "These fields cannot be edited",
                error_code="NOT_EDITABLE",
                details={"fields": sorted(unknown)},
            )

        with transaction.atomic():
            milestone = get_milestone(milestone_id, for_update=True)
            commission = milestone.commission
            require_artist(commission, user, "edit milestones")

            if commission.milestone_plan_confirmed:
                raise InvalidStateTransitionError(
                    "Milestones cannot be edited after the plan is confirmed",
                    error_code="PLAN_CONFIRMED",
                )
            if milestone.is_paid:
                raise InvalidStateTransitionError(
                    "Paid milestones cannot be edited",
                    error_code="MILESTONE_PAID",
                )

            for name in ("amount", "percentage"):
                if name in fields:
                    fields[name] = Decimal(str(fields[name]))
                    if fields[name] <= 0:
                        raise ValidationError(
                            f"Milestone {name} must be positive",
                            details={name: str(fields[name])},
                        )

            for name, value in fields.items():
                setattr(milestone, name, value)
            milestone.save(update_fields=[*fields, "updated_at"])

        return milestone

    # ==========================================================================
    # Confirmation
    # ==========================================================================

    @classmethod
    def confirm_plan(cls, commission_id, user: User) -> Commission:
        """
        Client confirms the plan.

        The flag flips through a single conditional UPDATE, so of two
        concurrent confirmations exactly one succeeds.
        """
        commission = get_commission(commission_id)
        require_client(commission, user, "confirm the milestone plan")

        aggregate = Milestone.objects.filter(commission=commission).aggregate(total=Sum("percentage"))
        if aggregate["total"] is None:
            raise MilestonePlanError(
                "There is no milestone plan to confirm",
                error_code="NO_MILESTONES",
            )
        if not percentages_balance(aggregate["total"]):
            raise MilestonePlanError(
                "Milestone percentages must sum to 100",
                error_code="INVALID_PERCENTAGE_TOTAL",
                details={"total": str(aggregate["total"])},
            )

        updated = Commission.objects.filter(
            pk=commission.pk,
            milestone_plan_confirmed=False,
        ).update(
            milestone_plan_confirmed=True,
            version=F("version") + 1,
            updated_at=timezone.now(),
        )
        if not updated:
            raise InvalidStateTransitionError(
                "Milestone plan is already confirmed",
                error_code="PLAN_ALREADY_CONFIRMED",
            )

        cls.get_logger().info(f"Milestone plan confirmed for commission {commission.pk}")
        notify(
            commission.artist_id,
            NotificationEvent.MILESTONE_PLAN_CONFIRMED,
            {"commission_id": str(commission.pk)},
        )
        return Commission.objects.get(pk=commission.pk)

    # ==========================================================================
    # Work
    # ==========================================================================

    @classmethod
    def start_milestone(cls, milestone_id, user: User) -> StartResult:
        """
        Artist starts work on a milestone.

        A locked milestone can only be started once it has been paid; an
        unpaid milestone that requires payment up front is reported back
        with ``requires_payment`` instead of being started.
        """
        with transaction.atomic():
            milestone = get_milestone(milestone_id, for_update=True)
            commission = milestone.commission
            require_artist(commission, user, "start a milestone")

            if not commission.milestone_plan_confirmed:
                raise InvalidStateTransitionError(
                    "The client must confirm the milestone plan first",
                    error_code="PLAN_NOT_CONFIRMED",
                )
            if milestone.is_locked and not milestone.is_paid:
                raise InvalidStateTransitionError(
                    "This milestone is locked. Complete previous milestones first.",
                    error_code="MILESTONE_LOCKED",
                )
            if milestone.payment_required_before_work and not milestone.is_paid:
                return StartResult(milestone=milestone, started=False, requires_payment=True)

            if milestone.started_at is None:
                milestone.started_at = timezone.now()
                milestone.save(update_fields=["started_at", "updated_at"])
            Commission.objects.filter(pk=commission.pk).update(
                current_milestone=milestone,
                version=F("version") + 1,
                updated_at=timezone.now(),
            )

        return StartResult(milestone=milestone, started=True)

    @classmethod
    def complete_milestone(
        cls,
        milestone_id,
        user: User,
        image_url: str,
        notes: str = "",
    ) -> ProgressUpdate:
        """Artist submits a milestone for the client's approval."""
        if not image_url:
            raise ValidationError(
                "Image URL is required for milestone completion",
                error_code="IMAGE_REQUIRED",
            )

        with transaction.atomic():
            milestone = get_milestone(milestone_id, for_update=True)
            commission = milestone.commission
            require_artist(commission, user, "complete a milestone")

            progress_update = ProgressUpdate.objects.create(
                commission=commission,
                milestone=milestone,
                update_type=ProgressUpdateType.APPROVAL_CHECKPOINT,
                image_url=image_url,
                notes=notes or f"Milestone {milestone.milestone_number}: {milestone.title} - Ready for approval",
                requires_approval=True,
                approval_status=ApprovalStatus.PENDING,
                created_by=user,
            )
            milestone.progress_update = progress_update
            milestone.completed_at = timezone.now()
            milestone.save(update_fields=["progress_update", "completed_at", "updated_at"])

        notify(
            commission.client_id,
            NotificationEvent.MILESTONE_APPROVAL_NEEDED,
            {
                "commission_id": str(commission.pk),
                "milestone_id": str(milestone.pk),
                "progress_update_id": progress_update.pk,
                "message": f"{milestone.title} is ready for your approval",
            },
        )
        return progress_update

    # ==========================================================================
    # Payments
    # ==========================================================================

    @classmethod
    def mark_lowest_unpaid_paid(
        cls,
        commission_id,
        transaction_id,
        preferred_milestone_id=None,
    ) -> Milestone | None:
        """
        Credit a succeeded payment to the plan.

        The preferred milestone (from the payment's metadata) is used only
        when it belongs to the commission, is unpaid and is unlocked;
        otherwise the lowest unpaid milestone is credited. The credited
        milestone is locked and the next one unlocked.

        Must run inside the caller's transaction. Returns None when every
        milestone is already paid.
        """
        unpaid = Milestone.objects.select_for_update().filter(
            commission_id=commission_id,
            payment_status=MilestonePaymentStatus.UNPAID,
        )

        milestone = None
        if preferred_milestone_id:
            milestone = unpaid.filter(pk=preferred_milestone_id, is_locked=False).first()
        if milestone is None:
            milestone = unpaid.order_by("milestone_number").first()
        if milestone is None:
            cls.get_logger().warning(
                f"No unpaid milestone to credit for commission {commission_id}",
                extra={"transaction_id": str(transaction_id)},
            )
            return None

        milestone.payment_status = MilestonePaymentStatus.PAID
        milestone.paid_at = timezone.now()
        milestone.payment_transaction_id = transaction_id
        milestone.is_locked = True
        milestone.save(
            update_fields=["payment_status", "paid_at", "payment_transaction_id", "is_locked", "updated_at"]
        )

        next_milestone = (
            Milestone.objects.filter(
                commission_id=commission_id,
                milestone_number__gt=milestone.milestone_number,
            )
            .order_by("milestone_number")
            .first()
        )
        if next_milestone is not None:
            Milestone.objects.filter(pk=next_milestone.pk).update(
                is_locked=False, updated_at=timezone.now()
            )

        Commission.objects.filter(pk=commission_id).update(
            current_milestone=next_milestone or milestone,
            version=F("version") + 1,
            updated_at=timezone.now(),
        )

        cls.get_logger().info(
            f"Milestone {milestone.milestone_number} of commission {commission_id} paid",
            extra={"milestone_id": str(milestone.pk), "transaction_id": str(transaction_id)},
        )
        return milestone

    @classmethod
    def payment_status_for(cls, milestone_id, user: User) -> MilestonePaymentInfo:
        milestone = get_milestone(milestone_id)
        commission = milestone.commission
        require_client(commission, user, "check milestone payment status")

        can_pay = (
            not milestone.is_paid
            and not milestone.is_locked
            and commission.milestone_plan_confirmed
        )
        return MilestonePaymentInfo(milestone=milestone, can_pay=can_pay)

    # ==========================================================================
    # Revisions
    # ==========================================================================

    @classmethod
    def request_revision(cls, commission_id, user: User, notes: str) -> ProgressUpdate:
        """
        Client asks for a revision.

        Revisions past ``max_revision_count`` add ``revision_fee_per_request``
        to the current (or lowest unpaid) milestone and to the commission's
        revision fee total.
        """
        notes = (notes or "").strip()
        if not notes:
            raise ValidationError(
                "Describe the revision you need",
                error_code="NOTES_REQUIRED",
            )

        with transaction.atomic():
            commission = get_commission(commission_id, for_update=True)
            require_client(commission, user, "request a revision")
            if commission.status != CommissionStatus.IN_PROGRESS:
                raise InvalidStateTransitionError(
                    f"Cannot request a revision on a commission in '{commission.status}' state",
                    details={"current_state": commission.status},
                )

            revision_count = commission.current_revision_count + 1
            fee = Decimal("0")
            milestone = None
            if revision_count > commission.max_revision_count and commission.revision_fee_per_request > 0:
                fee = commission.revision_fee_per_request
                milestone = cls._revision_fee_target(commission)
                if milestone is not None:
                    Milestone.objects.filter(pk=milestone.pk).update(
                        amount=F("amount") + fee,
                        revision_fee_added=F("revision_fee_added") + fee,
                        updated_at=timezone.now(),
                    )

            Commission.objects.filter(pk=commission.pk).update(
                current_revision_count=revision_count,
                total_revision_fees=F("total_revision_fees") + fee,
                version=F("version") + 1,
                updated_at=timezone.now(),
            )

            progress_update = ProgressUpdate.objects.create(
                commission=commission,
                milestone=milestone or commission.current_milestone,
                update_type=ProgressUpdateType.REVISION_REQUEST,
                notes=notes,
                requires_approval=False,
                approval_status=ApprovalStatus.REVISION_REQUESTED,
                created_by=user,
            )

        notify(
            commission.artist_id,
            NotificationEvent.REVISION_REQUESTED,
            {
                "commission_id": str(commission.pk),
                "revision_number": revision_count,
                "fee": str(fee),
                "message": notes,
            },
        )
        return progress_update

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @classmethod
    def _lock_for_planning(cls, commission_id, user: User) -> Commission:
        commission = get_commission(commission_id, for_update=True)
        require_artist(commission, user, "create a milestone plan")

        if commission.status not in OPEN_STATUSES:
            raise InvalidStateTransitionError(
                f"Cannot plan milestones for a commission in '{commission.status}' state",
                details={"current_state": commission.status},
            )
        if commission.milestones.exists():
            raise InvalidStateTransitionError(
                "This commission already has a milestone plan",
                error_code="PLAN_EXISTS",
            )
        return commission

    @classmethod
    def _require_price(cls, commission: Commission) -> Decimal:
        price = commission.price
        if price is None or price <= 0:
            raise MilestonePlanError(
                "Set a price before creating a milestone plan",
                error_code="PRICE_REQUIRED",
            )
        return price

    @classmethod
    def _split(cls, total: Decimal, weights: list[Decimal]) -> list[Decimal]:
        """
        Split ``total`` proportionally to ``weights``, rounded to cents.

        The last share absorbs the rounding remainder so the shares always
        add up to ``total`` exactly.
        """
        weight_sum = sum(weights, Decimal("0"))
        shares = [to_cents(total * weight / weight_sum) for weight in weights[:-1]]
        shares.append(total - sum(shares, Decimal("0")))
        return shares

    @classmethod
    def _save_plan(cls, commission: Commission, milestones: list[Milestone]) -> list[Milestone]:
        for milestone in milestones:
            milestone.is_locked = milestone.milestone_number != 1
        Milestone.objects.bulk_create(milestones)

        Commission.objects.filter(pk=commission.pk).update(
            payment_type=PaymentType.MILESTONE,
            current_milestone=milestones[0],
            version=F("version") + 1,
            updated_at=timezone.now(),
        )

        cls.get_logger().info(
            f"Created {len(milestones)}-milestone plan for commission {commission.pk}"
        )
        return milestones

    @classmethod
    def _revision_fee_target(cls, commission: Commission) -> Milestone | None:
        if commission.current_milestone_id:
            current = Milestone.objects.filter(
                pk=commission.current_milestone_id,
                payment_status=MilestonePaymentStatus.UNPAID,
            ).first()
            if current is not None:
                return current
        return (
            Milestone.objects.filter(
                commission=commission,
                payment_status=MilestonePaymentStatus.UNPAID,
            )
            .order_by("milestone_number")
            .first()
        )
