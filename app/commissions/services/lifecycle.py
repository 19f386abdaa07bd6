"""
Commission lifecycle service.

Owns the Commission state machine:

    request_commission → PENDING
    accept:   PENDING → IN_PROGRESS   (artist)
    decline:  PENDING → purged        (artist)
    complete: IN_PROGRESS → COMPLETED (artist)
    cancel:   PENDING/IN_PROGRESS → CANCELLED (client)

Every call either applies its whole effect or none of it: state checks run
under a row lock inside one transaction, and notifications are queued only
after that transaction commits.

Usage:
    from commissions.services.lifecycle import CommissionLifecycleService

    commission = CommissionLifecycleService.request_commission(
        client=request.user,
        artist_id=artist.id,
        details="Full body portrait of my character",
        budget=Decimal("150.00"),
    )
    CommissionLifecycleService.accept(commission.id, artist)
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from django_fsm import TransitionNotAllowed

from core.exceptions import NotFoundError, ValidationError
from core.services import BaseService

from chat.models import MessageType
from chat.services import ConversationService, MessageService
from commissions.exceptions import AdmissionRejectedError, InvalidStateTransitionError
from commissions.models import Commission, Milestone, PendingReview, ProgressUpdate
from commissions.services.access import (
    get_commission,
    require_artist,
    require_client,
    require_participant,
)
from commissions.services.admission import AdmissionService
from commissions.state_machines import CommissionStatus, ReviewType
from notifications.models import NotificationEvent
from notifications.services import notify

if TYPE_CHECKING:
    from authentication.models import User


class CommissionLifecycleService(BaseService):
    """
    Service for commission state changes.

    Methods:
        get_for_participant: Fetch a commission the user takes part in
        request_commission: Create a pending request (after the admission gate)
        accept / decline / complete / cancel: State transitions
        set_price: Artist sets the agreed price and deadline
        record_payment: Accrue total_paid
        purge: Delete a declined request with its conversation and plan
    """

    @classmethod
    def get_for_participant(cls, commission_id, user: User) -> Commission:
        commission = get_commission(commission_id)
        require_participant(commission, user)
        return commission

    @classmethod
    def request_commission(
        cls,
        client: User,
        artist_id,
        details: str,
        *,
        artwork_reference: str = "",
        client_note: str = "",
        budget: Decimal | None = None,
        deadline_text: str = "",
    ) -> Commission:
        """
        Create a commission request.

        Raises:
            ValidationError: Self-request, missing details, non-positive budget
            NotFoundError: Artist does not exist or does not take commissions
            AdmissionRejectedError: Artist is closed or their queue is full
        """
        if str(client.pk) == str(artist_id):
            raise ValidationError(
                "You cannot commission yourself",
                error_code="SELF_COMMISSION",
            )

        details = (details or "").strip()
        if not details:
            raise ValidationError(
                "Commission details are required",
                error_code="DETAILS_REQUIRED",
            )

        if budget is not None and budget <= 0:
            raise ValidationError(
                "Budget must be positive",
                error_code="INVALID_BUDGET",
                details={"budget": str(budget)},
            )

        artist = get_user_model().objects.filter(
            pk=artist_id, is_active=True, is_artist=True
        ).first()
        if artist is None:
            raise NotFoundError(
                f"Artist {artist_id} not found",
                error_code="ARTIST_NOT_FOUND",
                details={"artist_id": str(artist_id)},
            )

        decision = AdmissionService.can_admit(artist.pk)
        if not decision.allowed:
            raise AdmissionRejectedError(
                "Artist is not accepting commissions right now",
                details={"reason": decision.reason},
            )

        with transaction.atomic():
            commission = Commission.objects.create(
                client=client,
                artist=artist,
                details=details,
                artwork_reference=artwork_reference or "",
                client_note=client_note or "",
                budget=budget,
                deadline_text=deadline_text or "",
                deposit_percentage=Decimal(settings.COMMISSION_DEFAULT_DEPOSIT_PERCENT),
                max_revision_count=settings.COMMISSION_DEFAULT_MAX_REVISIONS,
            )

            result = ConversationService.find_or_create_direct(client, artist)
            if not result.success:
                raise ValidationError(result.error, error_code=result.error_code)
            conversation = result.data
            ConversationService.link_commission(conversation, commission)

            MessageService.post_message(
                conversation,
                client,
                details,
                message_type=MessageType.COMMISSION_REQUEST,
                metadata={
                    "commission_id": str(commission.pk),
                    "budget": str(budget) if budget is not None else None,
                    "waitlisted": decision.waitlisted,
                },
            )

        cls.get_logger().info(
            f"Commission {commission.pk} requested by {client.pk} from artist {artist.pk}",
            extra={"commission_id": str(commission.pk), "waitlisted": decision.waitlisted},
        )

        notify(
            artist.pk,
            NotificationEvent.COMMISSION_REQUEST,
            {"commission_id": str(commission.pk), "client_id": str(client.pk)},
        )
        return commission

    @classmethod
    def accept(
        cls,
        commission_id,
        user: User,
        artist_response: str = "",
        *,
        skip_message: bool = False,
    ) -> Commission:
        """
        Artist accepts a pending request.

        Accepting a commission that is already in progress returns it
        unchanged, so a repeated click does not fail.
        """
        with transaction.atomic():
            commission = get_commission(commission_id, for_update=True)
            require_artist(commission, user, "accept this commission")

            if commission.status == CommissionStatus.IN_PROGRESS:
                return commission

            cls._transition(commission, "accept", artist_response=artist_response)
            commission.save()
            cls._post_update(commission, user, "Commission accepted", skip_message)

        cls.get_logger().info(f"Commission {commission.pk} accepted")
        notify(
            commission.client_id,
            NotificationEvent.COMMISSION_ACCEPTED,
            {"commission_id": str(commission.pk), "message": commission.artist_response},
        )
        return commission

    @classmethod
    def decline(cls, commission_id, user: User, reason: str = "") -> None:
        """
        Artist declines a pending request.

        The request is purged rather than kept in a declined state. Payment
        transactions recorded against it survive with their commission unset.
        """
        with transaction.atomic():
            commission = get_commission(commission_id, for_update=True)
            require_artist(commission, user, "decline this commission")

            if commission.status != CommissionStatus.PENDING:
                raise InvalidStateTransitionError(
                    f"Cannot decline a commission in '{commission.status}' state",
                    details={"current_state": commission.status, "transition": "decline"},
                )

            client_id = commission.client_id
            cls.purge(commission)

        cls.get_logger().info(f"Commission {commission_id} declined and purged")
        notify(
            client_id,
            NotificationEvent.COMMISSION_DECLINED,
            {"commission_id": str(commission_id), "message": reason},
        )

    @classmethod
    def purge(cls, commission: Commission) -> None:
        """
        Delete a commission and everything hanging off it.

        Order: conversation messages, participants, conversation, milestones,
        progress updates, pending reviews, commission. Callers own the
        surrounding transaction so a failure leaves nothing half-deleted.
        """
        conversation = ConversationService.for_commission(commission.pk)
        if conversation is not None:
            ConversationService.purge(conversation)

        Commission.objects.filter(pk=commission.pk).update(current_milestone=None)
        Milestone.objects.filter(commission=commission).delete()
        ProgressUpdate.objects.filter(commission=commission).delete()
        PendingReview.objects.filter(commission=commission).delete()
        commission.delete()

    @classmethod
    def complete(cls, commission_id, user: User, *, skip_message: bool = False) -> Commission:
        """Artist delivers the commission; both sides now owe a review."""
        with transaction.atomic():
            commission = get_commission(commission_id, for_update=True)
            require_artist(commission, user, "complete this commission")

            cls._transition(commission, "complete")
            commission.save()

            PendingReview.objects.get_or_create(
                commission=commission,
                user_id=commission.client_id,
                review_type=ReviewType.CLIENT_TO_ARTIST,
            )
            PendingReview.objects.get_or_create(
                commission=commission,
                user_id=commission.artist_id,
                review_type=ReviewType.ARTIST_TO_CLIENT,
            )
            cls._post_update(commission, user, "Commission completed", skip_message)

        cls.get_logger().info(f"Commission {commission.pk} completed")
        notify(
            commission.client_id,
            NotificationEvent.COMMISSION_COMPLETED,
            {"commission_id": str(commission.pk)},
        )
        return commission

    @classmethod
    def cancel(
        cls,
        commission_id,
        user: User,
        reason: str = "",
        *,
        skip_message: bool = False,
    ) -> Commission:
        """Client withdraws a pending or in-progress commission."""
        with transaction.atomic():
            commission = get_commission(commission_id, for_update=True)
            require_client(commission, user, "cancel this commission")

            cls._transition(commission, "cancel")
            commission.save()
            cls._post_update(commission, user, "Commission cancelled", skip_message)

        cls.get_logger().info(f"Commission {commission.pk} cancelled")
        notify(
            commission.artist_id,
            NotificationEvent.COMMISSION_CANCELLED,
            {"commission_id": str(commission.pk), "message": reason},
        )
        return commission

    @classmethod
    def set_price(
        cls,
        commission_id,
        user: User,
        final_price: Decimal | None = None,
        deadline_text: str | None = None,
    ) -> Commission:
        """Artist sets the agreed price and/or deadline while the commission is open."""
        with transaction.atomic():
            commission = get_commission(commission_id, for_update=True)
            require_artist(commission, user, "set the price")

            if commission.status not in (CommissionStatus.PENDING, CommissionStatus.IN_PROGRESS):
                raise InvalidStateTransitionError(
                    f"Cannot change the price of a commission in '{commission.status}' state",
                    details={"current_state": commission.status},
                )

            update_fields = ["updated_at"]
            if final_price is not None:
                if final_price <= 0:
                    raise ValidationError(
                        "Price must be positive",
                        error_code="INVALID_PRICE",
                        details={"final_price": str(final_price)},
                    )
                commission.final_price = final_price
                update_fields.append("final_price")
            if deadline_text is not None:
                commission.deadline_text = deadline_text
                update_fields.append("deadline_text")

            commission.save(update_fields=update_fields)

        return commission

    @classmethod
    def record_payment(cls, commission_id, amount: Decimal) -> Commission:
        """
        Add a settled amount to the commission's total_paid.

        Reconciliation does not touch total_paid; the layer that turns a
        captured payment into accounting calls this explicitly.
        """
        if amount <= 0:
            raise ValidationError(
                "Payment amount must be positive",
                error_code="INVALID_AMOUNT",
                details={"amount": str(amount)},
            )

        updated = Commission.objects.filter(pk=commission_id).update(
            total_paid=F("total_paid") + amount,
            version=F("version") + 1,
            updated_at=timezone.now(),
        )
        if not updated:
            get_commission(commission_id)
        return Commission.objects.get(pk=commission_id)

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @classmethod
    def _transition(cls, commission: Commission, name: str, **kwargs) -> None:
        try:
            getattr(commission, name)(**kwargs)
        except TransitionNotAllowed:
            raise InvalidStateTransitionError(
                f"Cannot {name} a commission in '{commission.status}' state",
                details={"current_state": commission.status, "transition": name},
            )

    @classmethod
    def _post_update(
        cls,
        commission: Commission,
        sender: User,
        text: str,
        skip_message: bool,
    ) -> None:
        if skip_message:
            return
        conversation = ConversationService.for_commission(commission.pk)
        if conversation is None:
            return
        result = MessageService.post_message(
            conversation,
            sender,
            text,
            message_type=MessageType.COMMISSION_UPDATE,
            metadata={"commission_id": str(commission.pk), "status": commission.status},
        )
        if not result.success:
            cls.get_logger().warning(
                f"Could not post status message for commission {commission.pk}: {result.error}"
            )
