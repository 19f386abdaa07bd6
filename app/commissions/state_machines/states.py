"""
State enums for commission models.

These are Django TextChoices for database storage and admin integration.

State Machines Overview:

Commission Status (django-fsm):
    pending → in_progress → completed
    pending/in_progress → cancelled
    pending → (declined: row and its conversation are purged)

Commission Payment Status:
    pending → deposit_paid → fully_paid

Escrow Status:
    none → held → released
    held → refunded

Milestone Payment Status:
    unpaid → paid
"""

from django.db import models


class CommissionStatus(models.TextChoices):
    """
    States for the Commission lifecycle.

    Terminal states: COMPLETED, CANCELLED
    """

    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class PaymentType(models.TextChoices):
    """How the client pays for the commission (and the kind of each payment)."""

    FULL = "full", "Full"
    DEPOSIT = "deposit", "Deposit"
    MILESTONE = "milestone", "Milestone"
    FINAL = "final", "Final"


class CommissionPaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    DEPOSIT_PAID = "deposit_paid", "Deposit Paid"
    FULLY_PAID = "fully_paid", "Fully Paid"


class EscrowStatus(models.TextChoices):
    """
    Where the client's money sits.

    HELD: Captured by the platform, not yet transferred to the artist
    RELEASED: Every captured payment has been transferred
    """

    NONE = "none", "None"
    HELD = "held", "Held"
    RELEASED = "released", "Released"
    REFUNDED = "refunded", "Refunded"


class MilestoneStage(models.TextChoices):
    SKETCH = "sketch", "Sketch"
    LINE_ART = "line_art", "Line Art"
    BASE_COLORS = "base_colors", "Base Colors"
    SHADING = "shading", "Shading"
    FINAL = "final", "Final"
    REVISION = "revision", "Revision"
    CUSTOM = "custom", "Custom"


class MilestonePaymentStatus(models.TextChoices):
    UNPAID = "unpaid", "Unpaid"
    PAID = "paid", "Paid"


class ProgressUpdateType(models.TextChoices):
    WIP_IMAGE = "wip_image", "Work in Progress Image"
    APPROVAL_CHECKPOINT = "approval_checkpoint", "Approval Checkpoint"
    REVISION_REQUEST = "revision_request", "Revision Request"


class ApprovalStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    REVISION_REQUESTED = "revision_requested", "Revision Requested"


class ReviewType(models.TextChoices):
    CLIENT_TO_ARTIST = "client_to_artist", "Client to Artist"
    ARTIST_TO_CLIENT = "artist_to_client", "Artist to Client"
