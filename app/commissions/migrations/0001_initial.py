import uuid
from decimal import Decimal

import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models

CREATED_AT = ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created"))
UPDATED_AT = ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified"))

STAGE_CHOICES = [
    ("sketch", "Sketch"),
    ("line_art", "Line Art"),
    ("base_colors", "Base Colors"),
    ("shading", "Shading"),
    ("final", "Final"),
    ("revision", "Revision"),
    ("custom", "Custom"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ArtistSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                CREATED_AT,
                UPDATED_AT,
                ("max_queue_slots", models.PositiveIntegerField(default=5)),
                ("is_open", models.BooleanField(default=True)),
                ("commissions_paused", models.BooleanField(default=False)),
                ("allow_waitlist", models.BooleanField(default=False)),
                (
                    "artist",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="artist_settings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "artist settings",
                "verbose_name_plural": "artist settings",
            },
        ),
        migrations.CreateModel(
            name="MilestoneStageTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                CREATED_AT,
                UPDATED_AT,
                ("stage", models.CharField(choices=STAGE_CHOICES, max_length=20, unique=True)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("default_percentage", models.DecimalField(decimal_places=2, max_digits=5)),
                ("typical_order", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["typical_order"],
            },
        ),
        migrations.CreateModel(
            name="Commission",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("version", models.PositiveIntegerField(default=1, help_text="Version for optimistic locking - incremented on each save")),
                CREATED_AT,
                UPDATED_AT,
                ("artwork_reference", models.CharField(blank=True, default="", help_text="Opaque id of the source artwork or commission package", max_length=64)),
                ("details", models.TextField(help_text="Client's description of the requested work")),
                ("client_note", models.TextField(blank=True, default="", help_text="Optional note from the client")),
                ("deadline_text", models.CharField(blank=True, default="", help_text="Free-form deadline agreed between the participants", max_length=255)),
                ("budget", models.DecimalField(blank=True, decimal_places=2, help_text="Client's proposed price", max_digits=10, null=True)),
                ("final_price", models.DecimalField(blank=True, decimal_places=2, help_text="Price set by the artist", max_digits=10, null=True)),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("pending", "Pending"),
                            ("in_progress", "In Progress"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Current state of the commission (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                ("artist_response", models.TextField(blank=True, default="", help_text="Artist's reply when accepting")),
                ("responded_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "payment_type",
                    models.CharField(
                        choices=[("full", "Full"), ("deposit", "Deposit"), ("milestone", "Milestone"), ("final", "Final")],
                        default="full",
                        help_text="How the client pays (full, deposit, milestone plan)",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("deposit_paid", "Deposit Paid"), ("fully_paid", "Fully Paid")],
                        db_index=True,
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "escrow_status",
                    models.CharField(
                        choices=[("none", "None"), ("held", "Held"), ("released", "Released"), ("refunded", "Refunded")],
                        db_index=True,
                        default="none",
                        max_length=20,
                    ),
                ),
                ("deposit_percentage", models.DecimalField(decimal_places=2, default=Decimal("50.00"), help_text="Share of the price charged as deposit", max_digits=5)),
                ("total_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Amount accrued through record_payment", max_digits=10)),
                ("milestone_plan_confirmed", models.BooleanField(default=False, help_text="Whether the client confirmed the milestone plan")),
                ("current_revision_count", models.PositiveIntegerField(default=0)),
                ("max_revision_count", models.PositiveIntegerField(default=2)),
                ("revision_fee_per_request", models.DecimalField(decimal_places=2, default=Decimal("0.00"), help_text="Fee charged per revision beyond the free quota", max_digits=10)),
                ("total_revision_fees", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                (
                    "client",
                    models.ForeignKey(
                        help_text="User who requested the commission",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="commissions_as_client",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "artist",
                    models.ForeignKey(
                        help_text="User who creates the artwork",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="commissions_as_artist",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["artist", "status"], name="commission_artist_status_idx"),
                    models.Index(fields=["client", "status"], name="commission_client_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Milestone",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                CREATED_AT,
                UPDATED_AT,
                ("milestone_number", models.PositiveIntegerField()),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("stage", models.CharField(choices=STAGE_CHOICES, default="custom", max_length=20)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("percentage", models.DecimalField(decimal_places=2, max_digits=5)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("unpaid", "Unpaid"), ("paid", "Paid")],
                        db_index=True,
                        default="unpaid",
                        max_length=10,
                    ),
                ),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("payment_transaction_id", models.UUIDField(blank=True, null=True)),
                ("is_locked", models.BooleanField(default=True)),
                ("payment_required_before_work", models.BooleanField(default=True)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("revision_fee_added", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "commission",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="milestones",
                        to="commissions.commission",
                    ),
                ),
            ],
            options={
                "ordering": ["commission", "milestone_number"],
                "constraints": [
                    models.UniqueConstraint(fields=("commission", "milestone_number"), name="unique_milestone_number_per_commission"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProgressUpdate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                CREATED_AT,
                UPDATED_AT,
                (
                    "update_type",
                    models.CharField(
                        choices=[
                            ("wip_image", "Work in Progress Image"),
                            ("approval_checkpoint", "Approval Checkpoint"),
                            ("revision_request", "Revision Request"),
                        ],
                        default="wip_image",
                        max_length=30,
                    ),
                ),
                ("image_url", models.URLField(blank=True, default="", max_length=500)),
                ("notes", models.TextField(blank=True, default="")),
                ("requires_approval", models.BooleanField(default=False)),
                (
                    "approval_status",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("revision_requested", "Revision Requested"),
                        ],
                        max_length=30,
                        null=True,
                    ),
                ),
                (
                    "commission",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="progress_updates",
                        to="commissions.commission",
                    ),
                ),
                (
                    "milestone",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="progress_updates",
                        to="commissions.milestone",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="PendingReview",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                CREATED_AT,
                UPDATED_AT,
                (
                    "review_type",
                    models.CharField(
                        choices=[("client_to_artist", "Client to Artist"), ("artist_to_client", "Artist to Client")],
                        max_length=20,
                    ),
                ),
                (
                    "commission",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pending_reviews",
                        to="commissions.commission",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pending_reviews",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("commission", "user", "review_type"), name="unique_pending_review"),
                ],
            },
        ),
        migrations.AddField(
            model_name="commission",
            name="current_milestone",
            field=models.ForeignKey(
                blank=True,
                help_text="Milestone being worked on or paid next",
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to="commissions.milestone",
            ),
        ),
        migrations.AddField(
            model_name="milestone",
            name="progress_update",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to="commissions.progressupdate",
            ),
        ),
    ]
