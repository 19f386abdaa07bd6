import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                (
                    "event_type",
                    models.CharField(
                        choices=[
                            ("commission_request", "Commission Request"),
                            ("commission_accepted", "Commission Accepted"),
                            ("commission_declined", "Commission Declined"),
                            ("commission_completed", "Commission Completed"),
                            ("commission_cancelled", "Commission Cancelled"),
                            ("milestone_plan_confirmed", "Milestone Plan Confirmed"),
                            ("milestone_approval_needed", "Milestone Approval Needed"),
                            ("revision_requested", "Revision Requested"),
                            ("payment_received", "Payment Received"),
                            ("payment_failed", "Payment Failed"),
                            ("payment_refunded", "Payment Refunded"),
                            ("escrow_released", "Escrow Released"),
                        ],
                        db_index=True,
                        help_text="Event that produced this notification",
                        max_length=50,
                    ),
                ),
                ("title", models.CharField(help_text="Fully rendered notification title", max_length=255)),
                ("body", models.TextField(blank=True, default="", help_text="Fully rendered notification body")),
                ("data", models.JSONField(blank=True, default=dict, help_text="Event payload (commission id, amounts)")),
                ("is_read", models.BooleanField(db_index=True, default=False, help_text="Whether recipient has read this notification")),
                (
                    "recipient",
                    models.ForeignKey(
                        help_text="User receiving this notification",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "notifications_notification",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["recipient", "is_read", "-created_at"], name="notif_recipient_unread_idx"),
                ],
            },
        ),
    ]
