from decimal import Decimal

from django.db import migrations

DEFAULT_STAGES = [
    ("sketch", "Sketch", "Rough composition and pose for approval", 1),
    ("line_art", "Line Art", "Clean line work over the approved sketch", 2),
    ("base_colors", "Base Colors", "Flat colours for every area", 3),
    ("shading", "Shading", "Lighting, shading and final polish", 4),
]


def seed_templates(apps, schema_editor):
    MilestoneStageTemplate = apps.get_model("commissions", "MilestoneStageTemplate")
    for stage, title, description, order in DEFAULT_STAGES:
        MilestoneStageTemplate.objects.update_or_create(
            stage=stage,
            defaults={
                "title": title,
                "description": description,
                "default_percentage": Decimal("25.00"),
                "typical_order": order,
                "is_active": True,
            },
        )


def remove_templates(apps, schema_editor):
    MilestoneStageTemplate = apps.get_model("commissions", "MilestoneStageTemplate")
    MilestoneStageTemplate.objects.filter(stage__in=[stage for stage, *_ in DEFAULT_STAGES]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("commissions", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_templates, remove_templates),
    ]
