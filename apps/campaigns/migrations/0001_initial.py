import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Campaign",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200)),
                ("start_time", models.DateTimeField()),
                ("end_time", models.DateTimeField()),
                ("target_region", models.CharField(default="*", max_length=32)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["start_time", "end_time"], name="campaign_window_idx"),
                    models.Index(fields=["target_region"], name="campaign_region_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Ad",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("media_url", models.URLField(max_length=500)),
                ("duration_seconds", models.PositiveIntegerField()),
                ("creative_id", models.CharField(max_length=100)),
                ("position", models.PositiveIntegerField(default=0)),
                (
                    "campaign",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ads",
                        to="campaigns.campaign",
                    ),
                ),
            ],
            options={
                "ordering": ["position", "id"],
                "indexes": [
                    models.Index(fields=["media_url"], name="ad_media_url_idx"),
                ],
            },
        ),
    ]
