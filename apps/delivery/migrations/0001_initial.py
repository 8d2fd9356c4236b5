import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ClientBudgetLock",
            fields=[
                ("client_id", models.CharField(max_length=255, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="Impression",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("client_id", models.CharField(max_length=255)),
                ("ad_id", models.CharField(db_index=True, max_length=64)),
                ("duration_seconds", models.PositiveIntegerField()),
                ("timestamp", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["client_id", "timestamp"], name="impression_client_ts_idx"),
                ],
            },
        ),
    ]
