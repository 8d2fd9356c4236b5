from django.db import models
from django.utils import timezone


class Impression(models.Model):
    """Append-only record of one ad delivered to one client.

    ad_id is a plain reference: replacing a campaign's ads must not remove
    the rows the rate limiter sums over.
    """
    class Meta:
        app_label = 'delivery'
        indexes = [
            models.Index(fields=['client_id', 'timestamp'], name='impression_client_ts_idx'),
        ]

    id = models.CharField(primary_key=True, max_length=64)
    client_id = models.CharField(max_length=255)
    ad_id = models.CharField(max_length=64, db_index=True)
    duration_seconds = models.PositiveIntegerField()
    timestamp = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"{self.client_id} {self.ad_id} {self.duration_seconds}s @ {self.timestamp}"


class ClientBudgetLock(models.Model):
    # Row locked with SELECT ... FOR UPDATE around a client's budget check
    class Meta:
        app_label = 'delivery'

    client_id = models.CharField(primary_key=True, max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
