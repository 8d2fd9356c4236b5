from django.db import models
from django.db.models import Prefetch, Q

ANY_REGION = '*'


class CampaignQuerySet(models.QuerySet):
    def with_ads(self):
        return self.prefetch_related(
            Prefetch('ads', queryset=Ad.objects.order_by('position', 'id'))
        )

    def active(self, region, as_of):
        """Campaigns whose window contains as_of (both ends inclusive) and
        whose target region is '*' or exactly region."""
        region_match = Q(target_region=ANY_REGION)
        if region:
            region_match |= Q(target_region=region)
        return (
            self.filter(start_time__lte=as_of, end_time__gte=as_of)
            .filter(region_match)
            .order_by('created_at', 'id')
        )


class Campaign(models.Model):
    class Meta:
        app_label = 'campaigns'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['start_time', 'end_time'], name='campaign_window_idx'),
            models.Index(fields=['target_region'], name='campaign_region_idx'),
        ]

    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=200)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    target_region = models.CharField(max_length=32, default=ANY_REGION)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CampaignQuerySet.as_manager()

    def __str__(self):
        return f"{self.name} ({self.id})"


class Ad(models.Model):
    class Meta:
        app_label = 'campaigns'
        ordering = ['position', 'id']
        indexes = [
            models.Index(fields=['media_url'], name='ad_media_url_idx'),
        ]

    id = models.CharField(primary_key=True, max_length=64)
    # null campaign = available pool, not yet attached to a campaign
    campaign = models.ForeignKey(
        Campaign, on_delete=models.CASCADE, related_name='ads', null=True, blank=True
    )
    media_url = models.URLField(max_length=500)
    duration_seconds = models.PositiveIntegerField()
    creative_id = models.CharField(max_length=100)
    position = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.creative_id} {self.duration_seconds}s ({self.id})"
