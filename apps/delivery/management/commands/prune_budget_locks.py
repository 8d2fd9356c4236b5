from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.delivery import ledger


class Command(BaseCommand):
    help = 'Remove budget lock rows of clients with no impressions in the budget window'

    def handle(self, *args, **options):
        since = timezone.now() - timedelta(seconds=settings.AD_BUDGET_WINDOW_SECONDS)
        removed = ledger.prune_client_locks(since)

        self.stdout.write(self.style.SUCCESS(f'Removed {removed} budget lock rows'))
