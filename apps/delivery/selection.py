# apps/delivery/selection.py
"""
Ad selection under a per-client budget of ad-seconds per sliding window.

Selection is first fit in discovery order: campaigns in store order, ads in
list order, each ad taken if it fits what is left of the budget. It is not an
optimal packing; the order is reproducible instead.
"""
import logging
import uuid
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from adserver.exceptions import PersistenceError, ValidationError
from apps.campaigns import store
from . import ledger

logger = logging.getLogger(__name__)


def remaining_budget(consumed):
    return settings.AD_BUDGET_SECONDS - consumed


def select_ads(campaigns, remaining, deliver):
    """Greedy pick of ads that fit into ``remaining`` seconds.

    ``deliver(ad)`` is called for every ad that fits and must record it; if
    it raises PersistenceError the ad is dropped, not charged, and the scan
    moves on. Returns the delivered ads in order.
    """
    selected = []
    for campaign in campaigns:
        for ad in campaign.ads.all():
            if ad.duration_seconds > remaining:
                logger.debug(
                    f"Skipping ad {ad.id}: {ad.duration_seconds}s exceeds remaining {remaining}s"
                )
                continue
            try:
                deliver(ad)
            except PersistenceError:
                logger.error(f"Dropping ad {ad.id} from response: impression was not recorded")
                continue
            selected.append(ad)
            remaining -= ad.duration_seconds
            if remaining <= 0:
                break
        if remaining <= 0:
            break
    return selected


def serve_ads(client_id, region="", now=None):
    """Pick and record the ads client_id may be shown now in region.

    Budget check, selection and impression writes happen under the client's
    budget lock and commit together before this returns. An exhausted budget
    returns an empty list.
    """
    if not client_id:
        raise ValidationError("Missing client_id")
    region = region or ""
    now = now or timezone.now()
    window_start = now - timedelta(seconds=settings.AD_BUDGET_WINDOW_SECONDS)

    def deliver(ad):
        ledger.record_impression(
            impression_id=str(uuid.uuid4()),
            client_id=client_id,
            ad_id=ad.id,
            duration_seconds=ad.duration_seconds,
            timestamp=now,
        )

    with ledger.client_budget_lock(client_id):
        campaigns = store.get_active_campaigns(region, now)
        consumed = ledger.sum_duration_since(client_id, window_start)
        remaining = remaining_budget(consumed)
        if remaining <= 0:
            logger.info(f"Budget exhausted for client {client_id}: {consumed}s consumed")
            return []
        selected = select_ads(campaigns, remaining, deliver)

    logger.info(
        f"Served {len(selected)} ads ({sum(ad.duration_seconds for ad in selected)}s) "
        f"to client {client_id} in region {region!r}"
    )
    return selected
