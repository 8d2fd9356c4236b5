# apps/campaigns/store.py
"""
Campaign store: persistence of campaigns, their ads and the ad creative pool.

Every write runs inside a single ``transaction.atomic()`` block, so a failure
part way through leaves neither an orphaned ad nor a campaign without its
ads. Database failures surface as ``PersistenceError``.
"""
import logging
import re
import uuid

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from adserver.exceptions import NotFoundError, PersistenceError, ValidationError
from .models import ANY_REGION, Ad, Campaign

logger = logging.getLogger(__name__)


def new_id():
    return str(uuid.uuid4())


# Characters XML 1.0 cannot carry; ad fields end up in VAST documents
XML_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F]')


def contains_xml_control_chars(value):
    return bool(value) and bool(XML_CONTROL_CHARS.search(str(value)))


def _validate_ad_text(ad):
    for field in ('id', 'media_url', 'creative_id'):
        if contains_xml_control_chars(ad.get(field)):
            raise ValidationError(f"Ad {field} contains control characters")


def _validate_window(start_time, end_time):
    if start_time is None or end_time is None:
        raise ValidationError("start_time and end_time are required")
    if start_time >= end_time:
        raise ValidationError("start_time must be before end_time")


def _build_ads(campaign_id, ads):
    """Turn ad records (dicts) into unsaved Ad rows, filling missing ids."""
    rows = []
    for position, ad in enumerate(ads):
        _validate_ad_text(ad)
        duration = ad.get('duration_seconds')
        if duration is None or duration <= 0:
            raise ValidationError(
                f"Ad duration must be a positive number of seconds, got {duration!r}"
            )
        rows.append(Ad(
            id=ad.get('id') or new_id(),
            campaign_id=campaign_id,
            media_url=ad['media_url'],
            duration_seconds=duration,
            creative_id=ad.get('creative_id', ''),
            position=position,
        ))
    return rows


def create_campaign(name, start_time, end_time, target_region=ANY_REGION, ads=(), id=None):
    """Persist a campaign and its ads atomically, assigning missing ids."""
    _validate_window(start_time, end_time)
    campaign_id = id or new_id()
    ad_rows = _build_ads(campaign_id, ads)

    try:
        with transaction.atomic():
            campaign = Campaign.objects.create(
                id=campaign_id,
                name=name,
                start_time=start_time,
                end_time=end_time,
                target_region=target_region,
            )
            Ad.objects.bulk_create(ad_rows)
    except IntegrityError as e:
        logger.warning(f"Rejected campaign {campaign_id}: {str(e)}")
        raise ValidationError(f"Campaign {campaign_id} or one of its ads already exists") from e
    except DatabaseError as e:
        logger.error(f"Error creating campaign {campaign_id}: {str(e)}")
        raise PersistenceError(f"Could not create campaign {campaign_id}") from e

    logger.info(f"Campaign created: {campaign_id} with {len(ad_rows)} ads")
    return get_campaign(campaign.id)


def update_campaign(id, name, start_time, end_time, target_region=ANY_REGION, ads=()):
    """Replace name, window, region and the whole ad set of a campaign."""
    if not id:
        raise ValidationError("Campaign id is required")
    _validate_window(start_time, end_time)
    ad_rows = _build_ads(id, ads)

    try:
        with transaction.atomic():
            updated = Campaign.objects.filter(pk=id).update(
                name=name,
                start_time=start_time,
                end_time=end_time,
                target_region=target_region,
                updated_at=timezone.now(),
            )
            if not updated:
                raise NotFoundError(f"Campaign {id} not found")
            Ad.objects.filter(campaign_id=id).delete()
            Ad.objects.bulk_create(ad_rows)
    except IntegrityError as e:
        logger.warning(f"Rejected update of campaign {id}: {str(e)}")
        raise ValidationError(f"An ad id in campaign {id} is already in use") from e
    except DatabaseError as e:
        logger.error(f"Error updating campaign {id}: {str(e)}")
        raise PersistenceError(f"Could not update campaign {id}") from e

    logger.info(f"Campaign updated: {id} with {len(ad_rows)} ads")
    return get_campaign(id)


def delete_campaign(id):
    try:
        with transaction.atomic():
            deleted, _ = Campaign.objects.filter(pk=id).delete()
    except DatabaseError as e:
        logger.error(f"Error deleting campaign {id}: {str(e)}")
        raise PersistenceError(f"Could not delete campaign {id}") from e
    if not deleted:
        raise NotFoundError(f"Campaign {id} not found")
    logger.info(f"Campaign deleted: {id}")


def get_campaign(id):
    try:
        return Campaign.objects.with_ads().get(pk=id)
    except Campaign.DoesNotExist:
        raise NotFoundError(f"Campaign {id} not found")
    except DatabaseError as e:
        logger.error(f"Error loading campaign {id}: {str(e)}")
        raise PersistenceError(f"Could not load campaign {id}") from e


def list_campaigns():
    """All campaigns, latest start first. Lazy: callers may filter further."""
    return Campaign.objects.with_ads().order_by('-start_time', 'id')


def get_active_campaigns(region, as_of):
    """Campaigns active for region at as_of, each with its ads in list order.

    Ordered by creation time then id so selection is reproducible.
    """
    try:
        return list(Campaign.objects.active(region, as_of).with_ads())
    except DatabaseError as e:
        logger.error(f"Error loading active campaigns for region {region!r}: {str(e)}")
        raise PersistenceError("Could not load active campaigns") from e


def get_available_ads():
    try:
        return list(Ad.objects.filter(campaign__isnull=True).order_by('media_url', 'id'))
    except DatabaseError as e:
        logger.error(f"Error loading available ads: {str(e)}")
        raise PersistenceError("Could not load available ads") from e


def get_ad_by_media_reference(media_url):
    try:
        ad = (
            Ad.objects.filter(campaign__isnull=True, media_url=media_url)
            .order_by('id')
            .first()
        )
    except DatabaseError as e:
        logger.error(f"Error loading available ad {media_url}: {str(e)}")
        raise PersistenceError("Could not load available ad") from e
    if ad is None:
        raise NotFoundError(f"No available ad with media URL {media_url}")
    return ad


def seed_available_ads(ads):
    """Add pool ads whose media_url is not in the pool yet. Returns the count added."""
    ads = list(ads)
    for ad in ads:
        _validate_ad_text(ad)
    created = 0
    try:
        with transaction.atomic():
            for ad in ads:
                exists = Ad.objects.filter(
                    campaign__isnull=True, media_url=ad['media_url']
                ).exists()
                if exists:
                    continue
                Ad.objects.create(
                    id=ad.get('id') or new_id(),
                    campaign=None,
                    media_url=ad['media_url'],
                    duration_seconds=ad['duration_seconds'],
                    creative_id=ad['creative_id'],
                )
                created += 1
    except DatabaseError as e:
        logger.error(f"Error seeding available ads: {str(e)}")
        raise PersistenceError("Could not seed available ads") from e

    logger.info(f"Seeded {created} available ads")
    return created
