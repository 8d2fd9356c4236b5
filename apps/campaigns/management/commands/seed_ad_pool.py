from django.core.management.base import BaseCommand, CommandError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from adserver.exceptions import PersistenceError
from apps.campaigns import store

SAMPLE_BUCKET = "http://commondatastorage.googleapis.com/gtv-videos-bucket/sample"

DEFAULT_POOL = [
    {
        'media_url': f"{SAMPLE_BUCKET}/ForBiggerBlazes.mp4",
        'duration_seconds': 15,
        'creative_id': 'creative-1',
    },
    {
        'media_url': f"{SAMPLE_BUCKET}/ForBiggerEscapes.mp4",
        'duration_seconds': 15,
        'creative_id': 'creative-2',
    },
    {
        'media_url': f"{SAMPLE_BUCKET}/ForBiggerFun.mp4",
        'duration_seconds': 15,
        'creative_id': 'creative-3',
    },
]


# The database may still be starting when the container boots
@retry(
    retry=retry_if_exception_type(PersistenceError),
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    reraise=True,
)
def seed_pool(ads):
    return store.seed_available_ads(ads)


class Command(BaseCommand):
    help = 'Seed the available ad pool with the sample creatives'

    def add_arguments(self, parser):
        parser.add_argument('--duration', type=int, default=None,
                            help='Override the duration (seconds) of every seeded ad')

    def handle(self, *args, **options):
        ads = [dict(ad) for ad in DEFAULT_POOL]
        if options['duration'] is not None:
            if options['duration'] <= 0:
                raise CommandError('--duration must be a positive number of seconds')
            for ad in ads:
                ad['duration_seconds'] = options['duration']

        created = seed_pool(ads)
        available = len(store.get_available_ads())

        self.stdout.write(
            self.style.SUCCESS(
                f'Seeded {created} ads; {available} ads available in the pool'
            )
        )
