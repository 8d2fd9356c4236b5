import logging

from django.http import HttpResponse
from django.views.decorators.http import require_GET

from adserver.exceptions import AdServerError
from .selection import serve_ads
from .vast import render_vast

logger = logging.getLogger(__name__)

VAST_CONTENT_TYPE = "application/xml; charset=utf-8"


@require_GET
def vast(request):
    """Public ad endpoint: VAST document for ?client_id=...&region=...

    GET only: serving records impressions, so HEAD (which drops the body)
    is refused.
    """
    client_id = request.GET.get('client_id') or request.GET.get('clientId', '')
    region = request.GET.get('region') or request.GET.get('dma', '')

    try:
        ads = serve_ads(client_id, region)
    except AdServerError as e:
        if e.status_code >= 500:
            logger.error(f"Error serving ads to client {client_id!r}: {str(e.detail)}")
        return HttpResponse(
            str(e.detail), status=e.status_code, content_type="text/plain; charset=utf-8"
        )

    return HttpResponse(render_vast(ads), content_type=VAST_CONTENT_TYPE)
