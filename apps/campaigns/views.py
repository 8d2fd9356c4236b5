from rest_framework import mixins, viewsets
from rest_framework.response import Response

from . import store
from .serializers import CampaignSerializer, AdSerializer


class CampaignViewSet(viewsets.ModelViewSet):
    serializer_class = CampaignSerializer
    # Campaigns are replaced as a whole, never patched field by field
    http_method_names = ['get', 'post', 'put', 'delete', 'head', 'options']

    def get_queryset(self):
        return store.list_campaigns()

    def perform_destroy(self, instance):
        store.delete_campaign(instance.id)


class AvailableAdViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Ads in the creative pool, not yet attached to any campaign."""
    serializer_class = AdSerializer

    def get_queryset(self):
        return store.get_available_ads()

    def list(self, request, *args, **kwargs):
        media_url = request.query_params.get('media_url')
        if media_url:
            ad = store.get_ad_by_media_reference(media_url)
            return Response([self.get_serializer(ad).data])
        return super().list(request, *args, **kwargs)
