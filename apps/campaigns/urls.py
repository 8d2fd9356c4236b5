from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import CampaignViewSet, AvailableAdViewSet

router = DefaultRouter()
router.register(r'campaigns', CampaignViewSet, basename='campaign')
router.register(r'ads/available', AvailableAdViewSet, basename='available-ad')

urlpatterns = [
    path('', include(router.urls)),
]
