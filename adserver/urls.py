"""
URL configuration for the adserver project.

Public player endpoint at /vast, campaign store API under /api/v1/, OpenAPI
schema and docs under /api/.
"""

from django.urls import path
from django.urls import include
from django.http import JsonResponse
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView


def home_view(request):
    return JsonResponse({
        "message": "Ad Server",
        "status": "running",
        "endpoints": {
            "vast": "/vast?client_id=<id>&region=<code>",
            "api": "/api/v1/",
            "docs": "/api/docs/",
            "schema": "/api/schema/"
        }
    })


urlpatterns = [
    path("", home_view, name="home"),
    path("", include("apps.delivery.urls")),
    path("api/v1/", include("apps.campaigns.urls")),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
