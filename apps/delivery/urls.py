from django.urls import path
from . import views

urlpatterns = [
    path('vast', views.vast, name='vast'),
    path('vast/', views.vast),
]
