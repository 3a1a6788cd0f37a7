"""
URL configuration for the Currency Manager project.
"""

from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView

urlpatterns = [
    path('', RedirectView.as_view(pattern_name='currency_list', permanent=False)),
    path('admin/', admin.site.urls),
    path('api/currency/', include('api.urls')),
    path('', include('currencies.urls')),
]
