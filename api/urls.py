"""
URL configuration for the Currency Manager JSON API
"""

from django.urls import path
from . import views

urlpatterns = [
    # Currency endpoints
    path('info', views.CurrencyCollectionView.as_view(), name='api_currencies'),
    path('info/db', views.StoredCurrencyListView.as_view(), name='api_stored_currencies'),
    path('info/counter', views.RequestCounterView.as_view(), name='api_request_counter'),
    path('info/reset-counter', views.ResetCounterView.as_view(), name='api_reset_counter'),
    path('info/<int:currency_id>', views.CurrencyDetailView.as_view(), name='api_currency_detail'),

    # Rate endpoints
    path('rates', views.RateCollectionView.as_view(), name='api_rates'),
    path('rates/convert', views.ConversionView.as_view(), name='api_convert'),
    path('rates/by-abbreviation', views.RatesByAbbreviationView.as_view(), name='api_rates_by_abbreviation'),
    path('rates/bulk-rates', views.BulkRatesView.as_view(), name='api_bulk_rates'),
    path('rates/<int:rate_id>', views.RateDetailView.as_view(), name='api_rate_detail'),
]
