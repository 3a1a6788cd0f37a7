from django.urls import path
from . import views

urlpatterns = [
    path('currencies/', views.currency_list, name='currency_list'),
    path('currencies/new/', views.currency_create, name='currency_create'),
    path('currencies/convert/', views.convert_view, name='currency_convert'),
    path('currencies/<int:currency_id>/', views.currency_detail, name='currency_detail'),
    path('currencies/<int:currency_id>/edit/', views.currency_edit, name='currency_edit'),
    path('currencies/<int:currency_id>/delete/', views.currency_delete, name='currency_delete'),
    path('rates/new/', views.rate_create, name='rate_create'),
    path('rates/<int:rate_id>/edit/', views.rate_edit, name='rate_edit'),
    path('rates/<int:rate_id>/delete/', views.rate_delete, name='rate_delete'),
]
