from django.contrib import admin
from .models import Currency, Rate


class RateInline(admin.TabularInline):
    model = Rate
    extra = 0
    fields = ['effective_date', 'value']
    ordering = ['-effective_date', '-id']


@admin.register(Currency)
class CurrencyAdmin(admin.ModelAdmin):
    list_display = ['abbreviation', 'name', 'symbol']
    search_fields = ['abbreviation', 'name']
    inlines = [RateInline]


@admin.register(Rate)
class RateAdmin(admin.ModelAdmin):
    list_display = ['currency', 'value', 'effective_date']
    list_filter = ['currency', 'effective_date']
    search_fields = ['currency__abbreviation', 'currency__name']
    date_hierarchy = 'effective_date'
    list_select_related = ['currency']
