"""
Pytest configuration and fixtures for the Currency Manager

Provides common currency/rate fixtures for the pytest-style tests.
"""

import pytest
from datetime import date
from decimal import Decimal

from currencies.models import Currency, Rate
from security.counter import get_request_counter


@pytest.fixture
def usd():
    """US dollar, the base currency in the fixtures"""
    currency = Currency.objects.create(name='US Dollar', abbreviation='USD', symbol='$')
    Rate.objects.create(currency=currency, value=Decimal('1.000000'), effective_date=date(2024, 1, 15))
    return currency


@pytest.fixture
def eur():
    """Euro with an older and a current rate"""
    currency = Currency.objects.create(name='Euro', abbreviation='EUR', symbol='€')
    Rate.objects.create(currency=currency, value=Decimal('0.950000'), effective_date=date(2024, 1, 1))
    Rate.objects.create(currency=currency, value=Decimal('0.900000'), effective_date=date(2024, 1, 15))
    return currency


@pytest.fixture
def jpy():
    currency = Currency.objects.create(name='Japanese Yen', abbreviation='JPY', symbol='¥')
    Rate.objects.create(currency=currency, value=Decimal('148.250000'), effective_date=date(2024, 1, 15))
    return currency


@pytest.fixture
def gbp_without_rates():
    return Currency.objects.create(name='Pound Sterling', abbreviation='GBP', symbol='£')


@pytest.fixture
def mock_directory_response():
    """Mock currency directory payload"""
    return [
        {'Cur_ID': 431, 'Cur_Abbreviation': 'USD', 'Cur_Name': 'Доллар США', 'Cur_Name_Eng': 'US Dollar'},
        {'Cur_ID': 451, 'Cur_Abbreviation': 'EUR', 'Cur_Name': 'Евро', 'Cur_Name_Eng': 'Euro'},
        {'Cur_ID': 999, 'Cur_Abbreviation': '', 'Cur_Name': 'Broken', 'Cur_Name_Eng': 'Broken'},
    ]


@pytest.fixture(autouse=True)
def reset_request_counter():
    """Each test starts with a zeroed request counter"""
    get_request_counter().reset()
    yield
