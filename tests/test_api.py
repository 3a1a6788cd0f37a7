"""
Integration tests for the JSON API

Goes through the Django test client to check routing, payload shapes and the
mapping of core failures onto status codes.
"""

import json
from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.test import Client, TestCase

from currencies.errors import Unavailable
from currencies.models import Currency, Rate


@pytest.mark.integration
class TestCurrencyApi(TestCase):
    """Test currency endpoints"""

    def setUp(self):
        self.client = Client()
        self.usd = Currency.objects.create(name='US Dollar', abbreviation='USD', symbol='$')

    def test_list_stored_currencies(self):
        response = self.client.get('/api/currency/info/db')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [self.usd.to_dict()])

    def test_list_directory_currencies(self):
        directory = [{'id': 431, 'name': 'US Dollar', 'abbreviation': 'USD', 'symbol': ''}]
        with patch('api.views.CurrencyDirectoryClient.list_currencies', return_value=directory):
            response = self.client.get('/api/currency/info')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), directory)

    def test_directory_outage_is_service_unavailable(self):
        with patch('api.views.CurrencyDirectoryClient.list_currencies',
                   side_effect=Unavailable('Currency directory unavailable')):
            response = self.client.get('/api/currency/info')

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()['error'], 'unavailable')

    def test_get_currency(self):
        response = self.client.get(f'/api/currency/info/{self.usd.id}')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['abbreviation'], 'USD')

    def test_get_unknown_currency(self):
        response = self.client.get('/api/currency/info/999999')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'not_found')

    def test_create_currency_from_json(self):
        response = self.client.post('/api/currency/info', json.dumps({
            'name': 'Euro', 'abbreviation': 'EUR', 'symbol': '€'
        }), content_type='application/json')

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['abbreviation'], 'EUR')
        self.assertTrue(Currency.objects.filter(pk=data['id']).exists())

    def test_create_currency_from_form(self):
        response = self.client.post('/api/currency/info', {
            'name': 'Euro', 'abbreviation': 'EUR', 'symbol': '€'
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['name'], 'Euro')

    def test_create_currency_validation_failure(self):
        response = self.client.post('/api/currency/info', json.dumps({'name': 'Euro'}),
                                    content_type='application/json')

        self.assertEqual(response.status_code, 400)
        data = response.json()
        self.assertEqual(data['error'], 'validation_failed')
        self.assertIn('abbreviation', data['errors'])

    def test_create_currency_invalid_json(self):
        response = self.client.post('/api/currency/info', '{not json',
                                    content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'invalid_json')

    def test_create_currency_undecodable_body(self):
        response = self.client.post('/api/currency/info', b'\xff\xfe{"name"',
                                    content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'invalid_json')

    def test_update_currency(self):
        response = self.client.put(f'/api/currency/info/{self.usd.id}', json.dumps({
            'name': 'United States Dollar', 'abbreviation': 'USD', 'symbol': 'US$'
        }), content_type='application/json')

        self.assertEqual(response.status_code, 200)
        self.usd.refresh_from_db()
        self.assertEqual(self.usd.name, 'United States Dollar')

    def test_update_unknown_currency(self):
        response = self.client.put('/api/currency/info/999999', json.dumps({
            'name': 'Euro', 'abbreviation': 'EUR', 'symbol': '€'
        }), content_type='application/json')

        self.assertEqual(response.status_code, 404)

    def test_delete_currency_removes_its_rates(self):
        Rate.objects.create(currency=self.usd, value=Decimal('1'), effective_date=date(2024, 1, 1))

        response = self.client.delete(f'/api/currency/info/{self.usd.id}')

        self.assertEqual(response.status_code, 204)
        self.assertFalse(Currency.objects.filter(pk=self.usd.pk).exists())
        self.assertEqual(self.client.get('/api/currency/rates').json(), [])

    def test_delete_unknown_currency(self):
        response = self.client.delete('/api/currency/info/999999')

        self.assertEqual(response.status_code, 404)


@pytest.mark.integration
class TestRateApi(TestCase):
    """Test rate endpoints and conversion"""

    def setUp(self):
        self.client = Client()
        self.usd = Currency.objects.create(name='US Dollar', abbreviation='USD', symbol='$')
        self.eur = Currency.objects.create(name='Euro', abbreviation='EUR', symbol='€')
        self.gbp = Currency.objects.create(name='Pound Sterling', abbreviation='GBP', symbol='£')
        self.usd_rate = Rate.objects.create(currency=self.usd, value=Decimal('1'), effective_date=date(2024, 1, 15))
        self.eur_rate = Rate.objects.create(currency=self.eur, value=Decimal('0.9'), effective_date=date(2024, 1, 15))

    def test_list_rates(self):
        response = self.client.get('/api/currency/rates')

        self.assertEqual(response.status_code, 200)
        self.assertEqual({r['abbreviation'] for r in response.json()}, {'USD', 'EUR'})

    def test_get_rate(self):
        response = self.client.get(f'/api/currency/rates/{self.eur_rate.id}')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            'id': self.eur_rate.id,
            'currency_id': self.eur.id,
            'abbreviation': 'EUR',
            'value': '0.900000',
            'effective_date': '2024-01-15',
        })

    def test_get_unknown_rate(self):
        self.assertEqual(self.client.get('/api/currency/rates/999999').status_code, 404)

    def test_create_rate(self):
        response = self.client.post('/api/currency/rates', json.dumps({
            'currency_id': self.gbp.id, 'value': '0.79', 'effective_date': '2024-01-15'
        }), content_type='application/json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['value'], '0.790000')
        self.assertEqual(self.gbp.rates.count(), 1)

    def test_create_rate_with_currency_in_query(self):
        response = self.client.post(f'/api/currency/rates?currency_id={self.gbp.id}', json.dumps({
            'value': '0.79', 'effective_date': '2024-01-15'
        }), content_type='application/json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['currency_id'], self.gbp.id)

    def test_create_rate_for_unknown_currency(self):
        response = self.client.post('/api/currency/rates', json.dumps({
            'currency_id': 999999, 'value': '0.79', 'effective_date': '2024-01-15'
        }), content_type='application/json')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(Rate.objects.count(), 2)

    def test_create_rate_with_fractional_currency_id(self):
        response = self.client.post('/api/currency/rates', json.dumps({
            'currency_id': self.usd.id + 0.9, 'value': '2', 'effective_date': '2024-02-01'
        }), content_type='application/json')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(Rate.objects.count(), 2)

    def test_create_rate_with_negative_value(self):
        response = self.client.post('/api/currency/rates', json.dumps({
            'currency_id': self.gbp.id, 'value': '-0.79', 'effective_date': '2024-01-15'
        }), content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('value', response.json()['errors'])

    def test_update_rate(self):
        response = self.client.put(f'/api/currency/rates/{self.eur_rate.id}', json.dumps({
            'value': '0.95', 'effective_date': '2024-01-16'
        }), content_type='application/json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['value'], '0.950000')
        self.assertEqual(response.json()['effective_date'], '2024-01-16')

    def test_delete_rate(self):
        response = self.client.delete(f'/api/currency/rates/{self.eur_rate.id}')

        self.assertEqual(response.status_code, 204)
        self.assertFalse(Rate.objects.filter(pk=self.eur_rate.pk).exists())

    def test_convert(self):
        response = self.client.get('/api/currency/rates/convert',
                                   {'from': self.usd.id, 'to': self.eur.id, 'amount': '100'})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['result'], '90.000000')
        self.assertEqual(data['from']['abbreviation'], 'USD')
        self.assertEqual(data['to']['abbreviation'], 'EUR')
        self.assertEqual(data['amount'], '100')

    def test_convert_rejects_non_positive_amount(self):
        for amount in ('0', '-5', 'abc'):
            with self.subTest(amount=amount):
                response = self.client.get('/api/currency/rates/convert',
                                           {'from': self.usd.id, 'to': self.eur.id, 'amount': amount})
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()['error'], 'invalid_input')

    def test_convert_amount_too_large(self):
        for amount in ('1e29', '1e999999'):
            with self.subTest(amount=amount):
                response = self.client.get('/api/currency/rates/convert',
                                           {'from': self.usd.id, 'to': self.eur.id, 'amount': amount})
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()['error'], 'invalid_input')

    def test_convert_unknown_currency(self):
        response = self.client.get('/api/currency/rates/convert',
                                   {'from': 999999, 'to': self.eur.id, 'amount': '10'})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'not_found')

    def test_convert_currency_without_rates(self):
        response = self.client.get('/api/currency/rates/convert',
                                   {'from': self.usd.id, 'to': self.gbp.id, 'amount': '10'})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'no_rate_available')

    def test_rates_by_abbreviation_and_date(self):
        response = self.client.get('/api/currency/rates/by-abbreviation',
                                   {'abbreviation': 'EUR', 'date': '2024-01-15'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([r['id'] for r in response.json()], [self.eur_rate.id])

    def test_rates_by_abbreviation_without_match(self):
        response = self.client.get('/api/currency/rates/by-abbreviation',
                                   {'abbreviation': 'EUR', 'date': '2023-01-01'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [])

    def test_rates_by_abbreviation_requires_parameters(self):
        missing_abbreviation = self.client.get('/api/currency/rates/by-abbreviation', {'date': '2024-01-15'})
        bad_date = self.client.get('/api/currency/rates/by-abbreviation',
                                   {'abbreviation': 'EUR', 'date': '15/01/2024'})

        self.assertEqual(missing_abbreviation.status_code, 400)
        self.assertEqual(bad_date.status_code, 400)

    def test_bulk_rates(self):
        response = self.client.post('/api/currency/rates/bulk-rates', json.dumps(['USD', 'EUR', 'ZZZ']),
                                    content_type='application/json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual([r['abbreviation'] for r in response.json()], ['USD', 'EUR'])

    def test_bulk_rates_requires_list(self):
        response = self.client.post('/api/currency/rates/bulk-rates', json.dumps({'abbreviations': ['USD']}),
                                    content_type='application/json')

        self.assertEqual(response.status_code, 400)
