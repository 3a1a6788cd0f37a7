"""
JSON API Views for the Currency Manager

Thin adapters from HTTP onto the currency stores and the conversion engine.
Typed failures from the core are mapped onto status codes here and nowhere
else.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from currencies.conversion import conversion_engine
from currencies.directory import CurrencyDirectoryClient
from currencies.errors import (
    CurrencyServiceError,
    InvalidInput,
    NotFound,
    Unavailable,
    ValidationFailed,
)
from currencies.stores import currency_store, rate_store
from security.audit import log_currency_action
from security.counter import get_request_counter

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ('application/x-www-form-urlencoded', 'multipart/form-data')


def error_response(error: CurrencyServiceError) -> JsonResponse:
    """Map a typed core failure onto a JSON error response"""
    if isinstance(error, NotFound):
        status = 404
    elif isinstance(error, (ValidationFailed, InvalidInput)):
        status = 400
    elif isinstance(error, Unavailable):
        status = 503
    else:
        status = 500

    body = {'error': error.kind, 'message': str(error)}
    if isinstance(error, ValidationFailed) and error.errors:
        body['errors'] = error.errors
    return JsonResponse(body, status=status)


def parse_payload(request: HttpRequest) -> Any:
    """Form data for form posts, JSON otherwise"""
    if request.content_type in FORM_CONTENT_TYPES:
        return request.POST
    if not request.body:
        return {}
    return json.loads(request.body)


@method_decorator(csrf_exempt, name='dispatch')
class CurrencyApiView(View):
    """Base view translating core failures and malformed JSON into responses"""

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return JsonResponse({'error': 'invalid_json', 'message': 'Invalid JSON'}, status=400)
        except CurrencyServiceError as e:
            logger.info(f"{request.method} {request.path} failed: {e}")
            return error_response(e)
        except Exception as e:
            logger.error(f"Unexpected API error on {request.method} {request.path}: {e}")
            return JsonResponse({'error': 'internal_error', 'message': str(e)}, status=500)


# Currency endpoints

class CurrencyCollectionView(CurrencyApiView):
    """Currencies from the external directory; creates go to the local store"""

    def get(self, request):
        currencies = CurrencyDirectoryClient().list_currencies()
        return JsonResponse(currencies, safe=False)

    def post(self, request):
        currency = currency_store.create(parse_payload(request))
        log_currency_action('CREATE', 'Currency', currency.id, request=request,
                            new_values=currency.to_dict())
        return JsonResponse(currency.to_dict())


class StoredCurrencyListView(CurrencyApiView):
    """All currencies stored in the database"""

    def get(self, request):
        return JsonResponse([c.to_dict() for c in currency_store.list_all()], safe=False)


class CurrencyDetailView(CurrencyApiView):

    def get(self, request, currency_id):
        return JsonResponse(currency_store.get_by_id(currency_id).to_dict())

    def put(self, request, currency_id):
        old_values = currency_store.get_by_id(currency_id).to_dict()
        currency = currency_store.update(currency_id, parse_payload(request))
        log_currency_action('UPDATE', 'Currency', currency.id, request=request,
                            old_values=old_values, new_values=currency.to_dict())
        return JsonResponse(currency.to_dict())

    def delete(self, request, currency_id):
        currency_store.delete(currency_id)
        log_currency_action('DELETE', 'Currency', currency_id, request=request)
        return HttpResponse(status=204)


class RequestCounterView(CurrencyApiView):

    def get(self, request):
        return JsonResponse({'count': get_request_counter().get_count()})


class ResetCounterView(CurrencyApiView):

    def post(self, request):
        get_request_counter().reset()
        return JsonResponse({'count': 0})


# Rate endpoints

class RateCollectionView(CurrencyApiView):

    def get(self, request):
        return JsonResponse([r.to_dict() for r in rate_store.list_all()], safe=False)

    def post(self, request):
        payload = parse_payload(request)
        # the owning currency may also come as a query parameter
        currency_id = request.GET.get('currency_id')
        if currency_id and isinstance(payload, Mapping):
            payload = payload.copy()
            payload['currency_id'] = currency_id
        rate = rate_store.create(payload)
        log_currency_action('CREATE', 'Rate', rate.id, request=request, new_values=rate.to_dict())
        return JsonResponse(rate.to_dict())


class RateDetailView(CurrencyApiView):

    def get(self, request, rate_id):
        return JsonResponse(rate_store.get_by_id(rate_id).to_dict())

    def put(self, request, rate_id):
        old_values = rate_store.get_by_id(rate_id).to_dict()
        rate = rate_store.update(rate_id, parse_payload(request))
        log_currency_action('UPDATE', 'Rate', rate.id, request=request,
                            old_values=old_values, new_values=rate.to_dict())
        return JsonResponse(rate.to_dict())

    def delete(self, request, rate_id):
        rate_store.delete(rate_id)
        log_currency_action('DELETE', 'Rate', rate_id, request=request)
        return HttpResponse(status=204)


class ConversionView(CurrencyApiView):
    """Convert an amount between two stored currencies"""

    def get(self, request):
        result = conversion_engine.convert(
            request.GET.get('from'),
            request.GET.get('to'),
            request.GET.get('amount'),
        )
        return JsonResponse(result.to_dict())


class RatesByAbbreviationView(CurrencyApiView):

    def get(self, request):
        abbreviation = request.GET.get('abbreviation', '')
        if not abbreviation.strip():
            raise ValidationFailed('Abbreviation is required',
                                   errors={'abbreviation': ['This field is required.']})
        rates = rate_store.find_by_abbreviation_and_date(abbreviation, request.GET.get('date'))
        return JsonResponse([r.to_dict() for r in rates], safe=False)


class BulkRatesView(CurrencyApiView):

    def post(self, request):
        abbreviations = parse_payload(request)
        if not isinstance(abbreviations, list):
            raise ValidationFailed('Request body must be a JSON list of abbreviations')
        rates = rate_store.find_bulk(abbreviations)
        return JsonResponse([r.to_dict() for r in rates], safe=False)
