"""
HTML views for the Currency Manager

Server-rendered forms over the same stores and conversion engine the JSON API
uses. Successful writes redirect; failures are flashed through the messages
framework.
"""

import logging

from django.contrib import messages
from django.http import Http404
from django.shortcuts import redirect, render
from django.views.decorators.http import require_http_methods, require_POST

from security.audit import log_currency_action

from .conversion import conversion_engine
from .errors import CurrencyServiceError, InvalidInput, NotFound, Unavailable, ValidationFailed
from .stores import currency_store, rate_store

logger = logging.getLogger(__name__)


def _flash_validation(request, error: ValidationFailed):
    messages.error(request, str(error))
    for field, field_errors in error.errors.items():
        for message in field_errors:
            messages.error(request, f"{field}: {message}")


@require_http_methods(["GET"])
def currency_list(request):
    """All stored currencies"""
    return render(request, 'currencies/list.html', {'currencies': currency_store.list_all()})


@require_http_methods(["GET", "POST"])
def currency_create(request):
    """New currency form"""
    if request.method == 'POST':
        try:
            currency = currency_store.create(request.POST)
        except ValidationFailed as e:
            _flash_validation(request, e)
            return render(request, 'currencies/form.html',
                          {'currency': request.POST, 'errors': e.errors}, status=400)

        log_currency_action('CREATE', 'Currency', currency.id, request=request,
                            new_values=currency.to_dict())
        messages.success(request, f'Currency {currency.abbreviation} created')
        return redirect('currency_list')

    return render(request, 'currencies/form.html', {'currency': None})


@require_http_methods(["GET"])
def currency_detail(request, currency_id):
    """Currency with its rate history"""
    try:
        currency = currency_store.get_with_rates(currency_id)
    except NotFound as e:
        raise Http404(str(e))
    return render(request, 'currencies/view.html', {'currency': currency, 'rates': currency.rates.all()})


@require_http_methods(["GET", "POST"])
def currency_edit(request, currency_id):
    """Edit currency form"""
    try:
        currency = currency_store.get_by_id(currency_id)
    except NotFound as e:
        raise Http404(str(e))

    if request.method == 'POST':
        old_values = currency.to_dict()
        try:
            currency = currency_store.update(currency_id, request.POST)
        except ValidationFailed as e:
            _flash_validation(request, e)
            return render(request, 'currencies/form.html',
                          {'currency': currency, 'errors': e.errors}, status=400)

        log_currency_action('UPDATE', 'Currency', currency.id, request=request,
                            old_values=old_values, new_values=currency.to_dict())
        messages.success(request, f'Currency {currency.abbreviation} updated')
        return redirect('currency_list')

    return render(request, 'currencies/form.html', {'currency': currency})


@require_POST
def currency_delete(request, currency_id):
    """Delete a currency and its rates"""
    try:
        currency_store.delete(currency_id)
    except NotFound as e:
        raise Http404(str(e))

    log_currency_action('DELETE', 'Currency', currency_id, request=request)
    messages.success(request, 'Currency deleted')
    return redirect('currency_list')


@require_http_methods(["GET", "POST"])
def convert_view(request):
    """Currency conversion form"""
    context = {'currencies': currency_store.list_all(), 'result': None}
    status = 200

    if request.method == 'POST':
        try:
            context['result'] = conversion_engine.convert(
                request.POST.get('from'),
                request.POST.get('to'),
                request.POST.get('amount'),
            )
        except InvalidInput as e:
            messages.error(request, str(e))
            status = 400
        except NotFound as e:
            messages.error(request, str(e))
            status = 404
        except CurrencyServiceError as e:
            logger.error(f"Conversion failed: {e}")
            messages.error(request, str(e))
            status = 503 if isinstance(e, Unavailable) else 500

    return render(request, 'convert.html', context, status=status)


@require_http_methods(["GET", "POST"])
def rate_create(request):
    """New rate form for a given currency"""
    currency_id = request.POST.get('currency_id') or request.GET.get('currency_id')
    try:
        currency = currency_store.get_by_id(currency_id)
    except NotFound as e:
        raise Http404(str(e))

    if request.method == 'POST':
        payload = request.POST.copy()
        payload['currency_id'] = currency.id
        try:
            rate = rate_store.create(payload)
        except ValidationFailed as e:
            _flash_validation(request, e)
            return render(request, 'rates/form.html',
                          {'currency': currency, 'rate': request.POST, 'errors': e.errors}, status=400)

        log_currency_action('CREATE', 'Rate', rate.id, request=request, new_values=rate.to_dict())
        messages.success(request, 'Rate added')
        return redirect('currency_detail', currency_id=currency.id)

    return render(request, 'rates/form.html', {'currency': currency, 'rate': None})


@require_http_methods(["GET", "POST"])
def rate_edit(request, rate_id):
    """Edit rate form"""
    try:
        rate = rate_store.get_by_id(rate_id)
    except NotFound as e:
        raise Http404(str(e))

    if request.method == 'POST':
        old_values = rate.to_dict()
        try:
            rate = rate_store.update(rate_id, request.POST)
        except ValidationFailed as e:
            _flash_validation(request, e)
            return render(request, 'rates/form.html',
                          {'currency': rate.currency, 'rate': rate, 'errors': e.errors}, status=400)
        except NotFound as e:
            raise Http404(str(e))

        log_currency_action('UPDATE', 'Rate', rate.id, request=request,
                            old_values=old_values, new_values=rate.to_dict())
        messages.success(request, 'Rate updated')
        return redirect('currency_detail', currency_id=rate.currency_id)

    return render(request, 'rates/form.html', {'currency': rate.currency, 'rate': rate})


@require_POST
def rate_delete(request, rate_id):
    try:
        currency_id = rate_store.delete(rate_id)
    except NotFound as e:
        raise Http404(str(e))

    log_currency_action('DELETE', 'Rate', rate_id, request=request)
    messages.success(request, 'Rate deleted')
    return redirect('currency_detail', currency_id=currency_id)
