"""
Data access for currencies and their dated rates.

Both stores accept plain mappings (parsed JSON bodies or form data) and return
model instances. Failures are raised as the typed errors in
``currencies.errors``; each write runs in its own transaction.
"""

import logging
from collections.abc import Mapping
from datetime import date
from decimal import Decimal, InvalidOperation
from functools import wraps
from typing import Any, Dict, Iterable, List, Optional

from django.core.exceptions import ValidationError
from django.db import InterfaceError, OperationalError, transaction
from django.utils.dateparse import parse_date

from .errors import NoRateAvailable, NotFound, Unavailable, ValidationFailed
from .models import Currency, Rate

logger = logging.getLogger(__name__)

CURRENCY_FIELDS = ('name', 'abbreviation', 'symbol')
REQUIRED_MESSAGE = 'This field is required.'


def store_operation(func):
    """Translate storage outages into Unavailable"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            logger.error(f"Store operation {func.__name__} failed: {e}")
            raise Unavailable(f"Currency store unavailable: {e}") from e
    return wrapper


def coerce_id(value: Any, entity: str) -> int:
    """Ids that are not integral can never match a row; floats are not truncated"""
    if value is None or isinstance(value, bool):
        raise NotFound(f"{entity} not found with ID: {value}")
    try:
        return int(str(value).strip())
    except ValueError:
        raise NotFound(f"{entity} not found with ID: {value}")


def parse_effective_date(value: Any) -> Optional[date]:
    """Accept date objects or ISO strings; None when missing"""
    if value is None or value == '':
        return None
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value).strip())
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationFailed('Invalid date', errors={'effective_date': ['Enter a valid date (YYYY-MM-DD).']})
    return parsed


def _require_mapping(data: Any, entity: str):
    if not isinstance(data, Mapping):
        raise ValidationFailed(f"{entity} payload must be an object")


def _full_clean(instance):
    try:
        instance.full_clean()
    except ValidationError as e:
        name = instance._meta.verbose_name.capitalize()
        raise ValidationFailed(f"{name} validation failed", errors=e.message_dict) from e


class CurrencyStore:
    """CRUD over Currency reference data"""

    @store_operation
    def list_all(self) -> List[Currency]:
        return list(Currency.objects.all())

    @store_operation
    def get_by_id(self, currency_id) -> Currency:
        pk = coerce_id(currency_id, 'Currency')
        try:
            return Currency.objects.get(pk=pk)
        except Currency.DoesNotExist:
            raise NotFound(f"Currency not found with ID: {currency_id}")

    @store_operation
    def get_with_rates(self, currency_id) -> Currency:
        """Currency with its rates prefetched, newest first"""
        pk = coerce_id(currency_id, 'Currency')
        try:
            return Currency.objects.prefetch_related('rates').get(pk=pk)
        except Currency.DoesNotExist:
            raise NotFound(f"Currency not found with ID: {currency_id}")

    @store_operation
    def find_by_abbreviation(self, abbreviation: Optional[str]) -> Optional[Currency]:
        """Case-insensitive lookup; the oldest currency wins on duplicates"""
        if not abbreviation or not str(abbreviation).strip():
            return None
        return (
            Currency.objects
            .filter(abbreviation__iexact=str(abbreviation).strip())
            .order_by('id')
            .first()
        )

    @store_operation
    def create(self, data: Mapping) -> Currency:
        currency = Currency(**self._clean_values(data))
        _full_clean(currency)
        with transaction.atomic():
            currency.save()
        logger.info(f"Created currency {currency.id} ({currency.abbreviation})")
        return currency

    @store_operation
    def update(self, currency_id, data: Mapping) -> Currency:
        values = self._clean_values(data)
        with transaction.atomic():
            currency = self.get_by_id(currency_id)
            for field, value in values.items():
                setattr(currency, field, value)
            _full_clean(currency)
            currency.save()
        logger.info(f"Updated currency {currency.id} ({currency.abbreviation})")
        return currency

    @store_operation
    def delete(self, currency_id) -> None:
        """Delete a currency together with all of its rates"""
        with transaction.atomic():
            currency = self.get_by_id(currency_id)
            _, deleted = currency.delete()
        logger.info(
            f"Deleted currency {currency_id} and {deleted.get('currencies.Rate', 0)} rate(s)"
        )

    def _clean_values(self, data: Mapping) -> Dict[str, str]:
        _require_mapping(data, 'Currency')
        values = {}
        for field in CURRENCY_FIELDS:
            raw = data.get(field)
            values[field] = '' if raw is None else str(raw).strip()
        values['abbreviation'] = values['abbreviation'].upper()
        return values


class RateStore:
    """CRUD and lookups over dated currency rates"""

    def __init__(self, currency_store: Optional[CurrencyStore] = None):
        self.currency_store = currency_store or CurrencyStore()

    @store_operation
    def list_all(self) -> List[Rate]:
        return list(Rate.objects.select_related('currency'))

    @store_operation
    def get_by_id(self, rate_id) -> Rate:
        pk = coerce_id(rate_id, 'Rate')
        try:
            return Rate.objects.select_related('currency').get(pk=pk)
        except Rate.DoesNotExist:
            raise NotFound(f"Rate not found with ID: {rate_id}")

    @store_operation
    def create(self, data: Mapping) -> Rate:
        _require_mapping(data, 'Rate')
        currency = self._resolve_currency(data)
        rate = Rate(currency=currency, **self._clean_values(data))
        _full_clean(rate)
        with transaction.atomic():
            rate.save()
        rate.refresh_from_db()
        logger.info(f"Created rate {rate.id} for {currency.abbreviation} on {rate.effective_date}")
        return rate

    @store_operation
    def update(self, rate_id, data: Mapping) -> Rate:
        _require_mapping(data, 'Rate')
        with transaction.atomic():
            rate = self.get_by_id(rate_id)
            if data.get('currency_id') not in (None, ''):
                rate.currency = self._resolve_currency(data)
            for field, value in self._clean_values(data).items():
                setattr(rate, field, value)
            _full_clean(rate)
            rate.save()
        rate.refresh_from_db()
        logger.info(f"Updated rate {rate.id} for {rate.currency.abbreviation}")
        return rate

    @store_operation
    def delete(self, rate_id) -> int:
        """Delete a rate and return the id of the currency that owned it"""
        with transaction.atomic():
            rate = self.get_by_id(rate_id)
            currency_id = rate.currency_id
            rate.delete()
        logger.info(f"Deleted rate {rate_id} of currency {currency_id}")
        return currency_id

    @store_operation
    def find_by_abbreviation_and_date(self, abbreviation: str, on_date) -> List[Rate]:
        on_date = parse_effective_date(on_date)
        if on_date is None:
            raise ValidationFailed('Date is required', errors={'date': [REQUIRED_MESSAGE]})
        currency = self.currency_store.find_by_abbreviation(abbreviation)
        if currency is None:
            return []
        return list(currency.rates.select_related('currency').filter(effective_date=on_date))

    @store_operation
    def find_bulk(self, abbreviations: Optional[Iterable[str]]) -> List[Rate]:
        """Current rate per known abbreviation; unknown ones are skipped"""
        rates = []
        seen = set()
        for abbreviation in abbreviations or []:
            if not isinstance(abbreviation, str):
                logger.debug(f"Skipping non-text abbreviation {abbreviation!r}")
                continue
            code = abbreviation.strip().upper()
            if not code or code in seen:
                continue
            seen.add(code)
            currency = self.currency_store.find_by_abbreviation(code)
            if currency is None:
                logger.debug(f"Skipping unknown abbreviation {code}")
                continue
            rate = self._latest(currency)
            if rate is not None:
                rates.append(rate)
        return rates

    @store_operation
    def current_rate(self, currency: Currency) -> Rate:
        """Latest effective date wins, highest id breaks ties"""
        rate = self._latest(currency)
        if rate is None:
            raise NoRateAvailable(f"No rate available for currency {currency.abbreviation}")
        return rate

    def _latest(self, currency: Currency) -> Optional[Rate]:
        return (
            Rate.objects
            .select_related('currency')
            .filter(currency=currency)
            .order_by('-effective_date', '-id')
            .first()
        )

    def _resolve_currency(self, data: Mapping) -> Currency:
        currency_id = data.get('currency_id')
        if currency_id is None or currency_id == '':
            raise ValidationFailed('Rate validation failed', errors={'currency_id': [REQUIRED_MESSAGE]})
        return self.currency_store.get_by_id(currency_id)

    def _clean_values(self, data: Mapping) -> Dict[str, Any]:
        errors = {}
        values = {}

        raw_value = data.get('value')
        if raw_value is None or str(raw_value).strip() == '':
            errors['value'] = [REQUIRED_MESSAGE]
        else:
            try:
                value = Decimal(str(raw_value).strip())
            except InvalidOperation:
                value = None
            if value is None or not value.is_finite():
                errors['value'] = ['Enter a number.']
            else:
                values['value'] = value

        try:
            effective_date = parse_effective_date(data.get('effective_date'))
        except ValidationFailed as e:
            errors.update(e.errors)
        else:
            if effective_date is None:
                errors['effective_date'] = [REQUIRED_MESSAGE]
            else:
                values['effective_date'] = effective_date

        if errors:
            raise ValidationFailed('Rate validation failed', errors=errors)
        return values


currency_store = CurrencyStore()
rate_store = RateStore(currency_store)
