"""
Currency conversion over stored rates.

All rates are expressed against the same implicit base currency, so an amount
moves from the source currency to the target one as::

    result = amount * rate_to / rate_from

Arithmetic is done with ``decimal.Decimal`` and the result is quantized to
``settings.CONVERSION_DECIMAL_PLACES`` places. Conversion never writes to the
store.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation, Overflow, localcontext
from typing import Any, Dict, Optional

from django.conf import settings

from .errors import InvalidInput
from .models import Currency
from .stores import CurrencyStore, RateStore, currency_store, rate_store

logger = logging.getLogger(__name__)

DEFAULT_DECIMAL_PLACES = 6
WORKING_PRECISION = 34


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a single conversion"""
    result: Decimal
    from_currency: Currency
    to_currency: Currency
    amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'result': str(self.result),
            'from': self.from_currency.to_dict(),
            'to': self.to_currency.to_dict(),
            'amount': str(self.amount),
        }


def parse_amount(amount: Any) -> Decimal:
    """Parse a positive, finite decimal amount or raise InvalidInput"""
    if amount is None or isinstance(amount, bool):
        raise InvalidInput('Amount is required and must be a number')
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except InvalidOperation:
        raise InvalidInput(f"Amount is not a number: {amount!r}")
    if not value.is_finite():
        raise InvalidInput(f"Amount must be a finite number: {amount!r}")
    if value <= 0:
        raise InvalidInput('Amount must be greater than zero')
    return value


def parse_currency_id(value: Any, label: str) -> int:
    if value is None or isinstance(value, bool):
        raise InvalidInput(f"'{label}' currency id is required")
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidInput(f"'{label}' currency id must be an integer: {value!r}")


class ConversionEngine:
    """Converts amounts between stored currencies using their current rates"""

    def __init__(self,
                 currencies: Optional[CurrencyStore] = None,
                 rates: Optional[RateStore] = None,
                 decimal_places: Optional[int] = None):
        self.currencies = currencies or currency_store
        self.rates = rates or rate_store
        self._decimal_places = decimal_places

    @property
    def quantum(self) -> Decimal:
        places = self._decimal_places
        if places is None:
            places = getattr(settings, 'CONVERSION_DECIMAL_PLACES', DEFAULT_DECIMAL_PLACES)
        return Decimal(1).scaleb(-int(places))

    def convert(self, from_id, to_id, amount) -> ConversionResult:
        """
        Convert ``amount`` from one currency into another

        Raises:
            InvalidInput: non-numeric, non-positive or oversized amount,
                malformed ids, or a stored rate that is not positive
            NotFound: either currency id is unknown
            NoRateAvailable: either currency has no rates
        """
        value = parse_amount(amount)
        from_pk = parse_currency_id(from_id, 'from')
        to_pk = parse_currency_id(to_id, 'to')

        from_currency = self.currencies.get_by_id(from_pk)
        to_currency = self.currencies.get_by_id(to_pk)

        rate_from = self._rate_value(from_currency)
        rate_to = self._rate_value(to_currency)

        with localcontext() as ctx:
            ctx.prec = WORKING_PRECISION
            try:
                result = (value * rate_to / rate_from).quantize(self.quantum, rounding=ROUND_HALF_EVEN)
            except (InvalidOperation, Overflow):
                # the result has more digits than the working precision can hold
                raise InvalidInput(f"Amount is too large to convert: {amount!r}")

        logger.debug(
            f"Converted {value} {from_currency.abbreviation} -> {result} {to_currency.abbreviation}"
        )
        return ConversionResult(
            result=result,
            from_currency=from_currency,
            to_currency=to_currency,
            amount=value,
        )

    def _rate_value(self, currency: Currency) -> Decimal:
        rate = self.rates.current_rate(currency)
        if rate.value <= 0:
            raise InvalidInput(f"Rate {rate.id} of {currency.abbreviation} is not positive")
        return rate.value


conversion_engine = ConversionEngine()
