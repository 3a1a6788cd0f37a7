"""
Typed failures raised by the currency stores and the conversion engine.

The presentation layer maps these onto HTTP status codes or view redirects;
nothing in the core builds a response itself.
"""

from typing import Dict, List, Optional


class CurrencyServiceError(Exception):
    """Base exception for currency service errors"""
    kind = 'error'


class NotFound(CurrencyServiceError):
    """Entity id or abbreviation could not be resolved"""
    kind = 'not_found'


class ValidationFailed(CurrencyServiceError):
    """Required field missing or malformed on create/update"""
    kind = 'validation_failed'

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.errors = errors or {}


class InvalidInput(CurrencyServiceError):
    """Non-positive or malformed conversion input"""
    kind = 'invalid_input'


class NoRateAvailable(NotFound):
    """Currency exists but has no rate history"""
    kind = 'no_rate_available'


class Unavailable(CurrencyServiceError):
    """Backing store or external directory failed"""
    kind = 'unavailable'
