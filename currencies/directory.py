"""
Client for the public currency directory of the National Bank of the
Republic of Belarus (https://api.nbrb.by/exrates/currencies).

The directory is read-only reference data; nothing fetched here is written to
the local store.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from django.conf import settings

from .errors import Unavailable

logger = logging.getLogger(__name__)

DEFAULT_DIRECTORY_URL = "https://api.nbrb.by/exrates/currencies"
DEFAULT_TIMEOUT = 5


class CurrencyDirectoryClient:
    """Fetches the external currency list and maps it to the local JSON shape"""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.url = url or getattr(settings, 'CURRENCY_DIRECTORY_URL', DEFAULT_DIRECTORY_URL)
        self.timeout = timeout or getattr(settings, 'CURRENCY_DIRECTORY_TIMEOUT', DEFAULT_TIMEOUT)
        self.session = session or requests.Session()

    def list_currencies(self) -> List[Dict[str, Any]]:
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.error(f"Currency directory request failed: {e}")
            raise Unavailable(f"Currency directory unavailable: {e}") from e
        except ValueError as e:
            logger.error(f"Currency directory returned invalid JSON: {e}")
            raise Unavailable('Currency directory returned an invalid response') from e

        if not isinstance(payload, list):
            raise Unavailable('Currency directory returned an unexpected payload')

        currencies = [self._to_currency(entry) for entry in payload if isinstance(entry, dict)]
        return [currency for currency in currencies if currency['abbreviation']]

    @staticmethod
    def _to_currency(entry: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'id': entry.get('Cur_ID'),
            'name': entry.get('Cur_Name_Eng') or entry.get('Cur_Name') or '',
            'abbreviation': (entry.get('Cur_Abbreviation') or '').strip().upper(),
            'symbol': '',
        }
