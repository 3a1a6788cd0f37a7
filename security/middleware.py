"""
Middleware for the Currency Manager

Counts requests, adds security headers and logs API access for the audit
trail.
"""

import logging

from django.http import HttpRequest, HttpResponse
from django.utils.deprecation import MiddlewareMixin

from .audit import get_audit_manager
from .counter import get_request_counter

logger = logging.getLogger(__name__)


class RequestCounterMiddleware(MiddlewareMixin):
    """Increments the process request counter once per request, before the view runs"""

    def process_request(self, request: HttpRequest):
        count = get_request_counter().increment()
        logger.debug(f"Request #{count}: {request.method} {request.path}")
        return None


class SecurityHeadersMiddleware(MiddlewareMixin):
    """Adds security headers to every response"""

    def process_response(self, request: HttpRequest, response: HttpResponse) -> HttpResponse:
        response['Content-Security-Policy'] = (
            "default-src 'self'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; "
            "frame-ancestors 'none';"
        )
        response['X-Content-Type-Options'] = 'nosniff'
        response['Referrer-Policy'] = 'strict-origin-when-cross-origin'
        return response


class AuditMiddleware(MiddlewareMixin):
    """Logs API access for the audit trail"""

    def process_response(self, request: HttpRequest, response: HttpResponse) -> HttpResponse:
        if not request.path.startswith('/api/'):
            return response

        get_audit_manager().log_api_access(
            endpoint=request.path,
            method=request.method,
            status_code=response.status_code,
            request=request
        )
        return response
