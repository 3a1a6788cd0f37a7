"""
Audit Trail Module for the Currency Manager

Writes structured audit records for currency/rate changes and API access to
the ``audit_trail`` logger. Records are log lines only; nothing is persisted
next to the currency tables.
"""

import json
import logging
from typing import Any, Dict, Optional

from django.http import HttpRequest
from django.utils import timezone

logger = logging.getLogger(__name__)


class AuditTrailManager:
    """
    Builds audit records and emits them on the audit logger

    Each record carries the action, the entity touched, the values involved
    and the client address/user agent taken from the request.
    """

    def __init__(self, audit_logger: Optional[logging.Logger] = None):
        self.logger = audit_logger or logging.getLogger('audit_trail')

    def log_action(self,
                   action: str,
                   model_name: str,
                   object_id: Any,
                   old_values: Optional[Dict[str, Any]] = None,
                   new_values: Optional[Dict[str, Any]] = None,
                   request: Optional[HttpRequest] = None,
                   metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Log an audit trail entry

        Args:
            action: Type of action (CREATE, UPDATE, DELETE, API_ACCESS)
            model_name: Name of the entity being acted upon
            object_id: ID of the entity being acted upon
            old_values: Previous values (for updates and deletes)
            new_values: New values (for creates and updates)
            request: HTTP request object for context
            metadata: Additional metadata

        Returns:
            The record that was logged
        """
        record = {
            'timestamp': timezone.now().isoformat(),
            'action': action,
            'model_name': model_name,
            'object_id': str(object_id),
            'old_values': old_values,
            'new_values': new_values,
            'ip_address': self._get_client_ip(request),
            'user_agent': self._get_user_agent(request),
            'metadata': metadata or {},
        }
        self.logger.info(f"AUDIT: {json.dumps(record, default=str)}")
        return record

    def log_api_access(self,
                       endpoint: str,
                       method: str,
                       status_code: int,
                       request: Optional[HttpRequest] = None) -> Dict[str, Any]:
        metadata = {
            'api_access': True,
            'endpoint': endpoint,
            'method': method,
            'status_code': status_code,
        }
        return self.log_action(
            action='API_ACCESS',
            model_name='API',
            object_id=f"{method}:{endpoint}",
            request=request,
            metadata=metadata
        )

    def _get_client_ip(self, request: Optional[HttpRequest]) -> Optional[str]:
        """Extract client IP address from request"""
        if not request:
            return None

        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            return x_forwarded_for.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR')

    def _get_user_agent(self, request: Optional[HttpRequest]) -> str:
        if not request:
            return ''
        return request.META.get('HTTP_USER_AGENT', '')[:500]


_audit_manager = AuditTrailManager()


def get_audit_manager() -> AuditTrailManager:
    """Get the global audit trail manager instance"""
    return _audit_manager


def log_currency_action(action: str, model_name: str, object_id: Any,
                        request: Optional[HttpRequest] = None, **kwargs) -> Dict[str, Any]:
    """Convenience function to log currency and rate changes"""
    return get_audit_manager().log_action(action, model_name, object_id, request=request, **kwargs)
