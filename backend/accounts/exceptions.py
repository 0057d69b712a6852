# accounts/exceptions.py
"""
Error taxonomy for session and authorization handling.

- Unauthenticated: no valid session. DRF answers 401; page views redirect
  to the login page.
- Unauthorized: authenticated but lacking the required role. Django and
  DRF both answer 403 with the message.
- ExternalStoreError: any failure from the backing database, carrying the
  store's message verbatim. Never retried or classified further.
"""
from contextlib import contextmanager
import logging

from django.core.exceptions import PermissionDenied
from django.db import DatabaseError
from rest_framework import status
from rest_framework import exceptions
from rest_framework.exceptions import APIException, NotAuthenticated
from rest_framework.views import exception_handler


logger = logging.getLogger(__name__)


class Unauthenticated(NotAuthenticated):
    default_detail = "Authentication required."


class Unauthorized(PermissionDenied):
    """Raised by the authorization gate with a human-readable message."""

    @property
    def message(self) -> str:
        return str(self)


class ExternalStoreError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "The data store request failed."
    default_code = "external_store_error"

    @property
    def message(self) -> str:
        return str(self.detail)


@contextmanager
def translate_store_errors(operation: str):
    """
    Re-raise database failures inside the block as ExternalStoreError.

    Usage:
        with translate_store_errors("load company roles"):
            rows = list(UserCompanyRole.objects.filter(user=user))
    """
    try:
        yield
    except DatabaseError as exc:
        logger.error(
            "Store call failed: %s", operation,
            extra={"operation": operation, "error": str(exc)},
        )
        raise ExternalStoreError(str(exc)) from exc


def api_exception_handler(exc, context):
    """
    DRF exception handler that keeps the gate's message on 403 responses.

    DRF's default handler replaces a Django PermissionDenied with its own
    generic detail; the gate messages are part of the API contract.
    """
    if isinstance(exc, Unauthorized):
        exc = exceptions.PermissionDenied(detail=str(exc))
    return exception_handler(exc, context)
