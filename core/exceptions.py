"""
Error taxonomy and the API-wide exception handler.

Handlers raise; they never build error responses themselves.  Every
failure that reaches DRF is rendered by :func:`api_exception_handler` as::

    {"ok": false, "error": {"code": ..., "message": ...}}

with ``fields`` added for validation failures and ``detail`` (message and
traceback) added for unclassified errors when ``DEBUG`` is on.
"""
from __future__ import annotations

import logging
import traceback

from django.conf import settings
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.db import IntegrityError
from django.db.models import ProtectedError, RestrictedError
from django.http import Http404, JsonResponse
from django.utils.translation import gettext_lazy as _
from rest_framework import exceptions, status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class InvalidCredentials(exceptions.AuthenticationFailed):
    default_detail = _('Invalid username or password.')
    default_code = 'invalid_credentials'


class SessionExpired(exceptions.AuthenticationFailed):
    default_detail = _('Your session has expired, please log in again.')
    default_code = 'token_expired'


class SessionInvalid(exceptions.AuthenticationFailed):
    default_detail = _('Session token is invalid.')
    default_code = 'token_invalid'


class ProtectedResource(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _('The primary administrator cannot be deleted or deactivated.')
    default_code = 'protected_resource'


class Conflict(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _('The operation conflicts with existing data.')
    default_code = 'conflict'


class UploadRejected(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _('The uploaded file was rejected.')
    default_code = 'upload_rejected'


class QRGenerationFailed(exceptions.APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = _('Payment QR code could not be generated.')
    default_code = 'qr_generation_failed'


# DRF codes renamed for the API surface.
_CODE_ALIASES = {
    'permission_denied': 'forbidden',
    'authentication_failed': 'token_invalid',
}


def _classify(exc: Exception) -> Exception:
    if isinstance(exc, (IntegrityError, ProtectedError, RestrictedError)):
        # Raw database text must not reach the client.
        logger.info("store conflict: %s", exc)
        return Conflict()
    if isinstance(exc, Http404):
        return exceptions.NotFound()
    if isinstance(exc, DjangoPermissionDenied):
        return exceptions.PermissionDenied()
    return exc


def _server_error(exc: Exception | None = None) -> dict:
    error: dict = {'code': 'server_error', 'message': str(_('Internal server error.'))}
    if settings.DEBUG and exc is not None:
        error['detail'] = {
            'message': str(exc),
            'traceback': traceback.format_exception(type(exc), exc, exc.__traceback__),
        }
    return {'ok': False, 'error': error}


def api_exception_handler(exc, context):
    # rest_framework.views loads the authentication classes, which import
    # this module, so its handler is only looked up at call time.
    from rest_framework.views import exception_handler as drf_exception_handler

    exc = _classify(exc)
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.error("unhandled error in %s", type(view).__name__ if view else 'view', exc_info=exc)
        return Response(_server_error(exc), status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, exceptions.ValidationError):
        error = {
            'code': 'validation_failed',
            'message': str(_('Invalid input.')),
            'fields': resp.data if isinstance(resp.data, dict) else {'non_field_errors': resp.data},
        }
    else:
        code = getattr(exc, 'default_code', 'error')
        detail = getattr(exc, 'detail', None)
        if isinstance(detail, exceptions.ErrorDetail):
            code = detail.code or code
        error = {
            'code': _CODE_ALIASES.get(code, code),
            'message': str(detail) if detail is not None else str(exc),
        }
    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        # DRF answers 403 on views without an authenticator, such as login.
        resp.status_code = status.HTTP_401_UNAUTHORIZED
    resp.data = {'ok': False, 'error': error}
    return resp


def json_404(request, exception=None):
    return JsonResponse(
        {'ok': False, 'error': {'code': 'route_not_found', 'message': str(_('Route not found.'))}},
        status=404,
    )


def json_500(request):
    return JsonResponse(_server_error(), status=500)
