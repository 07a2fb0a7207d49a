import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = 'Internal server error'


class InvalidTransition(exceptions.APIException):
    """A state machine was asked for a move its current state does not allow."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid state transition.'
    default_code = 'invalid_transition'


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict with the current state of the resource.'
    default_code = 'conflict'


class AlreadyProcessed(Conflict):
    default_detail = 'Request already processed.'
    default_code = 'already_processed'


def _first_message(data) -> str:
    if isinstance(data, dict):
        if 'detail' in data:
            return _first_message(data['detail'])
        for key, value in data.items():
            msg = _first_message(value)
            if key == 'non_field_errors' or not msg:
                return msg
            return f'{key}: {msg}'
        return ''
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else ''
    return str(data)


def custom_exception_handler(exc, context):
    """Render every error as ``{"message": ..., "status_code": ...}``.

    Unhandled exceptions are logged and answered with a generic 500 so no
    internal detail leaks to the client.
    """
    if isinstance(exc, DjangoValidationError):
        exc = exceptions.ValidationError(exc.messages)

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(
            'Unhandled error in %s',
            view.__class__.__name__ if view is not None else 'unknown view',
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return Response(
            {'message': GENERIC_ERROR_MESSAGE, 'status_code': status.HTTP_500_INTERNAL_SERVER_ERROR},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response.data = {
        'message': _first_message(response.data),
        'status_code': response.status_code,
    }
    return response
