import logging
import time
from typing import Callable, Optional

from django.conf import settings
from django.core.exceptions import MiddlewareNotUsed
from django.http import HttpRequest, HttpResponse

logger = logging.getLogger('django.request')


def _route(request: HttpRequest) -> Optional[str]:
    match = getattr(request, 'resolver_match', None)
    return match.view_name if match is not None else None


class SlowRequestLoggingMiddleware:
    """Warn about API calls that take ``SLOW_REQUEST_LOG_MS`` or longer.

    Score and risk reports walk every attendance row of a course, so this is
    the first place to look when a course grows large. The payload carries
    the route name so slow calls can be grouped per endpoint.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        if not getattr(settings, 'SLOW_REQUEST_LOG_ENABLED', True):
            raise MiddlewareNotUsed
        self.get_response = get_response
        self.threshold_ms = int(getattr(settings, 'SLOW_REQUEST_LOG_MS', 1200))

    def __call__(self, request: HttpRequest):
        started = time.perf_counter()
        response = self.get_response(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        if elapsed_ms < self.threshold_ms:
            return response

        user = getattr(request, 'user', None)
        authenticated = user is not None and user.is_authenticated
        logger.warning('%s', {
            'event': 'slow_request',
            'method': request.method,
            'path': request.path,
            'route': _route(request),
            'status': getattr(response, 'status_code', None),
            'duration_ms': elapsed_ms,
            'user_id': user.pk if authenticated else None,
            'role': getattr(user, 'role', None) if authenticated else None,
        })
        return response
