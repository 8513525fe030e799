"""
Core middleware.
"""

import re
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from apps.core.logging import log_context

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


class RequestContextMiddleware:
    """
    Binds a trace_id to structlog context for the lifetime of a request.

    Reuses an incoming X-Request-ID when it looks sane, otherwise generates
    one, and echoes it back on the response.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        incoming = request.headers.get(REQUEST_ID_HEADER, "")
        trace_id = incoming if _REQUEST_ID_PATTERN.match(incoming) else None

        http_fields = {"http.method": request.method, "http.path": request.path}
        with log_context(trace_id, **http_fields) as bound_id:
            response = self.get_response(request)

        response[REQUEST_ID_HEADER] = bound_id
        return response
