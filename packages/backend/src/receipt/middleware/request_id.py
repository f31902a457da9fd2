"""Per-request correlation id for receipt's logs.

A POST /api/addEntry produces several log lines from different layers
(receipt.entry_added from the service, receipt.delivery_failed from the
hub, receipt.bad_request or receipt.storage_error from main.py). Binding
one id and the request path into structlog's contextvars ties them together.
A caller-supplied X-Request-ID is reused so a front end can correlate too.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind request_id/path for the request's logs and echo the id back."""

    async def dispatch(self, request: Request, call_next) -> Response:
        # Empty header counts as absent
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        ):
            response: Response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
