"""Request logging middleware.

Logs every HTTP request with method, path, status code, latency and a
request ID. A caller-supplied ``X-Request-ID`` (the Mini App sends one) is
kept if it is short and printable, otherwise a fresh one is generated. The
id lands in request.state for ApiResponse and is echoed as a response header.

Log format:
    INFO [POST] /api/v1/auctions/lst_1/bids → 201 (12ms) req_a1b2c3d4e5f6
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("sm.request")

_REQUEST_ID_HEADER = "X-Request-ID"
_ACCEPTED_ID = re.compile(r"^[A-Za-z0-9_.:-]{1,64}$")
# Probed by load balancers every few seconds.
_QUIET_PATHS = frozenset({"/health"})


def _request_id(request: Request) -> str:
    incoming = request.headers.get(_REQUEST_ID_HEADER)
    if incoming and _ACCEPTED_ID.match(incoming):
        return incoming
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = _request_id(request)

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        level = logging.DEBUG if request.url.path in _QUIET_PATHS else logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
        )
        response.headers[_REQUEST_ID_HEADER] = request.state.request_id
        return response
