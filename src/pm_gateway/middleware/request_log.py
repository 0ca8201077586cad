"""Per-request access log and request-id propagation.

An inbound X-Request-ID (e.g. from a wallet frontend) is reused so client and
server logs correlate; otherwise a fresh id is minted. Health probes log at
DEBUG, ledger outages (5xx) at WARNING, everything else at INFO:

    INFO [POST] /api/v1/quotes 200 4ms req_a1b2c3d4e5f6
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.pm_common.response import new_request_id

logger = logging.getLogger("pm.request")

REQUEST_ID_HEADER = "X-Request-ID"
_QUIET_PATHS = frozenset({"/health"})


def _level_for(path: str, status_code: int) -> int:
    if status_code >= 500:
        return logging.WARNING
    if path in _QUIET_PATHS:
        return logging.DEBUG
    return logging.INFO


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        inbound = request.headers.get(REQUEST_ID_HEADER, "").strip()
        request.state.request_id = inbound[:64] if inbound else new_request_id()

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.log(
            _level_for(request.url.path, response.status_code),
            "[%s] %s %d %.0fms %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
        )
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        return response
