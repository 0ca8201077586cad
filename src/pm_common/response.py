"""Envelope shared by every pricing and market endpoint.

    {"code": 0, "message": "success", "data": {...},
     "timestamp": "<iso8601 utc>", "request_id": "req_..."}

code is 0 on success and the AppError code otherwise; data is null on error.
The request id is the one RequestLogMiddleware attached to request.state, so
the body and the X-Request-ID header always agree.
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field
from starlette.requests import Request

from src.pm_common.datetime_utils import utc_now
from src.pm_common.errors import AppError


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=new_request_id)


def _request_id(request: Request | None) -> str:
    if request is None:
        return new_request_id()
    return getattr(request.state, "request_id", None) or new_request_id()


def success_response(data: Any = None, request: Request | None = None) -> ApiResponse:
    return ApiResponse(data=data, request_id=_request_id(request))


def error_response(exc: AppError, request: Request | None = None) -> ApiResponse:
    return ApiResponse(code=exc.code, message=exc.message, request_id=_request_id(request))
