"""Errors returned by the session API.

A spin the session cannot honour right now is not an error: /spin answers
200 with accepted=false and a SpinRejection reason. The codes here cover
requests that could never be served as sent, or a server with no session.
"""
from enum import Enum

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from olympus_slot.config import settings


class ErrorCode(str, Enum):
    INVALID_REQUEST = "INVALID_REQUEST"
    SESSION_NOT_STARTED = "SESSION_NOT_STARTED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# code -> (HTTP status, whether the same request may succeed later)
ERROR_TABLE: dict[ErrorCode, tuple[int, bool]] = {
    ErrorCode.INVALID_REQUEST: (400, False),
    ErrorCode.SESSION_NOT_STARTED: (503, True),
    ErrorCode.INTERNAL_ERROR: (500, True),
}


class ApiError(BaseModel):
    code: ErrorCode
    message: str
    recoverable: bool


class ApiErrorResponse(BaseModel):
    protocolVersion: str = settings.protocol_version
    error: ApiError


class GameError(Exception):
    """Raised anywhere below an endpoint; the middleware renders it."""

    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = code
        self.status_code, self.recoverable = ERROR_TABLE[code]
        self.message = message or code.value.replace("_", " ").lower()
        super().__init__(self.message)

    @property
    def detail(self) -> ApiError:
        return ApiError(code=self.code, message=self.message, recoverable=self.recoverable)

    def to_response(self) -> JSONResponse:
        body = ApiErrorResponse(error=self.detail)
        return JSONResponse(status_code=self.status_code, content=body.model_dump(mode="json"))
