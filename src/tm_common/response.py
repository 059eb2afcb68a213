"""Unified API response wrapper.

All API endpoints return this format:
{
    "code": 0,            // 0=success, non-0=AppError code
    "message": "success",
    "data": { ... },      // null on error
    "retryable": false,   // true only for StorageError
    "timestamp": "...",
    "request_id": "..."
}
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from src.tm_common.errors import AppError, StorageError


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    retryable: bool = False
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(data: Any = None) -> ApiResponse:
    return ApiResponse(code=0, message="success", data=data)


def error_response(code: int, message: str, retryable: bool = False) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=None, retryable=retryable)


def app_error_response(exc: AppError) -> ApiResponse:
    return error_response(exc.code, exc.message, retryable=isinstance(exc, StorageError))
