"""Generic API response envelope."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Code, message and result, serialized as JSON by callers.

    Usage:
        ApiResponse.ok(post).model_dump_json()
        ApiResponse[None].fail(404, "post not found")
    """

    code: int = 200
    message: str = ""
    result: T | None = None

    @classmethod
    def ok(cls, result: T, message: str = "") -> ApiResponse[T]:
        return cls(code=200, message=message, result=result)

    @classmethod
    def fail(cls, code: int, message: str) -> ApiResponse[T]:
        return cls(code=code, message=message, result=None)
