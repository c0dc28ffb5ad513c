# tutorbook/schemas/common.py
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every endpoint."""

    success: bool = True
    message: str | None = None
    count: int | None = None
    data: T | None = None
    errors: list[Any] | None = None


class RequestModel(BaseModel):
    """Request bodies accept both ``teacherId`` and ``teacher_id``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def ok(data: Any = None, message: str | None = None, *, with_count: bool = False) -> dict:
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    if with_count and data is not None:
        body["count"] = len(data)
    return body


def fail(message: str, errors: list[Any] | None = None) -> dict:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body
