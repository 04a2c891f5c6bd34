# app/schemas/common.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class ApiModel(BaseModel):
    """JSON goes out in camelCase, snake_case is still accepted on input"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# Response envelopes
class ApiResponse(ApiModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class PaginatedResponse(ApiModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    count: int
    total: int
    pages: int
    current_page: int
    data: List[T] = []
