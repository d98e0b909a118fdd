from typing import Optional, List, Generic, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


# Paginated response wrapper, used by the paginated list endpoints
class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    limit: int
    total_pages: int


# Unpaginated list wrapper (blocked slots)
class ListResponse(BaseModel, Generic[T]):
    data: List[T]
    total: int


# Error responses
class ErrorResponse(BaseModel):
    detail: str


class QueueConflictResponse(ErrorResponse):
    code: str
    position: int


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    database: str
    version: Optional[str] = None
