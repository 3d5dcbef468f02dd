# app/schemas/common.py
from pydantic import BaseModel
from typing import Generic, List, TypeVar

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    total_items: int
    total_pages: int
    current_page: int
    size: int
    items: List[T]


class CountResult(BaseModel):
    count: int
