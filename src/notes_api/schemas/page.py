from enum import Enum
from math import ceil
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortOrder(BaseModel):
    property: str
    direction: Direction = Direction.ASC

    @classmethod
    def parse(cls, expression: str) -> "SortOrder":
        """
        Parse a `field,direction` query value (`title,desc`). Direction is
        optional and case-insensitive; anything other than `desc` sorts ascending.
        """
        prop, _, direction = expression.partition(",")
        direction = direction.strip().lower()
        return cls(
            property=prop.strip(),
            direction=Direction.DESC if direction == Direction.DESC.value else Direction.ASC,
        )


class PageRequest(BaseModel):
    page: int = Field(default=0, ge=0)
    size: int = Field(default=20, ge=1)
    sort: list[SortOrder] = []

    @property
    def offset(self) -> int:
        return self.page * self.size


class Page(BaseModel, Generic[T]):
    content: list[T]
    page: int
    size: int
    total_elements: int
    total_pages: int

    @classmethod
    def build(cls, content: list[T], page_request: PageRequest, total_elements: int) -> "Page[T]":
        return cls(
            content=content,
            page=page_request.page,
            size=page_request.size,
            total_elements=total_elements,
            total_pages=ceil(total_elements / page_request.size) if total_elements else 0,
        )
