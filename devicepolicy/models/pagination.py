"""
Pagination models for page-numbered listings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ..types import DEFAULT_POLICIES_PER_PAGE

T = TypeVar("T")


class ListParams(BaseModel):
    """
    Caller-supplied page constraints.

    Leaving both `page` and `per_page` unset (or below 1) asks for every page
    to be fetched and merged. Setting either one fetches exactly one page.
    """

    model_config = ConfigDict(frozen=True)

    page: int | None = None
    per_page: int | None = None

    @property
    def auto_paginate(self) -> bool:
        return not ((self.page or 0) >= 1 or (self.per_page or 0) >= 1)

    @property
    def effective_per_page(self) -> int:
        if self.per_page is not None and self.per_page >= 1:
            return self.per_page
        return DEFAULT_POLICIES_PER_PAGE

    @property
    def start_page(self) -> int | None:
        """First page to request; ``None`` leaves `page` out of the query."""
        if self.page is not None and self.page >= 1:
            return self.page
        return None


class ResultInfo(BaseModel):
    """The ``result_info`` block of a listing response."""

    model_config = ConfigDict(extra="ignore")

    page: int = 0
    per_page: int = 0
    count: int = 0
    total_count: int = 0
    total_pages: int = 0


@dataclass(frozen=True, slots=True)
class PageCursor:
    """Next page to request, or `done` once the listing is exhausted."""

    page: int | None = None
    done: bool = False

    @classmethod
    def start(cls, params: ListParams) -> PageCursor:
        return cls(page=params.start_page)

    def advance(self, info: ResultInfo) -> PageCursor:
        """Cursor following the page described by `info`."""
        current = info.page if info.page >= 1 else (self.page or 1)
        if current < info.total_pages:
            return PageCursor(page=current + 1)
        return PageCursor(page=None, done=True)


class PaginatedResponse(BaseModel, Generic[T]):
    """One page, or several merged pages, of results."""

    data: list[T] = Field(default_factory=list)
    result_info: ResultInfo = Field(default_factory=ResultInfo)

    @property
    def has_next(self) -> bool:
        return not PageCursor().advance(self.result_info).done

    def __len__(self) -> int:
        return len(self.data)
