"""Page metadata for offset-paged listings."""
from dataclasses import dataclass
from typing import Generic, List, TypeVar

T = TypeVar("T")

MAX_PAGE_SIZE = 100


def effective_page_size(size: int) -> int:
    """Cap the requested size at MAX_PAGE_SIZE. Larger requests are not an error."""
    return min(size, MAX_PAGE_SIZE)


@dataclass(frozen=True)
class PageMetadata:
    total: int
    page: int
    size: int
    total_pages: int
    has_next: bool
    has_previous: bool

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    meta: PageMetadata


def compute_page_metadata(total: int, page: int, size: int) -> PageMetadata:
    """Compute metadata for a 0-based page of the given requested size.

    Pages past the end are valid and simply empty: has_next is False and
    has_previous is True for them.
    """
    size = effective_page_size(size)
    # Integer ceiling division
    total_pages = -(-total // size) if size > 0 else 0
    return PageMetadata(
        total=total,
        page=page,
        size=size,
        total_pages=total_pages,
        has_next=page < total_pages - 1,
        has_previous=page > 0,
    )
