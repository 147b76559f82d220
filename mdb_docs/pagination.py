"""
Page arithmetic and concurrent page fetching.

A page is requested as (page, size) with 1-based pages. The window read is
``list(size, (page - 1) * size, *scope)``; the total comes from
``count(*scope)`` with the same scope, and the two reads run concurrently.
"""

import asyncio
import math
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .documents.base import Document
from .exceptions import InvalidArgumentError
from .repositories.base import Repository

T = TypeVar("T", bound=Document)


@dataclass
class Page(Generic[T]):
    entries: list[T] = field(default_factory=list)
    count: int = 0
    page: int = 1
    max_page: int = 1
    size: int = 0


def count_max_page(count: int, size: int) -> int:
    """
    Number of pages needed for ``count`` documents, never less than 1.

    A size of 0 (unbounded) always yields a single page.
    """
    if size <= 0:
        return 1
    return max(1, math.ceil(count / size))


def calc_start_entry(page: int, size: int) -> int:
    """
    Offset of the first document of ``page``.

    Raises:
        InvalidArgumentError: If ``page`` < 1 or ``size`` < 0
    """
    if page < 1:
        raise InvalidArgumentError(f"page must be >= 1, got {page}", argument="page", value=page)
    if size < 0:
        raise InvalidArgumentError(f"size must be >= 0, got {size}", argument="size", value=size)
    return (page - 1) * size


async def _collect(repository: Repository[T], limit: int, offset: int, scope: tuple) -> list[T]:
    return [doc async for doc in repository.list(limit, offset, *scope)]


async def fetch_page(repository: Repository[T], page: int, size: int, *scope: Any) -> Page[T]:
    """
    Read one page and the total count of ``repository`` concurrently.

    If either read fails, the other is cancelled before the error propagates.

    Example:
        page = await fetch_page(uow.projects, 2, 20, principal, ProjectScope(status="ACTIVE"))
    """
    offset = calc_start_entry(page, size)
    reads = [
        asyncio.ensure_future(repository.count(*scope)),
        asyncio.ensure_future(_collect(repository, size, offset, scope)),
    ]
    try:
        count, entries = await asyncio.gather(*reads)
    except BaseException:
        for read in reads:
            read.cancel()
        await asyncio.gather(*reads, return_exceptions=True)
        raise
    return Page(
        entries=entries,
        count=count,
        page=page,
        max_page=count_max_page(count, size),
        size=size,
    )
