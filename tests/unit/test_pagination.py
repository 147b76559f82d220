"""Unit tests for pagination arithmetic and page fetching."""

import asyncio

import pytest

from mdb_docs.documents.role import Role
from mdb_docs.exceptions import InvalidArgumentError, PersistenceError
from mdb_docs.pagination import Page, calc_start_entry, count_max_page, fetch_page


class StalledListRepository:
    """Count fails at once; the list read waits until cancelled."""

    def __init__(self):
        self.list_cancelled = False

    async def count(self, *scope):
        await asyncio.sleep(0)
        raise PersistenceError("count failed", operation="count", collection="roles")

    def list(self, limit, offset, *scope):
        return self._stream()

    async def _stream(self):
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.list_cancelled = True
            raise
        yield


@pytest.fixture
async def roles(in_memory_repository):
    repo = in_memory_repository(Role)
    for i in range(7):
        await repo.insert(Role(identifier=f"role-{i}"), principal=1)
    return repo


class TestArithmetic:
    @pytest.mark.parametrize(
        "count,size,expected",
        [(0, 10, 1), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 5, 5), (7, 0, 1)],
    )
    def test_count_max_page(self, count, size, expected):
        assert count_max_page(count, size) == expected

    def test_calc_start_entry(self):
        assert calc_start_entry(1, 10) == 0
        assert calc_start_entry(3, 10) == 20

    @pytest.mark.parametrize("page,size", [(0, 10), (-1, 10), (1, -1)])
    def test_invalid(self, page, size):
        with pytest.raises(InvalidArgumentError):
            calc_start_entry(page, size)


class TestFetchPage:
    async def test_middle_page(self, roles):
        page = await fetch_page(roles, 2, 3)

        assert isinstance(page, Page)
        assert [r.identifier for r in page.entries] == ["role-3", "role-4", "role-5"]
        assert page.count == 7
        assert page.max_page == 3
        assert page.page == 2
        assert page.size == 3

    async def test_past_last_page_is_empty(self, roles):
        page = await fetch_page(roles, 9, 3)
        assert page.entries == []
        assert page.count == 7

    async def test_unbounded(self, roles):
        page = await fetch_page(roles, 1, 0)
        assert len(page.entries) == 7
        assert page.max_page == 1

    async def test_scope_applied_to_both_reads(self, roles):
        page = await fetch_page(roles, 1, 2, lambda r: r.identifier.endswith(("1", "2", "3")))
        assert page.count == 3
        assert page.max_page == 2
        assert [r.identifier for r in page.entries] == ["role-1", "role-2"]

    async def test_empty_repository(self, in_memory_repository):
        page = await fetch_page(in_memory_repository(Role), 1, 10)
        assert page.entries == []
        assert page.count == 0
        assert page.max_page == 1

    async def test_failed_count_cancels_list(self):
        repo = StalledListRepository()

        with pytest.raises(PersistenceError):
            await fetch_page(repo, 1, 10)

        assert repo.list_cancelled is True


class TestWindowProperties:
    async def test_consecutive_windows_are_disjoint_and_ordered(self, roles):
        everything = [r.id async for r in roles.list(0, 0)]
        first = [r.id async for r in roles.list(2, 1)]
        second = [r.id async for r in roles.list(2, 3)]

        assert not set(first) & set(second)
        assert first + second == everything[1:5]

    async def test_count_matches_unbounded_list(self, roles):
        assert await roles.count() == len([r async for r in roles.list(0, 0)])

    def test_negative_offset_fails_on_call(self, roles):
        with pytest.raises(InvalidArgumentError):
            roles.list(10, -1)
