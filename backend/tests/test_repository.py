"""
ProjectHub Backend: Repository Tests
====================================

What we test:
    ✅ Equality filters, ordering, skip/take
    ✅ Cursor windows start at the cursor row; skip=1 excludes it
    ✅ Paging through tied sort keys visits every row exactly once
    ✅ Unknown cursors and unknown columns
"""

import pytest

from projecthub.models import Notification
from projecthub.pagination import (
    create_cursor_pagination_result,
    get_cursor_options,
    get_offset_options,
)
from projecthub.services.repository import Repository

NEWEST_FIRST = [("created_at", "desc")]


@pytest.fixture
def repo():
    return Repository(Notification)


class TestFindMany:

    @pytest.mark.asyncio
    async def test_offset_window(self, repo, db_session, user, make_notifications):
        ids = await make_notifications(user, 5)

        rows = await repo.find_many(
            db_session, where={"user_id": user.id}, order_by=NEWEST_FIRST, **get_offset_options(2, 2)
        )
        assert [r.id for r in rows] == ids[2:4]

    @pytest.mark.asyncio
    async def test_where_filters(self, repo, db_session, user, other_user, make_notifications):
        await make_notifications(user, 2)
        theirs = await make_notifications(other_user, 3)
        await make_notifications(other_user, 1, is_read=True)

        rows = await repo.find_many(
            db_session, where={"user_id": other_user.id, "is_read": False}, order_by=NEWEST_FIRST
        )
        assert [r.id for r in rows] == theirs
        assert await repo.count(db_session, where={"user_id": other_user.id}) == 4
        assert await repo.count(db_session) == 6

    @pytest.mark.asyncio
    async def test_ascending_order(self, repo, db_session, user, make_notifications):
        ids = await make_notifications(user, 3)
        rows = await repo.find_many(db_session, order_by=[("created_at", "asc")])
        assert [r.id for r in rows] == list(reversed(ids))

    @pytest.mark.asyncio
    async def test_cursor_starts_at_cursor_row(self, repo, db_session, user, make_notifications):
        ids = await make_notifications(user, 5)

        including = await repo.find_many(db_session, order_by=NEWEST_FIRST, cursor=ids[1], take=2)
        assert [r.id for r in including] == ids[1:3]

        after = await repo.find_many(db_session, order_by=NEWEST_FIRST, cursor=ids[1], skip=1, take=2)
        assert [r.id for r in after] == ids[2:4]

    @pytest.mark.asyncio
    async def test_cursor_pages_cover_all_rows(self, repo, db_session, user, make_notifications):
        ids = await make_notifications(user, 7)

        seen, cursor = [], None
        while True:
            rows = await repo.find_many(
                db_session, where={"user_id": user.id}, order_by=NEWEST_FIRST,
                **get_cursor_options(cursor, 3),
            )
            page = create_cursor_pagination_result(rows, 3)
            seen.extend(r.id for r in page.data)
            if not page.pagination.has_more:
                break
            cursor = page.pagination.next_cursor

        assert seen == ids

    @pytest.mark.asyncio
    async def test_tied_timestamps_use_id_tiebreak(self, repo, db_session, user, make_notifications):
        ids = await make_notifications(user, 6, step=0)

        seen, cursor = [], None
        for _ in range(10):
            rows = await repo.find_many(db_session, order_by=NEWEST_FIRST, **get_cursor_options(cursor, 4))
            page = create_cursor_pagination_result(rows, 4)
            seen.extend(r.id for r in page.data)
            if not page.pagination.has_more:
                break
            cursor = page.pagination.next_cursor

        assert sorted(seen) == sorted(ids)
        assert len(seen) == len(set(seen))
        assert seen == sorted(ids, reverse=True)

    @pytest.mark.asyncio
    async def test_unknown_cursor_is_empty(self, repo, db_session, user, make_notifications):
        await make_notifications(user, 3)
        assert await repo.find_many(db_session, cursor="does-not-exist", take=10) == []

    @pytest.mark.asyncio
    async def test_unknown_column(self, repo, db_session):
        with pytest.raises(ValueError):
            await repo.find_many(db_session, where={"nope": 1})

    @pytest.mark.asyncio
    async def test_bad_direction(self, repo, db_session):
        with pytest.raises(ValueError):
            await repo.find_many(db_session, order_by=[("created_at", "sideways")])
