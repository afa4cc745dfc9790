"""
ProjectHub Backend: Generic Repository
======================================

What:  Filtered, ordered, paginated reads over one ORM model.
How:   `find_many` accepts the option dicts produced by
       `projecthub.pagination.get_offset_options` / `get_cursor_options`
       (`skip`, `take`, `cursor`), so routes can pass them straight through:

           rows = await repo.find_many(db, where={"user_id": uid},
                                       **get_cursor_options(cursor, limit))

Cursor semantics:
    The result starts AT the cursor row in the requested ordering; `skip=1`
    then drops it. Orderings always end with `id` so rows with equal sort
    keys have a stable position. An unknown cursor yields an empty list.

    For order (c1 DESC, c2 DESC, id DESC) and cursor values (v1, v2, vid) the
    window condition is:

        c1 < v1
        OR (c1 = v1 AND c2 < v2)
        OR (c1 = v1 AND c2 = v2 AND id <= vid)
"""

import time
from typing import Any, Generic, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.database import Base
from projecthub.logger import log

ModelT = TypeVar("ModelT", bound=Base)

# (column name, "asc" | "desc")
OrderBy = Sequence[Tuple[str, str]]


class Repository(Generic[ModelT]):
    """Read helper bound to a single model class with a string `id` column."""

    def __init__(self, model: Type[ModelT]) -> None:
        self.model = model

    @property
    def name(self) -> str:
        return self.model.__name__

    # ── Query building ────────────────────────────────────────────────────

    def _column(self, name: str):
        try:
            return getattr(self.model, name)
        except AttributeError:
            raise ValueError(f"{self.name} has no column '{name}'") from None

    def _ordering(self, order_by: Optional[OrderBy]) -> List[Tuple[str, bool]]:
        """Normalized (column, descending) pairs, always ending with id."""
        pairs: List[Tuple[str, bool]] = []
        for name, direction in order_by or ():
            direction = direction.lower()
            if direction not in ("asc", "desc"):
                raise ValueError(f"Invalid sort direction '{direction}'")
            pairs.append((name, direction == "desc"))

        if not any(name == "id" for name, _ in pairs):
            # Tie-breaker follows the direction of the last sort key
            pairs.append(("id", pairs[-1][1] if pairs else False))
        return pairs

    def _where(self, where: Optional[Mapping[str, Any]]) -> list:
        return [self._column(name) == value for name, value in (where or {}).items()]

    def _cursor_condition(self, ordering: List[Tuple[str, bool]], anchor: ModelT):
        clauses = []
        equal_so_far: list = []
        for index, (name, descending) in enumerate(ordering):
            column = self._column(name)
            value = getattr(anchor, name)
            last = index == len(ordering) - 1
            if last:
                beyond = column <= value if descending else column >= value
            else:
                beyond = column < value if descending else column > value
            clauses.append(and_(*equal_so_far, beyond))
            equal_so_far.append(column == value)
        return or_(*clauses)

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get(self, db: AsyncSession, record_id: str) -> Optional[ModelT]:
        return await db.get(self.model, record_id)

    async def find_many(
        self,
        db: AsyncSession,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[OrderBy] = None,
        skip: int = 0,
        take: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> List[ModelT]:
        """Rows matching `where` (column equality), ordered and windowed."""
        started = time.perf_counter()
        ordering = self._ordering(order_by)

        query = select(self.model).where(*self._where(where))

        if cursor is not None:
            anchor = await self.get(db, cursor)
            if anchor is None:
                return []
            query = query.where(self._cursor_condition(ordering, anchor))

        query = query.order_by(
            *(
                self._column(name).desc() if descending else self._column(name).asc()
                for name, descending in ordering
            )
        )
        if skip:
            query = query.offset(skip)
        if take is not None:
            query = query.limit(take)

        result = await db.execute(query)
        rows = list(result.scalars().all())

        log.log_slow_query(f"{self.name}.find_many", (time.perf_counter() - started) * 1000)
        return rows

    async def count(self, db: AsyncSession, where: Optional[Mapping[str, Any]] = None) -> int:
        query = select(func.count()).select_from(self.model).where(*self._where(where))
        result = await db.execute(query)
        return result.scalar_one()
