"""
Dense sibling ordering.

Units, lessons, sections and exercises carry an ``order`` that is kept as
1..n among rows sharing the same parent. :class:`SiblingOrdering` applies the
shifts needed when a row is inserted, moved, removed or when the whole list
is reordered. Callers commit; the shifts run as bulk UPDATE statements in the
caller's transaction.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Type

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from lingua_learn.core.errors import ContentRuleError


class SiblingOrdering:
    """Ordering rules for ``model`` rows grouped by ``parent_field``."""

    def __init__(self, model: Type[SQLModel], parent_field: str, label: str) -> None:
        self.model = model
        self.parent_field = parent_field
        self.label = label

    def _parent_column(self):
        return getattr(self.model, self.parent_field)

    async def next_order(self, session: AsyncSession, parent_id: int) -> int:
        result = await session.execute(
            select(func.max(self.model.order)).where(self._parent_column() == parent_id)
        )
        return (result.scalar() or 0) + 1

    async def siblings(self, session: AsyncSession, parent_id: int) -> List[Any]:
        result = await session.execute(
            select(self.model).where(self._parent_column() == parent_id).order_by(self.model.order, self.model.id)
        )
        return list(result.scalars().all())

    async def _shift(self, session: AsyncSession, parent_id: int, delta: int, *conditions: Any) -> None:
        stmt = (
            update(self.model)
            .where(self._parent_column() == parent_id, *conditions)
            .values(order=self.model.order + delta)
            .execution_options(synchronize_session="fetch")
        )
        await session.execute(stmt)

    async def place(self, session: AsyncSession, entity: Any, order: Optional[int] = None) -> None:
        """Give a new row its position.

        Without ``order`` the row goes last; with an explicit order the
        siblings at or after that position move down by one first.
        """
        parent_id = getattr(entity, self.parent_field)
        if order is None:
            entity.order = await self.next_order(session, parent_id)
            return
        await self._shift(session, parent_id, 1, self.model.order >= order)
        entity.order = order

    async def move(self, session: AsyncSession, entity: Any, new_order: int) -> None:
        """Move an existing row to ``new_order`` among its siblings."""
        old_order = entity.order
        if new_order == old_order:
            return
        parent_id = getattr(entity, self.parent_field)
        others = self.model.id != entity.id
        if new_order > old_order:
            await self._shift(session, parent_id, -1, others, self.model.order > old_order, self.model.order <= new_order)
        else:
            await self._shift(session, parent_id, 1, others, self.model.order >= new_order, self.model.order < old_order)
        entity.order = new_order

    async def close_gap(self, session: AsyncSession, parent_id: int, removed_order: int) -> None:
        """Pull later siblings up after the row at ``removed_order`` was deleted."""
        await self._shift(session, parent_id, -1, self.model.order > removed_order)

    async def reorder(self, session: AsyncSession, parent_id: int, ids: Sequence[int]) -> List[Any]:
        """Assign orders 1..n following ``ids``.

        Raises:
            ContentRuleError: ``ids`` repeats an id or names a row that is not
                a child of ``parent_id``.
        """
        siblings = await self.siblings(session, parent_id)
        by_id = {row.id: row for row in siblings}
        if len(set(ids)) != len(ids) or not set(ids) <= set(by_id):
            raise ContentRuleError(f"Invalid {self.label} IDs provided.")
        for position, row_id in enumerate(ids, start=1):
            by_id[row_id].order = position
        await session.flush()
        return sorted(siblings, key=lambda row: (row.order, row.id))
