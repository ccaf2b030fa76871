"""Query helpers shared by the list endpoints."""

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute


async def count_rows(db: AsyncSession, query: Select) -> int:
    """Total rows a filtered query would return, ignoring order/limit."""
    subquery = query.order_by(None).limit(None).offset(None).subquery()
    result = await db.execute(select(func.count()).select_from(subquery))
    return result.scalar() or 0


async def paginate(
    db: AsyncSession, query: Select, page: int, per_page: int
) -> tuple[list, int]:
    """Run one page of ``query``; returns ``(items, total)``."""
    total = await count_rows(db, query)
    result = await db.execute(query.offset((page - 1) * per_page).limit(per_page))
    return list(result.scalars().all()), total


def contains(column: InstrumentedAttribute, term: str):
    """Case-insensitive substring match."""
    return column.ilike(f"%{term}%")
