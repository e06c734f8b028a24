"""
Dialect-aware SQL helpers.

Production runs on PostgreSQL; the test suite runs on SQLite. The few
constructs that differ between them live here.
"""
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Union

from sqlalchemy import literal_column, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

# strftime patterns equivalent to date_trunc for SQLite
_SQLITE_TRUNC_FORMATS = {
    "hour": "%Y-%m-%d %H:00:00",
    "day": "%Y-%m-%d 00:00:00",
}


def dialect_name(db: AsyncSession) -> str:
    return db.get_bind().dialect.name


def truncate_timestamp(db: AsyncSession, column: Any, unit: str) -> ColumnElement:
    """
    Truncate a timestamp column to ``unit`` ("hour" or "day").

    The unit is rendered as a literal so that the same expression can appear
    in SELECT, GROUP BY and ORDER BY on PostgreSQL.
    """
    if unit not in _SQLITE_TRUNC_FORMATS:
        raise ValueError(f"Unsupported truncation unit: {unit}")

    if dialect_name(db) == "postgresql":
        return func.date_trunc(literal_column(f"'{unit}'"), column)
    return func.strftime(literal_column(f"'{_SQLITE_TRUNC_FORMATS[unit]}'"), column)


def coerce_bucket(value: Union[str, datetime, date, None]) -> Optional[datetime]:
    """Normalise a truncated bucket (datetime on PostgreSQL, text on SQLite) to aware UTC."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    elif not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def insert_or_ignore(db: AsyncSession, model: Any, values: Dict[str, Any]) -> Optional[int]:
    """
    Insert a row unless it violates a unique constraint.

    Runs as a single ``INSERT ... ON CONFLICT DO NOTHING RETURNING id`` so the
    uniqueness check and the write cannot interleave with a concurrent request.

    Returns:
        The new row id, or None if a conflicting row already exists
    """
    insert = postgresql.insert if dialect_name(db) == "postgresql" else sqlite.insert
    stmt = insert(model).values(**values).on_conflict_do_nothing().returning(model.id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()
