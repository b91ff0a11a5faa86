"""SQLAlchemy Core finders for entities stored in relational tables.

SQLAlchemy Core (not ORM) keeps the lookup a single ``SELECT`` by primary
key; the host application owns the engine and its lifetime::

    finder = TableFinder(engine, posts_table, Post)
    locator.register(Post, finder)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sqlalchemy import Table, select
from sqlalchemy.engine import Engine


class TableFinder:
    """Find one row by primary key and build an entity from it.

    Args:
        engine: Engine used for each lookup (one short connection per call).
        table: Table holding the entities.
        factory: Called with the row's columns as keyword arguments.
        key: Lookup column name; defaults to the single primary-key column.
    """

    def __init__(
        self,
        engine: Engine,
        table: Table,
        factory: Callable[..., Any],
        *,
        key: str | None = None,
    ) -> None:
        if key is None:
            pk_columns = list(table.primary_key.columns)
            if len(pk_columns) != 1:
                msg = f"Table {table.name!r} needs exactly one primary-key column; pass key="
                raise ValueError(msg)
            key = pk_columns[0].name
        self._engine = engine
        self._table = table
        self._factory = factory
        self._column = table.c[key]

    def __call__(self, model_id: str) -> Any:
        """Return the entity for *model_id*, or None when no row matches."""
        try:
            value = self._column.type.python_type(model_id)
        except (NotImplementedError, TypeError, ValueError):
            value = model_id

        stmt = select(self._table).where(self._column == value)
        with self._engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        if row is None:
            return None
        return self._factory(**dict(row))
