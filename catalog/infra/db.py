from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Sequence

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from catalog.config import Settings
from catalog.errors import QueryError

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$(\d+)")


def create_db_engine(settings: Settings) -> Engine:
    url = settings.DATABASE_URL
    kwargs: dict[str, Any] = {"pool_pre_ping": True, "future": True}

    if url.startswith("postgresql"):
        kwargs["pool_size"] = settings.DB_POOL_SIZE
        kwargs["connect_args"] = {"sslmode": settings.db_ssl_mode}

    return create_engine(url, **kwargs)


def bind_positional(statement: str, params: Sequence[Any]) -> tuple[str, dict[str, Any]]:
    """
    Troca $1..$n por :p1..:pn (formato do text() do SQLAlchemy).
    """
    used = {int(n) for n in _PLACEHOLDER.findall(statement)}
    if used and max(used) > len(params):
        raise QueryError(
            f"statement references ${max(used)} but only {len(params)} params were given"
        )
    # "$1::int" vira ":p1 ::int"; o text() nao reconhece ":p1" colado em ":"
    sql = _PLACEHOLDER.sub(
        lambda m: f":p{m.group(1)}" + (" " if statement.startswith(":", m.end()) else ""),
        statement,
    )
    binds = {f"p{i}": value for i, value in enumerate(params, start=1)}
    return sql, binds


@dataclass
class QueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0

    def first(self) -> dict[str, Any] | None:
        return self.rows[0] if self.rows else None


class QueryGateway:
    """
    Single entry point to the relational store.

    Every call borrows a connection from the engine pool, runs the statement
    inside its own transaction and gives the connection back, also on error.
    There is no retry: failures surface as QueryError with the driver message.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def query(self, statement: str, params: Sequence[Any] = ()) -> QueryResult:
        sql, binds = bind_positional(statement, params)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(text(sql), binds)
                if result.returns_rows:
                    rows = [dict(r) for r in result.mappings().all()]
                    return QueryResult(rows=rows, rowcount=len(rows))
                return QueryResult(rows=[], rowcount=max(result.rowcount, 0))
        except SQLAlchemyError as e:
            message = str(getattr(e, "orig", None) or e)
            logger.debug("query failed: %s", message)
            raise QueryError(message) from e

    def dispose(self) -> None:
        self.engine.dispose()
