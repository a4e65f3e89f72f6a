"""Datas rows in a SQL database and the HTTP routes that expose them."""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import FastAPI, Response
from fastapi.responses import JSONResponse
from sqlalchemy import (
    BigInteger,
    Column,
    Integer,
    MetaData,
    SmallInteger,
    Table,
    Text,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine

from .errors import BadRequestError, DatabaseError, NotFoundError, PoolError, install_error_handler
from .models import Datas, DatasPayload

DATAS_SCHEMA = "items"
BACKEND = "Postgres"
ROW_NOT_FOUND = "no rows returned by a query that expected to return at least one row"
SQLX_MISSING = "Invalid ID, didn't find the requested data"
POSTGRES_MISSING = "Not here btw"

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


def _default_table() -> Table:
    return Table(
        "datas",
        MetaData(),
        Column("id", Integer, primary_key=True),
        Column("name", Text, nullable=False),
        Column("flags", BigInteger, nullable=False),
        Column("sys", SmallInteger, nullable=False),
        schema=DATAS_SCHEMA,
    )


@contextmanager
def _database_errors() -> Iterator[None]:
    try:
        yield
    except sa_exc.TimeoutError as exc:
        raise PoolError(str(exc), backend=BACKEND) from exc
    except sa_exc.SQLAlchemyError as exc:
        raise DatabaseError(exc, backend=BACKEND) from exc


class DatasRepository:
    """Reads and writes rows of the datas table through a SQLAlchemy engine."""

    def __init__(self, engine: Engine, table: Table | None = None) -> None:
        self._engine = engine
        self._table = table if table is not None else _default_table()

    def _select(self):
        t = self._table
        return select(t.c.id, t.c.name, t.c.flags, t.c.sys)

    @staticmethod
    def _to_datas(row) -> Datas:
        return Datas(id=row[0], name=row[1], flags=row[2], sys=row[3])

    def all(self) -> list[Datas]:
        """Return every row."""
        with _database_errors(), self._engine.connect() as conn:
            rows = conn.execute(self._select()).all()
        return [self._to_datas(row) for row in rows]

    def get(self, datas_id: int) -> Datas | None:
        """Return the row with this id, or None."""
        with _database_errors(), self._engine.connect() as conn:
            row = conn.execute(self._select().where(self._table.c.id == datas_id)).first()
        return None if row is None else self._to_datas(row)

    def create(self, payload: DatasPayload) -> int:
        """Insert a row and return its new id."""
        statement = insert(self._table).values(
            name=payload.name, flags=payload.flags, sys=payload.sys
        )
        with _database_errors(), self._engine.begin() as conn:
            result = conn.execute(statement)
            return int(result.inserted_primary_key[0])

    def _update(self, datas_id: int, payload: DatasPayload) -> int:
        statement = (
            update(self._table)
            .where(self._table.c.id == datas_id)
            .values(name=payload.name, flags=payload.flags, sys=payload.sys)
        )
        with _database_errors(), self._engine.begin() as conn:
            return conn.execute(statement).rowcount

    def edit(self, datas_id: int, payload: DatasPayload) -> None:
        """Overwrite a row; a missing id changes nothing."""
        self._update(datas_id, payload)

    def edit_returning(self, datas_id: int, payload: DatasPayload) -> int:
        """Overwrite a row and return its id; a missing id is a database error."""
        if self._update(datas_id, payload) == 0:
            raise DatabaseError(ROW_NOT_FOUND, backend=BACKEND)
        return datas_id

    def destroy(self, datas_id: int) -> None:
        """Delete a row; a missing id changes nothing."""
        with _database_errors(), self._engine.begin() as conn:
            conn.execute(delete(self._table).where(self._table.c.id == datas_id))


def _parse_id(text: str) -> int:
    if _ID_PATTERN.fullmatch(text) is None or not _I32_MIN <= int(text) <= _I32_MAX:
        raise BadRequestError(f"Invalid URL: Cannot parse `{text}` to a `i32`")
    return int(text)


def _base_app(repository: DatasRepository, missing: str) -> FastAPI:
    app = FastAPI()
    install_error_handler(app)

    @app.get("/api/datas", response_model=list[Datas])
    def get_datas() -> list[Datas]:
        return repository.all()

    @app.get("/api/datas/{datas_id}", response_model=Datas)
    def get_data(datas_id: str) -> Datas:
        found = repository.get(_parse_id(datas_id))
        if found is None:
            raise NotFoundError(missing)
        return found

    @app.delete("/api/datas/{datas_id}")
    def destroy_datas(datas_id: str) -> Response:
        repository.destroy(_parse_id(datas_id))
        return Response(status_code=200)

    return app


def create_sqlx_app(repository: DatasRepository) -> FastAPI:
    """Service where creation answers 201 with no body and edits return the id."""
    app = _base_app(repository, SQLX_MISSING)

    @app.post("/api/datas")
    def create_datas(payload: DatasPayload) -> Response:
        repository.create(payload)
        return Response(status_code=201)

    @app.put("/api/datas/{datas_id}")
    def edit_datas(datas_id: str, payload: DatasPayload) -> JSONResponse:
        return JSONResponse(repository.edit_returning(_parse_id(datas_id), payload))

    return app


def create_postgres_app(repository: DatasRepository) -> FastAPI:
    """Service where creation returns the new id and edits answer 200 with no body."""
    app = _base_app(repository, POSTGRES_MISSING)

    @app.post("/api/datas")
    def create_datas(payload: DatasPayload) -> JSONResponse:
        return JSONResponse(repository.create(payload), status_code=201)

    @app.put("/api/datas/{datas_id}")
    def edit_datas(datas_id: str, payload: DatasPayload) -> Response:
        repository.edit(_parse_id(datas_id), payload)
        return Response(status_code=200)

    return app