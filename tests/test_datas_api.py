from http import HTTPStatus

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import BigInteger, Column, Integer, MetaData, SmallInteger, Table, Text, create_engine
from sqlalchemy.pool import StaticPool

from stashapi.datas_api import (
    POSTGRES_MISSING,
    ROW_NOT_FOUND,
    SQLX_MISSING,
    DatasRepository,
    create_postgres_app,
    create_sqlx_app,
)
from stashapi.errors import DatabaseError
from stashapi.models import Datas, DatasPayload


def _table(name="datas"):
    return Table(
        name,
        MetaData(),
        Column("id", Integer, primary_key=True),
        Column("name", Text, nullable=False),
        Column("flags", BigInteger, nullable=False),
        Column("sys", SmallInteger, nullable=False),
    )


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    yield eng
    eng.dispose()


@pytest.fixture
def repository(engine):
    table = _table()
    table.metadata.create_all(engine)
    return DatasRepository(engine, table)


def test_create_and_list_round_trip(repository):
    first = repository.create(DatasPayload(name="alpha", flags=7, sys=1))
    second = repository.create(DatasPayload(name="beta", flags=-9, sys=-2))
    assert first != second
    rows = repository.all()
    assert rows == [
        Datas(id=first, name="alpha", flags=7, sys=1),
        Datas(id=second, name="beta", flags=-9, sys=-2),
    ]


def test_get_missing_returns_none(repository):
    assert repository.get(42) is None


def test_get_existing(repository):
    new_id = repository.create(DatasPayload(name="gamma", flags=2**40, sys=300))
    assert repository.get(new_id) == Datas(id=new_id, name="gamma", flags=2**40, sys=300)


def test_edit_overwrites(repository):
    new_id = repository.create(DatasPayload(name="a", flags=1, sys=1))
    repository.edit(new_id, DatasPayload(name="b", flags=2, sys=3))
    assert repository.get(new_id) == Datas(id=new_id, name="b", flags=2, sys=3)


def test_edit_missing_changes_nothing(repository):
    repository.edit(5, DatasPayload(name="b", flags=2, sys=3))
    assert repository.all() == []


def test_edit_returning_gives_id(repository):
    new_id = repository.create(DatasPayload(name="a", flags=1, sys=1))
    assert repository.edit_returning(new_id, DatasPayload(name="z", flags=0, sys=0)) == new_id
    assert repository.get(new_id).name == "z"


def test_edit_returning_missing_is_database_error(repository):
    with pytest.raises(DatabaseError) as info:
        repository.edit_returning(99, DatasPayload(name="z", flags=0, sys=0))
    assert info.value.backend == "Postgres"
    assert ROW_NOT_FOUND in info.value.message


def test_destroy_removes_row(repository):
    keep = repository.create(DatasPayload(name="keep", flags=0, sys=0))
    gone = repository.create(DatasPayload(name="gone", flags=0, sys=0))
    repository.destroy(gone)
    assert [row.id for row in repository.all()] == [keep]


def test_missing_table_is_database_error(engine):
    repo = DatasRepository(engine, _table("absent"))
    with pytest.raises(DatabaseError) as info:
        repo.all()
    assert info.value.to_response().status_code == HTTPStatus.INTERNAL_SERVER_ERROR


@pytest.fixture
def sqlx_client(repository):
    return TestClient(create_sqlx_app(repository))


@pytest.fixture
def postgres_client(repository):
    return TestClient(create_postgres_app(repository))


def test_sqlx_create_has_empty_body(sqlx_client, repository):
    res = sqlx_client.post("/api/datas", json={"name": "n", "flags": 3, "sys": 4})
    assert res.status_code == HTTPStatus.CREATED
    assert res.content == b""
    assert [(row.name, row.flags, row.sys) for row in repository.all()] == [("n", 3, 4)]


def test_sqlx_get_list_and_one(sqlx_client, repository):
    new_id = repository.create(DatasPayload(name="x", flags=5, sys=6))
    listed = sqlx_client.get("/api/datas")
    assert listed.json() == [{"id": new_id, "name": "x", "flags": 5, "sys": 6}]
    one = sqlx_client.get(f"/api/datas/{new_id}")
    assert one.json() == {"id": new_id, "name": "x", "flags": 5, "sys": 6}


def test_sqlx_get_missing(sqlx_client):
    res = sqlx_client.get("/api/datas/7")
    assert res.status_code == HTTPStatus.NOT_FOUND
    assert res.text == f"Resource not found: {SQLX_MISSING}"


def test_sqlx_edit_returns_id(sqlx_client, repository):
    new_id = repository.create(DatasPayload(name="x", flags=5, sys=6))
    res = sqlx_client.put(f"/api/datas/{new_id}", json={"name": "y", "flags": 1, "sys": 2})
    assert res.status_code == HTTPStatus.OK
    assert res.json() == new_id
    assert repository.get(new_id).name == "y"


def test_sqlx_edit_missing_is_server_error(sqlx_client):
    res = sqlx_client.put("/api/datas/8", json={"name": "y", "flags": 1, "sys": 2})
    assert res.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert res.text == (
        f"Internal Server Error: Database operation failed with error: {ROW_NOT_FOUND}"
    )


def test_sqlx_delete(sqlx_client, repository):
    new_id = repository.create(DatasPayload(name="x", flags=5, sys=6))
    res = sqlx_client.delete(f"/api/datas/{new_id}")
    assert res.status_code == HTTPStatus.OK
    assert res.content == b""
    assert repository.all() == []


def test_bad_id_is_rejected(sqlx_client):
    res = sqlx_client.get("/api/datas/abc")
    assert res.status_code == HTTPStatus.BAD_REQUEST
    assert res.text == "Invalid URL: Cannot parse `abc` to a `i32`"


def test_id_out_of_range_is_rejected(postgres_client):
    res = postgres_client.delete(f"/api/datas/{2**31}")
    assert res.status_code == HTTPStatus.BAD_REQUEST


def test_postgres_create_returns_id(postgres_client, repository):
    res = postgres_client.post("/api/datas", json={"name": "p", "flags": 9, "sys": 1})
    assert res.status_code == HTTPStatus.CREATED
    assert repository.get(res.json()) == Datas(id=res.json(), name="p", flags=9, sys=1)


def test_postgres_get_missing(postgres_client):
    res = postgres_client.get("/api/datas/3")
    assert res.status_code == HTTPStatus.NOT_FOUND
    assert res.text == f"Resource not found: {POSTGRES_MISSING}"


def test_postgres_edit_has_empty_body(postgres_client, repository):
    new_id = repository.create(DatasPayload(name="x", flags=5, sys=6))
    res = postgres_client.put(f"/api/datas/{new_id}", json={"name": "q", "flags": 0, "sys": 0})
    assert res.status_code == HTTPStatus.OK
    assert res.content == b""
    assert repository.get(new_id) == Datas(id=new_id, name="q", flags=0, sys=0)


def test_postgres_edit_missing_still_ok(postgres_client, repository):
    res = postgres_client.put("/api/datas/11", json={"name": "q", "flags": 0, "sys": 0})
    assert res.status_code == HTTPStatus.OK
    assert repository.all() == []


def test_database_failure_through_app(engine):
    client = TestClient(create_postgres_app(DatasRepository(engine, _table("absent"))))
    res = client.get("/api/datas")
    assert res.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert res.text.startswith("Internal Server Error: Database operation failed with error:")