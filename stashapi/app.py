"""Command-line entry point that starts one of the HTTP services."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable, Sequence

import uvicorn
from dotenv import find_dotenv, load_dotenv
from redis import asyncio as aioredis
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from .datas_api import DatasRepository, create_postgres_app, create_sqlx_app
from .redis_api import ItemStore, create_app

logger = logging.getLogger(__name__)

HOST = "0.0.0.0"
DEFAULT_PORT = 3000
INVALID_MODE_EXIT = 0xA0
DATAS_BANNER = "🚀 Server listening on http://localhost:3000/api/datas"


def _prepare(env_name: str) -> str:
    """Set up logging for a server run and return the required setting."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)s %(filename)s:%(lineno)d %(message)s",
    )
    value = os.environ.get(env_name)
    if value is None:
        raise RuntimeError(f"{env_name} must be set")
    return value


def _engine(url: str, **options) -> Engine:
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return create_engine(url, **options)


def run_redis() -> None:
    """Serve items stored in Redis on the port named by PORT."""
    redis = aioredis.from_url(_prepare("REDIS_URL"))
    app = create_app(ItemStore(redis))
    port = os.environ.get("PORT", str(DEFAULT_PORT))
    logger.info("🚀 Server listening on %s:%s", HOST, port)
    uvicorn.run(app, host=HOST, port=int(port))


def run_sqlx() -> None:
    """Serve datas rows through a pooled engine."""
    engine = _engine(_prepare("DATABASE_URL"))
    app = create_sqlx_app(DatasRepository(engine))
    logger.info(DATAS_BANNER)
    uvicorn.run(app, host=HOST, port=DEFAULT_PORT)


def run_postgres() -> None:
    """Serve datas rows, returning new ids on creation."""
    engine = _engine(_prepare("DATABASE_URL"))
    app = create_postgres_app(DatasRepository(engine))
    logger.info(DATAS_BANNER)
    uvicorn.run(app, host=HOST, port=DEFAULT_PORT)


def run_single_postgres() -> None:
    """Serve datas rows over a single shared database connection."""
    engine = _engine(
        _prepare("DATABASE_URL"), poolclass=QueuePool, pool_size=1, max_overflow=0
    )
    app = create_postgres_app(DatasRepository(engine))
    uvicorn.run(app, host=HOST, port=DEFAULT_PORT)


_MODES: dict[str, Callable[[], None]] = {
    "redis": run_redis,
    "sqlx": run_sqlx,
    "postgres": run_postgres,
    "postgres2": run_single_postgres,
}


def main(argv: Sequence[str] | None = None) -> None:
    """Start the service named by the first argument."""
    load_dotenv(find_dotenv(usecwd=True))
    args = list(sys.argv[1:] if argv is None else argv)
    mode = args[0] if args else ""
    runner = _MODES.get(mode)
    if runner is None:
        print(f"Invalid mode: {mode}. Use 'client' or 'redis'/'postgres'.", file=sys.stderr)
        raise SystemExit(INVALID_MODE_EXIT)
    try:
        runner()
    except Exception as err:  # noqa: BLE001 - any startup failure is reported, not raised
        print(f"Server failed: {err}", file=sys.stderr)
    print("Server closed.")


if __name__ == "__main__":
    main()