from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
import logging

from sqlalchemy import event, text, create_engine, Engine, Result, CursorResult
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from sqlalchemy.orm import sessionmaker, Session

import config
from models.base import Base

"""
Imports of these models are needed to correctly create tables in the database.
For more information see https://stackoverflow.com/questions/7478403/sqlalchemy-classes-across-files
"""
from models.user import User
from models.product import Product
from models.cart_line import CartLine

logger = logging.getLogger(__name__)

_ASYNC_DRIVERS = ("aiosqlite", "asyncpg", "aiomysql", "asyncmy", "psycopg_async")


def is_async_url(url: str) -> bool:
    return make_url(url).get_driver_name() in _ASYNC_DRIVERS


def _ensure_sqlite_folder(url: str) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database and parsed.database != ":memory:":
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


def build_engine(url: str, echo: bool = False) -> AsyncEngine | Engine:
    """
    Create an engine for the given URL.

    Async drivers get an AsyncEngine, anything else a plain Engine; the session
    helpers below accept sessions from either.
    """
    _ensure_sqlite_folder(url)
    is_sqlite = make_url(url).get_backend_name() == "sqlite"
    connect_args = {"timeout": config.DB_BUSY_TIMEOUT} if is_sqlite else {}
    if is_async_url(url):
        new_engine = create_async_engine(url, echo=echo, connect_args=connect_args)
        sync_engine = new_engine.sync_engine
    else:
        new_engine = create_engine(url, echo=echo, connect_args=connect_args)
        sync_engine = new_engine
    if is_sqlite:
        event.listen(sync_engine, "connect", set_sqlite_pragma)
    return new_engine


def build_session_maker(bind) -> async_sessionmaker | sessionmaker:
    if isinstance(bind, AsyncEngine):
        return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)
    return sessionmaker(bind, expire_on_commit=False)


# Engine and session maker are created lazily so importing this module has no side effects
engine = None
session_maker = None


def get_engine():
    global engine, session_maker
    if engine is None:
        engine = build_engine(config.DB_URL, echo=config.DB_ECHO)
        session_maker = build_session_maker(engine)
    return engine


@asynccontextmanager
async def get_db_session(maker: async_sessionmaker | sessionmaker | None = None) -> AsyncSession | Session:
    """
    Scoped session for exactly one unit of work.

    Every service call receives the yielded session explicitly; the session is
    closed when the block exits, whatever happened inside it.
    """
    if maker is None:
        get_engine()
        maker = session_maker
    session = maker()
    try:
        yield session
    finally:
        if isinstance(session, AsyncSession):
            await session.close()
        else:
            session.close()


async def session_execute(stmt, session: AsyncSession | Session, params: dict | None = None) -> Result[Any] | CursorResult[Any]:
    if isinstance(session, AsyncSession):
        query_result = await session.execute(stmt, params)
        return query_result
    else:
        query_result = session.execute(stmt, params)
        return query_result


async def session_flush(session: AsyncSession | Session) -> None:
    if isinstance(session, AsyncSession):
        await session.flush()
    else:
        session.flush()


async def session_commit(session: AsyncSession | Session) -> None:
    if isinstance(session, AsyncSession):
        await session.commit()
    else:
        session.commit()


async def session_rollback(session: AsyncSession | Session) -> None:
    if isinstance(session, AsyncSession):
        await session.rollback()
    else:
        session.rollback()


def set_sqlite_pragma(dbapi_connection, connection_record):
    # Cascading deletes from products/users to cart lines rely on this
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def create_db_and_tables(bind=None) -> None:
    bind = bind or get_engine()
    if isinstance(bind, AsyncEngine):
        async with bind.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    else:
        Base.metadata.create_all(bind=bind)
    logger.info(f"Tables verified: {', '.join(Base.metadata.tables.keys())}")


async def check_storage_health(session: AsyncSession | Session) -> dict:
    """
    Probe the storage layer with a trivial query.

    Returns:
        Dictionary with 'status' ('healthy' or 'unhealthy') and a message
    """
    try:
        result = await session_execute(text("SELECT 1"), session)
        result.scalar()
        return {'status': 'healthy', 'message': 'Database connection is working'}
    except SQLAlchemyError as e:
        logger.error(f"Storage health check failed: {str(e)}")
        return {'status': 'unhealthy', 'message': str(e)}
