"""数据库配置 - 连接池资源句柄与 ORM 基类"""

import time
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from loguru import logger
from sqlalchemy import DateTime, MetaData, event
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from uuid_utils.compat import uuid7

from chirper.config import get_settings

settings = get_settings()

# 命名约定（Alembic 自动生成迁移友好）
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utc_now() -> datetime:
    """返回当前 UTC 时间（aware datetime）"""
    return datetime.now(timezone.utc)


class Base(AsyncAttrs, DeclarativeBase):
    """
    ORM 基类

    特性：
    - UUIDv7 主键（时间有序，分布式友好）
    - created_at 时间戳（带时区，应用层 UTC）
    """

    metadata = MetaData(naming_convention=convention)

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid7)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
    )


class UpdatedAtMixin:
    """可变实体的 updated_at 字段"""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
    )


def _engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db.pool_size,
            max_overflow=settings.db.max_overflow,
            pool_timeout=settings.db.pool_timeout,
            pool_recycle=3600,
        )
    return options


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite 默认不校验外键"""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _install_query_logging(engine: AsyncEngine) -> None:
    """记录每条 SQL 的耗时（DEBUG）与失败（ERROR）"""
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _before(conn, cursor, statement, parameters, context, executemany) -> None:
        conn.info.setdefault("query_start", []).append(time.perf_counter())

    @event.listens_for(sync_engine, "after_cursor_execute")
    def _after(conn, cursor, statement, parameters, context, executemany) -> None:
        started = conn.info["query_start"].pop()
        logger.debug(
            "Database query executed in {:.1f}ms: {}",
            (time.perf_counter() - started) * 1000,
            " ".join(statement.split()),
        )

    @event.listens_for(sync_engine, "handle_error")
    def _error(context) -> None:
        conn = context.connection
        if conn is not None and conn.info.get("query_start"):
            conn.info["query_start"].pop()
        logger.error(
            "Database query error: {} | {}",
            context.original_exception,
            " ".join((context.statement or "").split()),
        )


class Database:
    """连接池资源句柄：启动时 connect，关闭时 disconnect"""

    def __init__(self) -> None:
        self.engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def sessionmaker(self) -> async_sessionmaker[AsyncSession]:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not connected")
        return self._sessionmaker

    async def connect(self, url: str | None = None) -> None:
        """创建连接池"""
        if self.engine is not None:
            return
        url = url or settings.database_url
        self.engine = create_async_engine(url, **_engine_options(url))
        _install_query_logging(self.engine)
        if url.startswith("sqlite"):
            _enable_sqlite_foreign_keys(self.engine)
        self._sessionmaker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("Database pool created ({})", self.engine.url.render_as_string(hide_password=True))

    async def disconnect(self) -> None:
        """关闭连接池"""
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self._sessionmaker = None
        logger.info("Database pool closed")

    def session(self) -> AsyncSession:
        return self.sessionmaker()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """事务包装：正常退出提交，异常回滚"""
        async with self.sessionmaker() as session, session.begin():
            yield session

    async def create_all(self) -> None:
        """建表（开发/测试用，迁移不在本服务范围内）"""
        if self.engine is None:
            raise RuntimeError("Database is not connected")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)


database = Database()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """数据库会话依赖，自动管理事务"""
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_database() -> None:
    """启动时获取连接池，按配置建表"""
    await database.connect()
    if settings.auto_create_schema:
        await database.create_all()


async def close_database() -> None:
    """关闭连接池"""
    await database.disconnect()
