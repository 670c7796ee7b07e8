"""查询缓存

键为元组，按前缀匹配（("chirps",) 匹配所有 chirp 列表）。缓存是反范式的：
同一条 chirp 的点赞数既在点赞统计里，也在每个包含它的信息流页里。
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from chirper.client.errors import ApiRequestError

QueryKey = tuple[Any, ...]
Fetcher = Callable[[], Awaitable[Any]]

# 这些状态重试也不会成功
NO_RETRY_STATUSES = frozenset({401, 403, 404})


@dataclass
class QueryEntry:
    data: Any = None
    updated_at: float | None = None
    is_invalidated: bool = False
    stale_time: float = 0.0
    fetcher: Fetcher | None = None
    task: asyncio.Task | None = None
    error: BaseException | None = None

    @property
    def is_fetching(self) -> bool:
        return self.task is not None and not self.task.done()


def should_retry(error: BaseException) -> bool:
    return not (isinstance(error, ApiRequestError) and error.status in NO_RETRY_STATUSES)


class QueryCache:
    def __init__(
        self,
        *,
        retry: int = 3,
        retry_delay: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.retry = retry
        self.retry_delay = retry_delay
        self._clock = clock
        self._entries: dict[QueryKey, QueryEntry] = {}

    @staticmethod
    def _matches(key: QueryKey, prefix: QueryKey, exact: bool) -> bool:
        if exact:
            return key == prefix
        return key[: len(prefix)] == prefix

    def find(self, prefix: QueryKey, *, exact: bool = False) -> list[tuple[QueryKey, QueryEntry]]:
        return [
            (key, entry)
            for key, entry in self._entries.items()
            if self._matches(key, prefix, exact)
        ]

    def get_entry(self, key: QueryKey) -> QueryEntry | None:
        return self._entries.get(key)

    def get_query_data(self, key: QueryKey) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry else None

    def set_query_data(self, key: QueryKey, value: Any) -> Any:
        """写入缓存；value 为可调用对象时按 updater(旧值) 计算新值"""
        entry = self._entries.setdefault(key, QueryEntry())
        entry.data = value(entry.data) if callable(value) else value
        entry.updated_at = self._clock()
        entry.is_invalidated = False
        entry.error = None
        return entry.data

    def set_queries_data(
        self,
        prefix: QueryKey,
        updater: Callable[[Any], Any],
        *,
        exact: bool = False,
    ) -> list[QueryKey]:
        """对所有匹配且已有数据的条目应用 updater，返回被更新的键"""
        updated = []
        for key, entry in self.find(prefix, exact=exact):
            if entry.data is None:
                continue
            self.set_query_data(key, updater)
            updated.append(key)
        return updated

    def is_stale(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.updated_at is None or entry.is_invalidated:
            return True
        return self._clock() - entry.updated_at >= entry.stale_time

    async def _fetch_with_retry(self, key: QueryKey, fetcher: Fetcher) -> Any:
        failures = 0
        while True:
            try:
                return await fetcher()
            except Exception as exc:
                failures += 1
                if failures > self.retry or not should_retry(exc):
                    raise
                logger.debug("Query {} failed ({}), retry {}/{}", key, exc, failures, self.retry)
                await asyncio.sleep(self.retry_delay * failures)

    async def _run(self, key: QueryKey, entry: QueryEntry, fetcher: Fetcher) -> Any:
        try:
            data = await self._fetch_with_retry(key, fetcher)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            entry.error = exc
            raise
        entry.data = data
        entry.updated_at = self._clock()
        entry.is_invalidated = False
        entry.error = None
        return data

    async def fetch_query(self, key: QueryKey, fetcher: Fetcher, *, stale_time: float = 0.0) -> Any:
        """读取查询：新鲜数据直接返回，否则拉取；同一个键同时只有一个请求在途"""
        entry = self._entries.setdefault(key, QueryEntry())
        entry.fetcher = fetcher
        entry.stale_time = stale_time

        if not entry.is_fetching:
            if not self.is_stale(key):
                return entry.data
            entry.task = asyncio.create_task(self._run(key, entry, fetcher))

        task = entry.task
        await asyncio.wait([task])
        if task.cancelled():
            # 被乐观更新取消，返回当前缓存
            return entry.data
        return task.result()

    async def cancel_queries(self, prefix: QueryKey, *, exact: bool = False) -> None:
        """取消在途请求，避免旧响应覆盖乐观写入"""
        tasks = []
        for _, entry in self.find(prefix, exact=exact):
            if entry.is_fetching:
                entry.task.cancel()
                tasks.append(entry.task)
            entry.task = None
        if tasks:
            await asyncio.wait(tasks)

    async def invalidate_queries(
        self,
        prefix: QueryKey,
        *,
        exact: bool = False,
        refetch: bool = True,
    ) -> None:
        """标记过期并重新拉取注册过 fetcher 的条目"""
        matched = self.find(prefix, exact=exact)
        for _, entry in matched:
            entry.is_invalidated = True
        if not refetch:
            return

        await self.cancel_queries(prefix, exact=exact)
        active = [(key, entry) for key, entry in matched if entry.fetcher is not None]
        results = await asyncio.gather(
            *(self.fetch_query(key, entry.fetcher, stale_time=entry.stale_time) for key, entry in active),
            return_exceptions=True,
        )
        for (key, _), result in zip(active, results):
            if isinstance(result, Exception):
                logger.warning("Refetch of {} failed: {}", key, result)

    def remove_queries(self, prefix: QueryKey, *, exact: bool = False) -> None:
        for key, entry in self.find(prefix, exact=exact):
            if entry.is_fetching:
                entry.task.cancel()
            del self._entries[key]

    def clear(self) -> None:
        self.remove_queries(())
