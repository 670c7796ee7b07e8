"""查询键与查询函数"""

from functools import partial
from uuid import UUID

from pydantic import BaseModel

from chirper.client.api import ApiClient
from chirper.client.cache import QueryCache, QueryKey
from chirper.modules.chirp.schemas import ChirpFeedItem
from chirper.modules.like.schemas import LikeStats
from chirper.modules.profile.schemas import ProfilePublic, ProfileResponse
from chirper.schemas.response import Pagination

# 新鲜期（秒）
FEED_STALE_TIME = 60.0
LIKES_STALE_TIME = 30.0
PROFILE_STALE_TIME = 300.0

CHIRPS_KEY: QueryKey = ("chirps",)
LIKES_KEY: QueryKey = ("likes",)
PROFILES_KEY: QueryKey = ("profiles",)
CURRENT_USER_KEY: QueryKey = ("auth", "user")


def feed_key(limit: int = 20, offset: int = 0) -> QueryKey:
    return ("chirps", "feed", limit, offset)


def profile_chirps_key(profile_id: UUID | str, limit: int = 20, offset: int = 0) -> QueryKey:
    return ("chirps", "profile", str(profile_id), limit, offset)


def chirp_key(chirp_id: UUID | str) -> QueryKey:
    return ("chirps", "single", str(chirp_id))


def like_stats_key(chirp_id: UUID | str) -> QueryKey:
    return ("likes", "chirp", str(chirp_id))


def profile_key(profile_id: UUID | str) -> QueryKey:
    return ("profiles", str(profile_id))


def profile_username_key(username: str) -> QueryKey:
    return ("profiles", "username", username)


class FeedPage(BaseModel):
    """一页信息流"""

    chirps: list[ChirpFeedItem]
    pagination: Pagination


class ChirperQueries:
    """带缓存的读操作"""

    def __init__(self, api: ApiClient, cache: QueryCache) -> None:
        self.api = api
        self.cache = cache

    async def _load_feed(self, limit: int, offset: int) -> FeedPage:
        return FeedPage.model_validate(await self.api.get_chirps(limit, offset))

    async def _load_profile_chirps(self, profile_id: UUID | str, limit: int, offset: int) -> FeedPage:
        return FeedPage.model_validate(await self.api.get_profile_chirps(profile_id, limit, offset))

    async def _load_chirp(self, chirp_id: UUID | str) -> ChirpFeedItem:
        return ChirpFeedItem.model_validate(await self.api.get_chirp(chirp_id))

    async def _load_like_stats(self, chirp_id: UUID | str) -> LikeStats:
        return LikeStats.model_validate(await self.api.get_chirp_likes(chirp_id))

    async def _load_profile(self, profile_id: UUID | str) -> ProfilePublic:
        return ProfilePublic.model_validate(await self.api.get_profile(profile_id))

    async def _load_profile_by_username(self, username: str) -> ProfilePublic:
        return ProfilePublic.model_validate(await self.api.get_profile_by_username(username))

    async def _load_current_user(self) -> ProfileResponse:
        return ProfileResponse.model_validate(await self.api.get_my_profile())

    async def feed(self, limit: int = 20, offset: int = 0) -> FeedPage:
        return await self.cache.fetch_query(
            feed_key(limit, offset),
            partial(self._load_feed, limit, offset),
            stale_time=FEED_STALE_TIME,
        )

    async def profile_chirps(self, profile_id: UUID | str, limit: int = 20, offset: int = 0) -> FeedPage:
        return await self.cache.fetch_query(
            profile_chirps_key(profile_id, limit, offset),
            partial(self._load_profile_chirps, profile_id, limit, offset),
            stale_time=FEED_STALE_TIME,
        )

    async def chirp(self, chirp_id: UUID | str) -> ChirpFeedItem:
        return await self.cache.fetch_query(
            chirp_key(chirp_id),
            partial(self._load_chirp, chirp_id),
            stale_time=FEED_STALE_TIME,
        )

    async def like_stats(self, chirp_id: UUID | str) -> LikeStats:
        return await self.cache.fetch_query(
            like_stats_key(chirp_id),
            partial(self._load_like_stats, chirp_id),
            stale_time=LIKES_STALE_TIME,
        )

    async def profile(self, profile_id: UUID | str) -> ProfilePublic:
        return await self.cache.fetch_query(
            profile_key(profile_id),
            partial(self._load_profile, profile_id),
            stale_time=PROFILE_STALE_TIME,
        )

    async def profile_by_username(self, username: str) -> ProfilePublic:
        return await self.cache.fetch_query(
            profile_username_key(username),
            partial(self._load_profile_by_username, username),
            stale_time=PROFILE_STALE_TIME,
        )

    async def current_user(self) -> ProfileResponse | None:
        """未登录时不发请求"""
        if not self.api.is_authenticated:
            return None
        return await self.cache.fetch_query(
            CURRENT_USER_KEY,
            self._load_current_user,
            stale_time=PROFILE_STALE_TIME,
        )
