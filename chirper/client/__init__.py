"""Chirper 客户端数据层：API 网关、查询缓存与乐观更新"""

from chirper.client.api import ApiClient, SessionState
from chirper.client.cache import QueryCache
from chirper.client.errors import ApiRequestError
from chirper.client.mutations import AuthMutations, ChirpMutations, LikeMutations, ProfileMutations
from chirper.client.queries import ChirperQueries, FeedPage
from chirper.client.storage import FileTokenStorage, MemoryTokenStorage, TokenStorage

__all__ = [
    "ApiClient",
    "ApiRequestError",
    "AuthMutations",
    "ChirpMutations",
    "ChirperQueries",
    "FeedPage",
    "FileTokenStorage",
    "LikeMutations",
    "MemoryTokenStorage",
    "ProfileMutations",
    "QueryCache",
    "SessionState",
    "TokenStorage",
]
