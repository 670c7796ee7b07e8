"""点赞模块 - 依赖注入"""

from typing import Annotated

from fastapi import Depends

from chirper.dependencies import DBSession
from chirper.modules.chirp.dependencies import get_chirp_repository
from chirper.modules.chirp.repository import ChirpRepository
from .repository import LikeRepository
from .service import LikeService


def get_like_repository(db: DBSession) -> LikeRepository:
    return LikeRepository(db)


def get_like_service(
    repository: Annotated[LikeRepository, Depends(get_like_repository)],
    chirps: Annotated[ChirpRepository, Depends(get_chirp_repository)],
) -> LikeService:
    return LikeService(repository, chirps)


LikeServiceDep = Annotated[LikeService, Depends(get_like_service)]
