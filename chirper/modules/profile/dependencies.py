"""资料模块 - 依赖注入"""

from typing import Annotated

from fastapi import Depends

from chirper.dependencies import DBSession
from .repository import ProfileRepository
from .service import ProfileService


def get_profile_repository(db: DBSession) -> ProfileRepository:
    return ProfileRepository(db)


def get_profile_service(
    repository: Annotated[ProfileRepository, Depends(get_profile_repository)],
) -> ProfileService:
    return ProfileService(repository)


ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
