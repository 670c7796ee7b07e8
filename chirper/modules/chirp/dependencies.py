"""Chirp 模块 - 依赖注入"""

from typing import Annotated

from fastapi import Depends

from chirper.dependencies import DBSession
from .repository import ChirpRepository
from .service import ChirpService


def get_chirp_repository(db: DBSession) -> ChirpRepository:
    return ChirpRepository(db)


def get_chirp_service(
    repository: Annotated[ChirpRepository, Depends(get_chirp_repository)],
) -> ChirpService:
    return ChirpService(repository)


ChirpServiceDep = Annotated[ChirpService, Depends(get_chirp_service)]
