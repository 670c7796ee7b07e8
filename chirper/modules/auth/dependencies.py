"""认证模块 - 依赖注入"""

from typing import Annotated

from fastapi import Depends

from chirper.modules.profile.dependencies import get_profile_repository
from chirper.modules.profile.repository import ProfileRepository
from .service import AuthService


def get_auth_service(
    profiles: Annotated[ProfileRepository, Depends(get_profile_repository)],
) -> AuthService:
    return AuthService(profiles)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
