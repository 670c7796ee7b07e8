"""资料模块 - 业务逻辑层"""

from uuid import UUID

from sqlalchemy.exc import IntegrityError

from .exceptions import ProfileNotFoundError, UsernameAlreadyExistsError, conflict_from_integrity_error
from .repository import ProfileRepository
from .schemas import ProfilePublic, ProfileResponse, ProfileUpdate


class ProfileService:
    def __init__(self, repository: ProfileRepository) -> None:
        self.repository = repository

    async def get_public(self, profile_id: UUID) -> ProfilePublic:
        profile = await self.repository.get_by_id(profile_id)
        if not profile:
            raise ProfileNotFoundError(profile_id=profile_id)
        return ProfilePublic.model_validate(profile)

    async def get_public_by_username(self, username: str) -> ProfilePublic:
        profile = await self.repository.get_by_username(username)
        if not profile:
            raise ProfileNotFoundError(username=username)
        return ProfilePublic.model_validate(profile)

    async def get_me(self, profile_id: UUID) -> ProfileResponse:
        """当前登录用户的资料（含邮箱）"""
        profile = await self.repository.get_by_id(profile_id)
        if not profile:
            raise ProfileNotFoundError(profile_id=profile_id)
        return ProfileResponse.model_validate(profile)

    async def update_me(self, profile_id: UUID, data: ProfileUpdate) -> ProfileResponse:
        """部分更新；改用户名时先查重，并发冲突由唯一约束兜底"""
        values = data.model_dump(exclude_unset=True, exclude_none=True)

        new_username = values.get("username")
        if new_username is not None:
            owner = await self.repository.get_by_username(new_username)
            if owner is not None and owner.id != profile_id:
                raise UsernameAlreadyExistsError(new_username)

        try:
            profile = await self.repository.update(profile_id, values)
        except IntegrityError as exc:
            raise conflict_from_integrity_error(exc, new_username, None) from exc

        if profile is None:
            raise ProfileNotFoundError(profile_id=profile_id)
        return ProfileResponse.model_validate(profile)
