from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from hookified.db.base_client import BaseDBClient
from hookified.db.models import UserModel


class UserClient(BaseDBClient):
    async def get_or_create_user_by_provider_id(self, provider_id: str) -> UserModel:
        async with self.async_session() as session:
            result = await session.execute(
                select(UserModel).where(UserModel.provider_id == provider_id)
            )
            user = result.scalars().first()
            if user is not None:
                return user

            user = UserModel(provider_id=provider_id)
            session.add(user)
            try:
                await session.commit()
            except IntegrityError:
                # Concurrent request created the same user
                await session.rollback()
                result = await session.execute(
                    select(UserModel).where(UserModel.provider_id == provider_id)
                )
                return result.scalars().one()

            await session.refresh(user)
            logger.info(f"Created user {user.id} for provider id {provider_id}")
            return user

    async def get_user_by_id(self, user_id: int) -> Optional[UserModel]:
        async with self.async_session() as session:
            result = await session.execute(
                select(UserModel).where(UserModel.id == user_id)
            )
            return result.scalar_one_or_none()
