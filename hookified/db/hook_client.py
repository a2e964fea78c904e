"""Database client for managing hooks."""

from datetime import datetime
from typing import Any, List, Optional

from loguru import logger
from sqlalchemy import delete, select, update

from hookified.db.base_client import BaseDBClient
from hookified.db.models import HookModel, HookRunModel
from hookified.enums import HookStatus, TriggerType


class HookClient(BaseDBClient):
    """Client for hook definitions and their lifecycle fields."""

    async def create_hook(
        self,
        user_id: int,
        name: str,
        trigger_type: str,
        trigger_config: dict,
        actions: list[dict],
        description: Optional[str] = None,
    ) -> HookModel:
        async with self.async_session() as session:
            hook = HookModel(
                user_id=user_id,
                name=name,
                description=description,
                trigger_type=trigger_type,
                trigger_config=trigger_config,
                actions=actions,
                status=HookStatus.ACTIVE.value,
                is_active=True,
            )
            session.add(hook)
            await session.commit()
            await session.refresh(hook)

            logger.info(
                f"Created {trigger_type} hook {hook.id} with {len(actions)} actions "
                f"for user {user_id}"
            )
            return hook

    async def get_hook(self, hook_id: str) -> Optional[HookModel]:
        async with self.async_session() as session:
            result = await session.execute(
                select(HookModel).where(HookModel.id == hook_id)
            )
            return result.scalar_one_or_none()

    async def get_hook_for_user(
        self, hook_id: str, user_id: int
    ) -> Optional[HookModel]:
        """Get a hook only if it is owned by the given user."""
        async with self.async_session() as session:
            result = await session.execute(
                select(HookModel).where(
                    HookModel.id == hook_id, HookModel.user_id == user_id
                )
            )
            return result.scalar_one_or_none()

    async def list_hooks_for_user(self, user_id: int) -> List[HookModel]:
        async with self.async_session() as session:
            result = await session.execute(
                select(HookModel)
                .where(HookModel.user_id == user_id)
                .order_by(HookModel.created_at.desc())
            )
            return list(result.scalars().all())

    async def list_hooks_by_trigger_type(
        self, trigger_type: TriggerType, active_only: bool = False
    ) -> List[HookModel]:
        """List hooks of one trigger type.

        Args:
            trigger_type: The trigger type to filter on
            active_only: If True, only hooks that are active and in ACTIVE status
        """
        async with self.async_session() as session:
            query = select(HookModel).where(
                HookModel.trigger_type == trigger_type.value
            )
            if active_only:
                query = query.where(
                    HookModel.is_active.is_(True),
                    HookModel.status == HookStatus.ACTIVE.value,
                )
            result = await session.execute(query.order_by(HookModel.created_at))
            return list(result.scalars().all())

    async def update_hook(self, hook_id: str, **fields: Any) -> Optional[HookModel]:
        """Update arbitrary hook columns and return the refreshed hook."""
        async with self.async_session() as session:
            if fields:
                await session.execute(
                    update(HookModel).where(HookModel.id == hook_id).values(**fields)
                )
                await session.commit()
            result = await session.execute(
                select(HookModel).where(HookModel.id == hook_id)
            )
            return result.scalar_one_or_none()

    async def set_hook_status(
        self, hook_id: str, status: HookStatus, is_active: Optional[bool] = None
    ) -> None:
        values: dict[str, Any] = {"status": status.value}
        if is_active is not None:
            values["is_active"] = is_active
        async with self.async_session() as session:
            await session.execute(
                update(HookModel).where(HookModel.id == hook_id).values(**values)
            )
            await session.commit()
        logger.info(f"Hook {hook_id} status set to {status.value}")

    async def mark_hook_executed(self, hook_id: str, executed_at: datetime) -> None:
        async with self.async_session() as session:
            await session.execute(
                update(HookModel)
                .where(HookModel.id == hook_id)
                .values(last_executed_at=executed_at, last_checked_at=executed_at)
            )
            await session.commit()

    async def mark_hook_checked(self, hook_id: str, checked_at: datetime) -> None:
        async with self.async_session() as session:
            await session.execute(
                update(HookModel)
                .where(HookModel.id == hook_id)
                .values(last_checked_at=checked_at)
            )
            await session.commit()

    async def delete_hook(self, hook_id: str) -> bool:
        """Delete a hook together with its run history."""
        async with self.async_session() as session:
            await session.execute(
                delete(HookRunModel).where(HookRunModel.hook_id == hook_id)
            )
            result = await session.execute(
                delete(HookModel).where(HookModel.id == hook_id)
            )
            await session.commit()
            deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Deleted hook {hook_id}")
        return deleted
