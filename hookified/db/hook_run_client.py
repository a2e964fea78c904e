"""Database client for hook run audit records."""

from datetime import UTC, datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, select, update

from hookified.db.base_client import BaseDBClient
from hookified.db.models import HookModel, HookRunModel
from hookified.enums import HookRunStatus


class HookRunClient(BaseDBClient):
    """Runs are created PENDING and completed exactly once."""

    async def create_hook_run(
        self, hook_id: str, run_id: str, meta: dict, triggered_at: datetime
    ) -> HookRunModel:
        async with self.async_session() as session:
            run = HookRunModel(
                id=run_id,
                hook_id=hook_id,
                status=HookRunStatus.PENDING.value,
                triggered_at=triggered_at,
                meta=meta,
            )
            session.add(run)
            await session.commit()
            await session.refresh(run)
            return run

    async def complete_hook_run(
        self,
        run_id: str,
        status: HookRunStatus,
        meta: dict,
        error: Optional[str] = None,
    ) -> None:
        """Move a PENDING run to its terminal state.

        Raises:
            RuntimeError: if the run does not exist or is already terminal
        """
        async with self.async_session() as session:
            result = await session.execute(
                update(HookRunModel)
                .where(
                    HookRunModel.id == run_id,
                    HookRunModel.status == HookRunStatus.PENDING.value,
                )
                .values(
                    status=status.value,
                    completed_at=datetime.now(UTC),
                    meta=meta,
                    error=error,
                )
            )
            await session.commit()
            if result.rowcount == 0:
                raise RuntimeError(f"Hook run {run_id} is missing or already completed")

    async def get_hook_run(self, run_id: str) -> Optional[HookRunModel]:
        async with self.async_session() as session:
            result = await session.execute(
                select(HookRunModel).where(HookRunModel.id == run_id)
            )
            return result.scalar_one_or_none()

    async def get_hook_run_for_user(
        self, run_id: str, user_id: int
    ) -> Optional[HookRunModel]:
        """Get a run only if its parent hook is owned by the given user."""
        async with self.async_session() as session:
            result = await session.execute(
                select(HookRunModel)
                .join(HookModel, HookModel.id == HookRunModel.hook_id)
                .where(HookRunModel.id == run_id, HookModel.user_id == user_id)
            )
            return result.scalar_one_or_none()

    async def list_hook_runs(
        self, hook_id: str, limit: int, offset: int
    ) -> Tuple[List[HookRunModel], int]:
        """List runs for a hook, newest first.

        Returns:
            Tuple of (page of runs, total number of runs for the hook)
        """
        async with self.async_session() as session:
            total = await session.scalar(
                select(func.count())
                .select_from(HookRunModel)
                .where(HookRunModel.hook_id == hook_id)
            )
            result = await session.execute(
                select(HookRunModel)
                .where(HookRunModel.hook_id == hook_id)
                .order_by(HookRunModel.triggered_at.desc())
                .limit(limit)
                .offset(offset)
            )
            return list(result.scalars().all()), int(total or 0)

    async def get_latest_hook_run(self, hook_id: str) -> Optional[HookRunModel]:
        async with self.async_session() as session:
            result = await session.execute(
                select(HookRunModel)
                .where(HookRunModel.hook_id == hook_id)
                .order_by(HookRunModel.triggered_at.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()
