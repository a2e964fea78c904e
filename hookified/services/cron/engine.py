from datetime import datetime
from typing import Optional

from loguru import logger

from hookified.db import db_client
from hookified.enums import HookStatus, TriggerType
from hookified.services.cron.job_manager import CronJobManager
from hookified.services.cron.schedule import is_due, is_valid_expression, resolve_timezone
from hookified.services.execution.hook_executor import HookExecutor, hook_executor
from hookified.services.execution.lifecycle import can_fire, mark_hook_error
from hookified.services.execution.types import HookExecutionResult
from hookified.services.hooks.errors import HookNotFireable, HookNotFound, InvalidTriggerConfig
from hookified.services.triggers.context_builder import build_cron_context
from hookified.utils.time import ensure_utc, utc_now


class CronEngine:
    """Executes CRON hooks, either per scheduler callback or by polling sweep."""

    def __init__(
        self,
        executor: Optional[HookExecutor] = None,
        job_manager: Optional[CronJobManager] = None,
    ):
        self.executor = executor or hook_executor
        self.job_manager = job_manager or CronJobManager()

    async def execute_scheduled(
        self, hook_id: str, now: Optional[datetime] = None
    ) -> HookExecutionResult:
        """Run a CRON hook for one scheduler tick.

        Raises:
            HookNotFound: if the hook does not exist
            InvalidTriggerConfig: if the hook is not a CRON hook or its
                schedule is missing or unparsable (the latter flips it to ERROR)
            HookNotFireable: if the hook is not active
        """
        now = now or utc_now()
        hook = await db_client.get_hook(hook_id)
        if hook is None:
            raise HookNotFound(f"Hook {hook_id} not found")
        if hook.trigger_type != TriggerType.CRON.value:
            raise InvalidTriggerConfig(f"Hook {hook_id} is not a CRON hook")
        if not can_fire(hook, TriggerType.CRON):
            raise HookNotFireable(f"Hook {hook_id} is not active")

        config = hook.trigger_config or {}
        expression = config.get("cronExpression")
        context = build_cron_context(
            expression, config.get("timezone"), now, hook.last_executed_at
        )
        if not is_valid_expression(expression) or resolve_timezone(config.get("timezone")) is None:
            await mark_hook_error(hook_id, f"Unparsable schedule {expression!r}")
            raise InvalidTriggerConfig(f"Invalid cron expression: {expression}")

        return await self.executor.execute_hook(hook, context)

    async def check_due_hooks(self, now: Optional[datetime] = None) -> dict:
        """Polling sweep over every active CRON hook.

        Hooks whose schedule can no longer be parsed are flipped to ERROR.
        One hook failing never stops the sweep.
        """
        now = now or utc_now()
        hooks = await db_client.list_hooks_by_trigger_type(TriggerType.CRON, active_only=True)
        logger.info(f"Checking {len(hooks)} active CRON hooks")

        stats = {"checked": 0, "executed": 0, "errors": 0}
        for hook in hooks:
            stats["checked"] += 1
            config = hook.trigger_config or {}
            expression = config.get("cronExpression")
            timezone = config.get("timezone") or "UTC"

            try:
                due = is_due(
                    expression,
                    timezone,
                    now,
                    last_executed_at=ensure_utc(hook.last_executed_at),
                    reference=ensure_utc(hook.last_checked_at or hook.created_at),
                )
            except (ValueError, TypeError) as e:
                stats["errors"] += 1
                await mark_hook_error(hook.id, f"Unparsable schedule {expression!r}: {e}")
                continue

            if not due:
                await db_client.mark_hook_checked(hook.id, now)
                continue

            try:
                context = build_cron_context(expression, timezone, now, hook.last_executed_at)
                await self.executor.execute_hook(hook, context)
                stats["executed"] += 1
            except Exception as e:
                stats["errors"] += 1
                logger.error(f"Error executing CRON hook {hook.id}: {e}")

        logger.info(
            f"CRON check completed: {stats['executed']} executed, {stats['errors']} errors"
        )
        return stats

    async def drift_report(self) -> dict:
        """Compare scheduler jobs with CRON hooks. Read-only."""
        jobs = await self.job_manager.list_jobs()
        hooks = await db_client.list_hooks_by_trigger_type(TriggerType.CRON)

        hook_ids = {hook.id for hook in hooks}
        job_hook_ids = {job["hookId"] for job in jobs}
        live_hook_ids = {
            hook.id
            for hook in hooks
            if hook.is_active and hook.status == HookStatus.ACTIVE.value
        }

        return {
            "jobs": jobs,
            "orphanedJobs": [job for job in jobs if job["hookId"] not in hook_ids],
            "hooksWithoutJob": sorted(live_hook_ids - job_hook_ids),
        }


cron_engine = CronEngine()
