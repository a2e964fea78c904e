import time
from typing import Any, Dict, List, Optional

from loguru import logger

from hookified.db import db_client
from hookified.db.models import HookModel, generate_run_id
from hookified.enums import ActionStatus, HookRunStatus, TriggerType
from hookified.services.execution.lifecycle import can_fire
from hookified.services.execution.types import (
    ActionExecutionResult,
    ExecutionContext,
    HookExecutionResult,
    TriggerContext,
)
from hookified.services.execution.variable_context import VariableContextBuilder
from hookified.services.hooks.errors import (
    HookAccessDenied,
    HookEngineError,
    HookNotFireable,
    HookNotFound,
)
from hookified.services.plugins.registry import PluginRegistry, plugin_registry
from hookified.utils.context import reset_run_context, set_run_context
from hookified.utils.template_renderer import render_template
from hookified.utils.time import utc_now


class HookExecutor:
    """Runs one firing of one hook and records exactly one HookRun for it.

    Actions run sequentially in ascending ``order``. The pipeline is
    fail-fast: the first failed action stops the run, and the run error is
    that action's error. Concurrent firings of the same hook are not
    serialized; each gets its own run.
    """

    def __init__(self, registry: PluginRegistry | None = None):
        self.registry = registry or plugin_registry

    async def execute_hook_by_id(
        self,
        hook_id: str,
        trigger: TriggerContext,
        user_id: Optional[int] = None,
    ) -> HookExecutionResult:
        """Load a hook and execute it.

        Raises:
            HookNotFound: if the hook does not exist
            HookAccessDenied: if `user_id` is given and does not own the hook
            HookNotFireable: if the lifecycle gate refuses the firing
        """
        hook = await db_client.get_hook(hook_id)
        if hook is None:
            raise HookNotFound(f"Hook {hook_id} not found")
        if user_id is not None and hook.user_id != user_id:
            raise HookAccessDenied(f"Hook {hook_id} does not belong to user {user_id}")
        return await self.execute_hook(hook, trigger)

    async def execute_hook(
        self, hook: HookModel, trigger: TriggerContext, chain_depth: int = 0
    ) -> HookExecutionResult:
        if not can_fire(hook, trigger.type):
            logger.info(
                f"Skipping {trigger.type.value} firing of hook {hook.id}: "
                f"is_active={hook.is_active} status={hook.status}"
            )
            raise HookNotFireable(f"Hook {hook.id} is not active")

        run_id = generate_run_id()
        tokens = set_run_context(hook.id, run_id)
        try:
            return await self._execute(hook, trigger, run_id, chain_depth)
        finally:
            reset_run_context(tokens)

    async def _execute(
        self, hook: HookModel, trigger: TriggerContext, run_id: str, chain_depth: int
    ) -> HookExecutionResult:
        started = time.monotonic()
        meta: Dict[str, Any] = {
            "triggerContext": trigger.to_dict(),
            "actions": [],
            "totalDuration": 0,
        }
        await db_client.create_hook_run(hook.id, run_id, meta, utc_now())
        logger.info(
            f"Executing hook {hook.id} ({trigger.type.value} firing, "
            f"{len(hook.actions or [])} actions, chain depth {chain_depth})"
        )

        if trigger.type != TriggerType.MANUAL and trigger.type.value != hook.trigger_type:
            error = (
                f"Trigger type {trigger.type.value} does not match hook trigger type "
                f"{hook.trigger_type}"
            )
            logger.error(error)
            return await self._finish(hook, run_id, started, meta, [], error=error)

        scope = VariableContextBuilder(trigger.data, hook.id, run_id)
        context = ExecutionContext(
            hook_id=hook.id,
            user_id=hook.user_id,
            run_id=run_id,
            trigger=trigger,
            variables=scope.get_context(),
            chain_depth=chain_depth,
            run_hook=self._run_chained,
        )

        results: List[ActionExecutionResult] = []
        for index, block in enumerate(hook.sorted_actions):
            result = await self._execute_action(block, context)
            results.append(result)
            scope.add_action_result(index, result)

            if not result.succeeded:
                logger.warning(
                    f"Action {index} ({result.action_type}) failed, stopping run: {result.error}"
                )
                return await self._finish(
                    hook, run_id, started, meta, results, error=result.error, failed_at=index
                )

        return await self._finish(hook, run_id, started, meta, results)

    async def _execute_action(
        self, block: dict, context: ExecutionContext
    ) -> ActionExecutionResult:
        action_id = str(block.get("id") or "")
        action_type = str(block.get("type") or "")
        order = block.get("order")
        started_at = utc_now()

        try:
            rendered = {**block, "config": render_template(block.get("config") or {}, context.variables)}
            action = self.registry.parse_action_block(rendered)
            executor = self.registry.get_executor(action.type)
            return await executor.execute(action.id, action.config, context, order=order)
        except HookEngineError as e:
            error = e.message
            if e.errors:
                error = f"{e.message}: {'; '.join(e.errors)}"
        except Exception as e:
            logger.exception(f"Unexpected error executing action {action_id}")
            error = f"Unexpected error: {e}"

        return ActionExecutionResult(
            action_id=action_id,
            action_type=action_type,
            status=ActionStatus.FAILED,
            started_at=started_at,
            completed_at=utc_now(),
            error=error,
            order=order,
        )

    async def _finish(
        self,
        hook: HookModel,
        run_id: str,
        started: float,
        meta: Dict[str, Any],
        results: List[ActionExecutionResult],
        error: Optional[str] = None,
        failed_at: Optional[int] = None,
    ) -> HookExecutionResult:
        status = HookRunStatus.FAILED if error is not None else HookRunStatus.SUCCESS
        total_duration = int((time.monotonic() - started) * 1000)

        meta = {
            **meta,
            "actions": [r.to_dict() for r in results],
            "totalDuration": total_duration,
        }
        if failed_at is not None:
            meta["failedAt"] = failed_at

        # Failures here propagate: a lost audit record must be visible
        await db_client.complete_hook_run(run_id, status, meta, error=error)
        await db_client.mark_hook_executed(hook.id, utc_now())

        logger.info(f"Hook {hook.id} run finished with {status.value} in {total_duration}ms")
        return HookExecutionResult(
            run_id=run_id,
            status=status,
            total_duration_ms=total_duration,
            actions=results,
            failed_at=failed_at,
            error=error,
        )

    async def _run_chained(
        self, hook_id: str, trigger: TriggerContext, chain_depth: int
    ) -> HookExecutionResult:
        hook = await db_client.get_hook(hook_id)
        if hook is None:
            raise HookNotFound(f"Hook {hook_id} not found")
        return await self.execute_hook(hook, trigger, chain_depth=chain_depth)


hook_executor = HookExecutor()
