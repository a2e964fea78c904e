from hookified.db import db_client
from hookified.enums import ActionType, HookStatus, TriggerType
from hookified.schemas.configs import ChainActionConfig
from hookified.services.execution.executors.base import ActionFailed, BaseActionExecutor
from hookified.services.execution.types import ExecutionContext, TriggerContext

MAX_CHAIN_DEPTH = 5


class ChainExecutor(BaseActionExecutor):
    action_type = ActionType.CHAIN
    # A chained run has its own retries per action
    max_attempts = 1

    async def run(self, config: ChainActionConfig, context: ExecutionContext) -> dict:
        target_id = config.target_hook_id
        if target_id == context.hook_id:
            raise ActionFailed("A hook cannot chain to itself")
        if context.chain_depth + 1 > MAX_CHAIN_DEPTH:
            raise ActionFailed(f"Maximum chain depth of {MAX_CHAIN_DEPTH} exceeded")
        if context.run_hook is None:
            raise ActionFailed("Chained execution is not available in this context")

        target = await db_client.get_hook(target_id)
        if target is None or target.user_id != context.user_id:
            raise ActionFailed(f"Target hook {target_id} not found")
        if not target.is_active or target.status != HookStatus.ACTIVE.value:
            raise ActionFailed(f"Target hook {target_id} is not active")

        trigger = TriggerContext(
            type=TriggerType.MANUAL,
            data={
                **context.trigger.data,
                "chainedFrom": context.hook_id,
                "parentRunId": context.run_id,
                "chainDepth": context.chain_depth + 1,
            },
        )
        result = await context.run_hook(target_id, trigger, context.chain_depth + 1)

        output = {"targetHookId": target_id, "runId": result.run_id, "status": result.status.value}
        if not result.succeeded:
            raise ActionFailed(
                f"Chained hook {target_id} failed (run {result.run_id}): {result.error}"
            )
        return output
