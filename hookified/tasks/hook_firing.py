from loguru import logger

from hookified.services.cron.engine import CronEngine
from hookified.services.execution.hook_executor import hook_executor
from hookified.services.execution.types import TriggerContext
from hookified.services.hooks.errors import HookEngineError


async def execute_hook_firing(ctx, hook_id: str, trigger_context: dict):
    """
    Execute one inbound firing handed off by the API process.

    Failures are logged and not retried; the provider or caller was already
    acknowledged when the firing was queued.

    Args:
        hook_id: The hook to execute
        trigger_context: Serialized TriggerContext
    """
    trigger = TriggerContext.from_dict(trigger_context)
    try:
        result = await hook_executor.execute_hook_by_id(hook_id, trigger)
    except HookEngineError as e:
        logger.warning(f"{trigger.type.value} firing of hook {hook_id} rejected: {e.message}")
        return None
    except Exception:
        logger.exception(f"{trigger.type.value} firing of hook {hook_id} failed")
        return None

    return {"runId": result.run_id, "status": result.status.value}


async def check_cron_hooks(ctx):
    """Polling fallback for CRON hooks whose scheduler job did not fire."""
    return await CronEngine().check_due_hooks()
