"""Hook lifecycle rules: which firings are allowed and how status moves."""

from loguru import logger

from hookified.db import db_client
from hookified.db.models import HookModel
from hookified.enums import HookStatus, TriggerType
from hookified.services.hooks.errors import InvalidLifecycleTransition


def can_fire(hook: HookModel, source: TriggerType) -> bool:
    """Whether a firing from `source` may execute the hook.

    Manual firings bypass the gate so an owner can retry a hook that is
    paused or in ERROR. Every other source needs an active hook in ACTIVE
    status.
    """
    if source == TriggerType.MANUAL:
        return True
    return bool(hook.is_active) and hook.status == HookStatus.ACTIVE.value


def toggle_target(hook: HookModel, is_active: bool) -> HookStatus:
    """Status a user toggle moves the hook to.

    Raises:
        InvalidLifecycleTransition: when pausing a hook that is in ERROR
    """
    if is_active:
        return HookStatus.ACTIVE
    if hook.status == HookStatus.ERROR.value:
        raise InvalidLifecycleTransition(
            "Hook is in ERROR; re-activate it after fixing its configuration"
        )
    return HookStatus.PAUSED


async def mark_hook_error(hook_id: str, reason: str) -> None:
    """Flip a hook to ERROR after a configuration-fatal failure.

    Only the system enters ERROR, and only a user toggle leaves it.
    """
    logger.error(f"Marking hook {hook_id} as ERROR: {reason}")
    await db_client.set_hook_status(hook_id, HookStatus.ERROR)
