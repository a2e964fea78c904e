import json
import secrets
from typing import Any, List, Optional

from loguru import logger

from hookified.constants import API_PREFIX, APP_URL
from hookified.db import db_client
from hookified.db.models import HookModel
from hookified.enums import HookStatus, TriggerType
from hookified.services.cron.job_manager import CronJobManager
from hookified.services.execution.lifecycle import toggle_target
from hookified.services.hooks.errors import (
    HookAccessDenied,
    HookEngineError,
    HookNotFound,
    InvalidActionConfig,
    InvalidTriggerConfig,
)
from hookified.services.onchain import engine as onchain
from hookified.services.plugins.registry import PluginRegistry, plugin_registry
from hookified.utils.signatures import SIGNATURE_PREFIX, compute_signature, generate_secret
from hookified.utils.time import isoformat

EXAMPLE_WEBHOOK_BODY = '{"event": "test", "data": {"message": "Hello from webhook"}}'


def _coerce_order(value: Any) -> int:
    """Integer execution order from an int or a base-10 string."""
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, (int, str)):
        return int(value)
    raise ValueError(value)


class HookService:
    """Hook management: validation, persistence and external registration."""

    def __init__(
        self,
        registry: Optional[PluginRegistry] = None,
        job_manager: Optional[CronJobManager] = None,
        onchain_engine: Optional[onchain.OnchainEngine] = None,
    ):
        self.registry = registry or plugin_registry
        self.job_manager = job_manager or CronJobManager()
        self.onchain_engine = onchain_engine or onchain.onchain_engine

    async def get_owned_hook(self, hook_id: str, user_id: int) -> HookModel:
        hook = await db_client.get_hook(hook_id)
        if hook is None:
            raise HookNotFound(f"Hook {hook_id} not found")
        if hook.user_id != user_id:
            raise HookAccessDenied("You do not have access to this hook")
        return hook

    # -- validation ---------------------------------------------------------

    def _validate_trigger(self, trigger_type: TriggerType, config: dict) -> None:
        result = self.registry.validate_trigger(trigger_type, config)
        if not result.is_valid:
            raise InvalidTriggerConfig(
                f"Trigger validation failed: {', '.join(result.errors)}", errors=result.errors
            )
        self.registry.parse_trigger_config(trigger_type, config)

    def _prepare_actions(self, actions: Any) -> List[dict]:
        """Validate action blocks, filling in missing ids and orders."""
        if not isinstance(actions, list) or not actions:
            raise InvalidActionConfig("At least one action is required")

        prepared = []
        errors = []
        for index, action in enumerate(actions):
            if not isinstance(action, dict):
                errors.append(f"Action {index + 1}: Invalid action block")
                continue
            block = {
                **action,
                "id": action.get("id") or f"action_{secrets.token_hex(4)}",
                "config": action.get("config") or {},
            }
            try:
                order = action.get("order")
                block["order"] = _coerce_order(index if order is None else order)
            except ValueError:
                errors.append(f"Action {index + 1}: Order must be an integer")
                continue
            result = self.registry.validate_action(block.get("type"), block["config"])
            if not result.is_valid:
                errors.extend(f"Action {index + 1}: {e}" for e in result.errors)
                continue
            prepared.append(block)

        if errors:
            raise InvalidActionConfig(
                f"Action validation failed: {', '.join(errors)}", errors=errors
            )

        for block in prepared:
            self.registry.parse_action_block(block)
        return sorted(prepared, key=lambda b: b["order"])

    # -- operations ---------------------------------------------------------

    async def create_hook(
        self,
        user_id: int,
        name: str,
        trigger_type: str,
        trigger_config: Optional[dict],
        actions: List[dict],
        description: Optional[str] = None,
    ) -> HookModel:
        try:
            kind = TriggerType(trigger_type)
        except ValueError:
            raise InvalidTriggerConfig(f"Unknown trigger type: {trigger_type}")

        config = dict(trigger_config or {})
        if kind == TriggerType.WEBHOOK and "secret" not in config:
            config["secret"] = generate_secret()

        self._validate_trigger(kind, config)
        prepared = self._prepare_actions(actions)

        hook = await db_client.create_hook(
            user_id=user_id,
            name=name,
            trigger_type=kind.value,
            trigger_config=config,
            actions=prepared,
            description=description,
        )

        try:
            await self._register_external(hook)
        except HookEngineError:
            logger.error(f"External registration failed for hook {hook.id}, removing it")
            await db_client.delete_hook(hook.id)
            raise

        return await db_client.get_hook(hook.id)

    async def _register_external(self, hook: HookModel) -> None:
        if hook.trigger_type == TriggerType.CRON.value:
            config = hook.trigger_config
            if (config.get("timezone") or "UTC") != "UTC":
                logger.warning(
                    f"Hook {hook.id} schedule is in {config['timezone']}; "
                    "the scheduler evaluates jobs in UTC"
                )
            await self.job_manager.create_job(hook.id, config["cronExpression"])
        elif hook.trigger_type == TriggerType.ONCHAIN.value:
            await self.onchain_engine.register(hook)

    async def update_hook(
        self,
        hook_id: str,
        user_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        trigger_type: Optional[str] = None,
        trigger_config: Optional[dict] = None,
        actions: Optional[List[dict]] = None,
    ) -> HookModel:
        hook = await self.get_owned_hook(hook_id, user_id)
        kind = TriggerType(hook.trigger_type)

        if trigger_type is not None and trigger_type != hook.trigger_type:
            raise InvalidTriggerConfig("Trigger type cannot be changed after creation")

        fields: dict[str, Any] = {}
        if name is not None:
            fields["name"] = name
        if description is not None:
            fields["description"] = description

        old_config = hook.trigger_config or {}
        config_changed = False
        if trigger_config is not None:
            config = dict(trigger_config)
            if kind == TriggerType.WEBHOOK and "secret" not in config:
                config["secret"] = old_config.get("secret")
            self._validate_trigger(kind, config)
            config_changed = config != old_config
            fields["trigger_config"] = config

        if actions is not None:
            fields["actions"] = self._prepare_actions(actions)

        updated = await db_client.update_hook(hook_id, **fields)

        if config_changed and kind == TriggerType.CRON:
            if config["cronExpression"] != old_config.get("cronExpression"):
                await self.job_manager.update_schedule(hook_id, config["cronExpression"])
        elif config_changed and kind == TriggerType.ONCHAIN:
            old_webhook_id = hook.alchemy_webhook_id
            try:
                await self.onchain_engine.register(updated)
            except HookEngineError:
                await db_client.update_hook(hook_id, trigger_config=old_config)
                raise
            await self.onchain_engine.unregister(hook, webhook_id=old_webhook_id)
            updated = await db_client.get_hook(hook_id)

        logger.info(f"Updated hook {hook_id}: {sorted(fields)}")
        return updated

    async def delete_hook(self, hook_id: str, user_id: int) -> None:
        hook = await self.get_owned_hook(hook_id, user_id)

        if hook.trigger_type == TriggerType.CRON.value:
            try:
                await self.job_manager.delete_job(hook_id)
            except HookEngineError as e:
                logger.warning(f"Failed to delete cron job for hook {hook_id}: {e}")
        elif hook.trigger_type == TriggerType.ONCHAIN.value:
            await self.onchain_engine.unregister(hook)

        await db_client.delete_hook(hook_id)

    async def toggle_hook(self, hook_id: str, user_id: int, is_active: bool) -> HookModel:
        hook = await self.get_owned_hook(hook_id, user_id)
        target = toggle_target(hook, is_active)

        if hook.trigger_type == TriggerType.CRON.value:
            if is_active:
                status = await self.job_manager.get_job_status(hook_id)
                if status.exists:
                    await self.job_manager.resume_job(hook_id)
                else:
                    await self.job_manager.create_job(
                        hook_id, hook.trigger_config["cronExpression"]
                    )
            else:
                await self.job_manager.pause_job(hook_id)
        elif (
            hook.trigger_type == TriggerType.ONCHAIN.value
            and is_active
            and not hook.alchemy_webhook_id
        ):
            await self.onchain_engine.register(hook)

        await db_client.set_hook_status(hook_id, target, is_active=is_active)
        return await db_client.get_hook(hook_id)

    async def regenerate_secret(self, hook_id: str, user_id: int) -> HookModel:
        hook = await self.get_owned_hook(hook_id, user_id)
        if hook.trigger_type != TriggerType.WEBHOOK.value:
            raise InvalidTriggerConfig("Only webhook hooks have a secret")

        config = {**(hook.trigger_config or {}), "secret": generate_secret()}
        logger.info(f"Regenerated webhook secret for hook {hook_id}")
        return await db_client.update_hook(hook_id, trigger_config=config)

    async def webhook_details(self, hook_id: str, user_id: int) -> dict:
        hook = await self.get_owned_hook(hook_id, user_id)
        if hook.trigger_type != TriggerType.WEBHOOK.value:
            raise InvalidTriggerConfig("Hook is not configured for webhook triggers")

        url = f"{APP_URL}{API_PREFIX}/webhooks/{hook.id}"
        secret = (hook.trigger_config or {}).get("secret")

        curl = [f"curl -X POST {url}", '-H "Content-Type: application/json"']
        if secret:
            signature = compute_signature(secret, EXAMPLE_WEBHOOK_BODY.encode("utf-8"))
            curl.append(f'-H "x-webhook-signature: {SIGNATURE_PREFIX}{signature}"')
        curl.append(f"-d '{EXAMPLE_WEBHOOK_BODY}'")

        last_run = await db_client.get_latest_hook_run(hook.id)
        return {
            "webhookUrl": url,
            "secret": secret,
            "isActive": hook.is_active and hook.status == HookStatus.ACTIVE.value,
            "lastRun": (
                {
                    "id": last_run.id,
                    "status": last_run.status,
                    "triggeredAt": isoformat(last_run.triggered_at),
                    "completedAt": isoformat(last_run.completed_at),
                    "error": last_run.error,
                }
                if last_run
                else None
            ),
            "examplePayload": json.loads(EXAMPLE_WEBHOOK_BODY),
            "curlExample": " \\\n  ".join(curl),
        }


hook_service = HookService()
