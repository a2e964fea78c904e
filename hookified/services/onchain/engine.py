import hashlib
import hmac
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from hookified.constants import (
    ALCHEMY_AUTH_TOKEN,
    ALCHEMY_DASHBOARD_API_URL,
    ALCHEMY_WEBHOOK_SECRET,
    API_PREFIX,
    APP_URL,
)
from hookified.db import db_client
from hookified.db.models import HookModel
from hookified.enums import TriggerType
from hookified.schemas.configs import OnchainTriggerConfig
from hookified.services.execution.lifecycle import can_fire
from hookified.services.execution.types import TriggerContext
from hookified.services.hooks.errors import (
    ConfigurationError,
    ExternalRegistrationError,
    HookNotFound,
    Unauthorized,
)
from hookified.services.onchain.graphql_query import build_query_for_events
from hookified.services.onchain.networks import alchemy_network_for
from hookified.services.triggers.context_builder import build_onchain_contexts

REQUEST_TIMEOUT = 30.0


class OnchainEngine:
    """Keeps ONCHAIN hooks subscribed with the log-notification provider."""

    def __init__(
        self,
        auth_token: Optional[str] = None,
        api_url: Optional[str] = None,
        app_url: Optional[str] = None,
        signing_secret: Optional[str] = None,
    ):
        self.auth_token = auth_token if auth_token is not None else ALCHEMY_AUTH_TOKEN
        self.api_url = (api_url or ALCHEMY_DASHBOARD_API_URL).rstrip("/")
        self.app_url = (app_url or APP_URL).rstrip("/")
        self.signing_secret = (
            signing_secret if signing_secret is not None else ALCHEMY_WEBHOOK_SECRET
        )

    def notification_url(self, hook_id: str) -> str:
        return f"{self.app_url}{API_PREFIX}/webhooks/onchain/{hook_id}"

    async def register(self, hook: HookModel) -> str:
        """Create a provider subscription for the hook and store its id.

        Raises:
            ConfigurationError: if the provider is not configured or the
                trigger config cannot be expressed as a subscription
            ExternalRegistrationError: if the provider rejects the request
        """
        if not self.auth_token:
            raise ConfigurationError("ALCHEMY_AUTH_TOKEN is not configured")

        config = OnchainTriggerConfig.model_validate(hook.trigger_config or {})
        events = config.monitored_events()
        if not events:
            raise ConfigurationError("No onchain events configured")
        try:
            network = alchemy_network_for(config.chain_id)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        body = {
            "network": network,
            "webhook_type": "GRAPHQL",
            "webhook_url": self.notification_url(hook.id),
            "graphql_query": build_query_for_events(events),
            "skip_empty_messages": True,
        }

        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
                response = await client.post(
                    f"{self.api_url}/create-webhook",
                    json=body,
                    headers={"X-Alchemy-Token": self.auth_token},
                )
                response.raise_for_status()
                webhook_id = response.json()["data"]["id"]
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to register provider webhook for hook {hook.id}: {e}")
            raise ExternalRegistrationError(
                "Webhook registration with the provider failed", errors=[str(e)]
            ) from e

        await db_client.update_hook(hook.id, alchemy_webhook_id=webhook_id)
        logger.info(f"Registered provider webhook {webhook_id} for hook {hook.id} on {network}")
        return webhook_id

    async def unregister(self, hook: HookModel, webhook_id: Optional[str] = None) -> bool:
        """Remove the provider subscription. Best effort: failures are logged."""
        webhook_id = webhook_id or hook.alchemy_webhook_id
        if not webhook_id:
            return False
        if not self.auth_token:
            logger.warning(f"Cannot remove provider webhook {webhook_id}: no auth token")
            return False

        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
                response = await client.delete(
                    f"{self.api_url}/delete-webhook",
                    params={"webhook_id": webhook_id},
                    headers={"X-Alchemy-Token": self.auth_token},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(
                f"Failed to remove provider webhook {webhook_id} for hook {hook.id}: {e}"
            )
            return False

        logger.info(f"Removed provider webhook {webhook_id} for hook {hook.id}")
        return True

    def verify_notification(self, body: bytes, signature: Optional[str]) -> None:
        """Check the provider signature when a signing key is configured.

        Raises:
            Unauthorized: if the signature is missing or wrong
        """
        if not self.signing_secret:
            return
        expected = hmac.new(
            self.signing_secret.encode("utf-8"), body, hashlib.sha256
        ).hexdigest()
        if not signature or not hmac.compare_digest(expected, signature):
            raise Unauthorized("Invalid provider signature")

    async def accept_notification(
        self, hook_id: str, payload: Dict[str, Any]
    ) -> List[TriggerContext]:
        """Turn a provider notification into the firings to dispatch.

        An inactive hook, or a notification without matching logs, yields
        no firings.

        Raises:
            HookNotFound: if the hook does not exist or is not ONCHAIN
        """
        hook = await db_client.get_hook(hook_id)
        if hook is None or hook.trigger_type != TriggerType.ONCHAIN.value:
            raise HookNotFound(f"Onchain hook {hook_id} not found")

        if not can_fire(hook, TriggerType.ONCHAIN):
            logger.warning(f"Ignoring provider notification for inactive hook {hook_id}")
            return []

        contexts = build_onchain_contexts(payload)
        logger.info(f"Provider notification for hook {hook_id} carried {len(contexts)} logs")
        return contexts


onchain_engine = OnchainEngine()
