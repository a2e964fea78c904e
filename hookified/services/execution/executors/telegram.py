import re

import httpx
from loguru import logger

from hookified.constants import TELEGRAM_API_BASE_URL, TELEGRAM_BOT_TOKEN
from hookified.enums import ActionType
from hookified.schemas.configs import DEFAULT_TELEGRAM_MESSAGE, TelegramActionConfig
from hookified.services.execution.executors.base import (
    ActionFailed,
    BaseActionExecutor,
    raise_for_response,
)
from hookified.services.execution.types import ExecutionContext

_NUMERIC_CHAT_ID = re.compile(r"^-?\d+$")


class TelegramExecutor(BaseActionExecutor):
    action_type = ActionType.TELEGRAM

    def __init__(self, bot_token: str | None = None, api_base_url: str | None = None):
        self.bot_token = bot_token if bot_token is not None else TELEGRAM_BOT_TOKEN
        self.api_base_url = api_base_url or TELEGRAM_API_BASE_URL

    async def run(self, config: TelegramActionConfig, context: ExecutionContext) -> dict:
        if not self.bot_token:
            raise ActionFailed("Telegram bot token not configured")

        message = config.message_template or DEFAULT_TELEGRAM_MESSAGE

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            chat_id = str(config.chat_id)
            if not _NUMERIC_CHAT_ID.match(chat_id):
                chat_id = await self._resolve_username(client, chat_id)

            response = await client.post(
                self._method_url("sendMessage"),
                json={"chat_id": chat_id, "text": message, "parse_mode": "HTML"},
            )
            raise_for_response(response, "Telegram API request")
            payload = response.json()

        if not payload.get("ok"):
            raise ActionFailed(
                f"Telegram API returned error: {payload.get('description', 'Unknown error')}"
            )

        result = payload["result"]
        return {
            "messageId": result["message_id"],
            "chatId": result["chat"]["id"],
            "timestamp": result["date"],
        }

    async def _resolve_username(self, client: httpx.AsyncClient, username: str) -> str:
        """Resolve an @username or channel name to its numeric chat id."""
        handle = f"@{username.lstrip('@')}"
        response = await client.post(self._method_url("getChat"), json={"chat_id": handle})
        if response.status_code == 200:
            payload = response.json()
            if payload.get("ok") and payload.get("result", {}).get("id"):
                return str(payload["result"]["id"])

        logger.warning(f"Could not resolve Telegram chat {handle}: {response.status_code}")
        raise ActionFailed(
            f'Unable to resolve username "{handle}" to a chat ID. '
            "Please provide the numeric chat ID instead."
        )

    def _method_url(self, method: str) -> str:
        return f"{self.api_base_url}/bot{self.bot_token}/{method}"
