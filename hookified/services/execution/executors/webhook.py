import httpx

from hookified.enums import ActionType
from hookified.schemas.configs import WebhookActionConfig
from hookified.services.execution.executors.base import (
    BaseActionExecutor,
    raise_for_response,
)
from hookified.services.execution.types import ExecutionContext

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "User-Agent": "Hookified/1.0",
}

# Methods that never carry a request body
_BODYLESS_METHODS = {"GET", "DELETE"}


class WebhookExecutor(BaseActionExecutor):
    action_type = ActionType.WEBHOOK

    async def run(self, config: WebhookActionConfig, context: ExecutionContext) -> dict:
        method = config.method.upper()
        headers = {**DEFAULT_HEADERS, **config.headers}

        request_kwargs = {}
        if method not in _BODYLESS_METHODS:
            body = config.body_template
            if body is None:
                body = context.trigger.payload
            if isinstance(body, str):
                request_kwargs["content"] = body.encode("utf-8")
            else:
                request_kwargs["json"] = body

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.request(
                method=method,
                url=config.webhook_url,
                headers=headers,
                **request_kwargs,
            )

        raise_for_response(response, "Webhook request")

        if "application/json" in response.headers.get("content-type", ""):
            try:
                body = response.json()
            except ValueError:
                body = response.text
        else:
            body = response.text

        return {
            "status": response.status_code,
            "statusText": response.reason_phrase,
            "headers": dict(response.headers),
            "body": body,
            "url": str(response.url),
        }
