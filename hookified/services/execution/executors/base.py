import asyncio
from abc import ABC, abstractmethod
from typing import Any, Sequence

import httpx
from loguru import logger

from hookified.enums import ActionStatus, ActionType
from hookified.services.execution.types import ActionExecutionResult, ExecutionContext
from hookified.utils.time import utc_now

# Per-attempt timeouts, in seconds
EXECUTION_TIMEOUTS = {
    ActionType.TELEGRAM: 10.0,
    ActionType.WEBHOOK: 30.0,
    ActionType.CHAIN: 60.0,
    ActionType.CONTRACT_CALL: 60.0,
}

MAX_ATTEMPTS = 3
RETRY_DELAYS = (1.0, 2.0, 4.0)


class ActionFailed(Exception):
    """An expected, non-retryable action failure (bad response, missing setup)."""


class TransientActionError(ActionFailed):
    """A failure worth retrying: timeouts, transport errors, 429 and 5xx."""


def raise_for_response(response: httpx.Response, label: str) -> None:
    """Translate an HTTP error status into the matching action failure."""
    if response.status_code < 400:
        return
    message = f"{label} failed with status {response.status_code}: {response.reason_phrase}"
    if response.status_code == 429 or response.status_code >= 500:
        raise TransientActionError(message)
    raise ActionFailed(message)


class BaseActionExecutor(ABC):
    """Runs one action kind with a per-attempt timeout and bounded retries.

    Subclasses implement `run`, returning the action output or raising
    `ActionFailed` / `TransientActionError`. `execute` never raises for those;
    they are folded into a FAILED `ActionExecutionResult`.
    """

    action_type: ActionType
    retry_delays: Sequence[float] = RETRY_DELAYS
    max_attempts: int = MAX_ATTEMPTS

    @property
    def timeout(self) -> float:
        return EXECUTION_TIMEOUTS[self.action_type]

    @abstractmethod
    async def run(self, config: Any, context: ExecutionContext) -> Any: ...

    async def execute(
        self,
        action_id: str,
        config: Any,
        context: ExecutionContext,
        order: int | None = None,
    ) -> ActionExecutionResult:
        started_at = utc_now()
        retry_count = 0

        while True:
            try:
                output = await asyncio.wait_for(
                    self.run(config, context), timeout=self.timeout
                )
            except asyncio.TimeoutError:
                error: ActionFailed = TransientActionError(
                    f"{self.action_type.value} execution timed out after {self.timeout:g}s"
                )
            except httpx.TransportError as e:
                error = TransientActionError(
                    f"{self.action_type.value} request error: {e!r}"
                )
            except TransientActionError as e:
                error = e
            except ActionFailed as e:
                return self._result(
                    action_id, order, started_at, ActionStatus.FAILED, error=str(e),
                    retry_count=retry_count,
                )
            else:
                return self._result(
                    action_id, order, started_at, ActionStatus.SUCCESS, result=output,
                    retry_count=retry_count,
                )

            if retry_count >= self.max_attempts - 1:
                return self._result(
                    action_id, order, started_at, ActionStatus.FAILED, error=str(error),
                    retry_count=retry_count,
                )

            delay = self.retry_delays[min(retry_count, len(self.retry_delays) - 1)]
            retry_count += 1
            logger.warning(
                f"{self.action_type.value} action {action_id} attempt {retry_count} "
                f"failed: {error}. Retrying in {delay:g}s"
            )
            await asyncio.sleep(delay)

    def _result(
        self,
        action_id: str,
        order: int | None,
        started_at,
        status: ActionStatus,
        result: Any = None,
        error: str | None = None,
        retry_count: int = 0,
    ) -> ActionExecutionResult:
        return ActionExecutionResult(
            action_id=action_id,
            action_type=self.action_type.value,
            status=status,
            started_at=started_at,
            completed_at=utc_now(),
            result=result,
            error=error,
            retry_count=retry_count,
            order=order,
        )
