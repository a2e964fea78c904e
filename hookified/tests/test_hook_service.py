import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from hookified.enums import HookRunStatus, HookStatus
from hookified.services.cron.job_manager import CronJobManager
from hookified.services.execution.hook_executor import HookExecutor
from hookified.services.hooks.errors import (
    ExternalRegistrationError,
    HookAccessDenied,
    HookNotFound,
    InvalidActionConfig,
    InvalidLifecycleTransition,
    InvalidTriggerConfig,
)
from hookified.services.hooks.hook_service import HookService
from hookified.services.triggers.context_builder import build_manual_context
from hookified.utils.signatures import verify_signature

SINK_ACTION = {"type": "WEBHOOK", "config": {"webhookUrl": "https://example.test/sink"}}
TOKEN = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


def step_action(action_id: str, order) -> dict:
    return {
        "id": action_id,
        "order": order,
        "type": "WEBHOOK",
        "config": {"webhookUrl": f"https://example.test/step{order}"},
    }


class FakeBridge:
    def __init__(self):
        self.calls = []
        self.rows = []

    async def execute(self, query, params=None):
        self.calls.append((query, params))
        return self.rows

    def queries(self):
        return [query for query, _ in self.calls]


@pytest.fixture(autouse=True)
def mock_logger():
    """Mock the logger for all tests."""
    with patch("hookified.services.hooks.hook_service.logger") as mock_logger:
        yield mock_logger


@pytest.fixture
def bridge():
    return FakeBridge()


@pytest.fixture
def onchain_engine():
    engine = MagicMock()
    engine.register = AsyncMock(return_value="wh_new")
    engine.unregister = AsyncMock(return_value=True)
    return engine


@pytest.fixture
def service(bridge, onchain_engine):
    return HookService(
        job_manager=CronJobManager(bridge=bridge, app_url="https://hooks.test"),
        onchain_engine=onchain_engine,
    )


class TestCreateHook:
    @pytest.mark.asyncio
    async def test_webhook_hook_gets_generated_secret(self, db_session, test_user, service):
        hook = await service.create_hook(
            test_user.id, "incoming", "WEBHOOK", {}, [SINK_ACTION]
        )

        secret = hook.trigger_config["secret"]
        assert len(secret) == 64
        assert hook.status == HookStatus.ACTIVE.value
        assert hook.is_active is True
        # Missing ids and orders are filled in
        assert hook.actions[0]["id"].startswith("action_")
        assert hook.actions[0]["order"] == 0

    @pytest.mark.asyncio
    async def test_explicit_empty_secret_is_kept(self, db_session, test_user, service):
        hook = await service.create_hook(
            test_user.id, "open", "WEBHOOK", {"secret": ""}, [SINK_ACTION]
        )

        assert hook.trigger_config["secret"] == ""

    @pytest.mark.asyncio
    async def test_cron_hook_schedules_job(self, db_session, test_user, service, bridge):
        hook = await service.create_hook(
            test_user.id, "daily", "CRON", {"cronExpression": "0 9 * * *"}, [SINK_ACTION]
        )

        query, params = bridge.calls[0]
        assert query.startswith("SELECT cron.schedule(")
        assert params["job_name"] == f"hook_{hook.id}"
        assert params["schedule"] == "0 9 * * *"

    @pytest.mark.asyncio
    async def test_invalid_cron_expression_creates_nothing(
        self, db_session, test_user, service, bridge
    ):
        with pytest.raises(InvalidTriggerConfig) as exc_info:
            await service.create_hook(
                test_user.id, "broken", "CRON", {"cronExpression": "not-a-cron"}, [SINK_ACTION]
            )

        assert exc_info.value.status_code == 400
        assert "Invalid cron expression: not-a-cron" in exc_info.value.errors
        assert await db_session.list_hooks_for_user(test_user.id) == []
        assert bridge.calls == []

    @pytest.mark.asyncio
    async def test_invalid_actions_are_rejected(self, db_session, test_user, service):
        with pytest.raises(InvalidActionConfig):
            await service.create_hook(test_user.id, "no actions", "MANUAL", {}, [])

        with pytest.raises(InvalidActionConfig) as exc_info:
            await service.create_hook(
                test_user.id,
                "bad url",
                "MANUAL",
                {},
                [{"type": "WEBHOOK", "config": {"webhookUrl": "http://plain.test"}}],
            )
        assert exc_info.value.errors == ["Action 1: Webhook URL must be a valid https URL"]

    @pytest.mark.asyncio
    async def test_string_orders_are_stored_as_integers(
        self, db_session, test_user, service, mock_httpx
    ):
        sink = mock_httpx(lambda request: httpx.Response(200, json={"ok": True}))
        hook = await service.create_hook(
            test_user.id,
            "ordered",
            "MANUAL",
            {},
            [step_action("a10", "10"), step_action("a2", "2"), step_action("a0", 0)],
        )

        assert [(a["id"], a["order"]) for a in hook.actions] == [
            ("a0", 0),
            ("a2", 2),
            ("a10", 10),
        ]

        result = await HookExecutor().execute_hook(hook, build_manual_context(test_user.id, {}))

        assert [r.action_id for r in result.actions] == ["a0", "a2", "a10"]
        assert [request.url.path for request in sink] == ["/step0", "/step2", "/step10"]

    @pytest.mark.asyncio
    async def test_non_integer_order_is_rejected(self, db_session, test_user, service):
        with pytest.raises(InvalidActionConfig) as exc_info:
            await service.create_hook(
                test_user.id,
                "bad order",
                "MANUAL",
                {},
                [SINK_ACTION, {**SINK_ACTION, "order": "abc"}, {**SINK_ACTION, "order": 1.5}],
            )

        assert exc_info.value.status_code == 400
        assert exc_info.value.errors == [
            "Action 2: Order must be an integer",
            "Action 3: Order must be an integer",
        ]
        assert await db_session.list_hooks_for_user(test_user.id) == []

    @pytest.mark.asyncio
    async def test_unknown_trigger_type(self, db_session, test_user, service):
        with pytest.raises(InvalidTriggerConfig):
            await service.create_hook(test_user.id, "x", "EMAIL", {}, [SINK_ACTION])

    @pytest.mark.asyncio
    async def test_failed_onchain_registration_removes_hook(
        self, db_session, test_user, service, onchain_engine
    ):
        onchain_engine.register.side_effect = ExternalRegistrationError("provider down")

        with pytest.raises(ExternalRegistrationError):
            await service.create_hook(
                test_user.id,
                "transfers",
                "ONCHAIN",
                {"contractAddress": TOKEN, "eventName": "Transfer", "chainId": 1},
                [SINK_ACTION],
            )

        assert await db_session.list_hooks_for_user(test_user.id) == []


class TestUpdateHook:
    @pytest.mark.asyncio
    async def test_trigger_type_is_immutable(self, db_session, test_user, service):
        hook = await service.create_hook(test_user.id, "h", "MANUAL", {}, [SINK_ACTION])

        with pytest.raises(InvalidTriggerConfig):
            await service.update_hook(hook.id, test_user.id, trigger_type="CRON")

    @pytest.mark.asyncio
    async def test_schedule_change_updates_job(self, db_session, test_user, service, bridge):
        hook = await service.create_hook(
            test_user.id, "daily", "CRON", {"cronExpression": "0 9 * * *"}, [SINK_ACTION]
        )

        updated = await service.update_hook(
            hook.id, test_user.id, name="hourly", trigger_config={"cronExpression": "0 * * * *"}
        )

        assert updated.name == "hourly"
        assert updated.trigger_config["cronExpression"] == "0 * * * *"
        query, params = bridge.calls[-1]
        assert "schedule := :schedule" in query
        assert params["schedule"] == "0 * * * *"

    @pytest.mark.asyncio
    async def test_webhook_secret_survives_config_update(self, db_session, test_user, service):
        hook = await service.create_hook(test_user.id, "in", "WEBHOOK", {}, [SINK_ACTION])

        updated = await service.update_hook(hook.id, test_user.id, trigger_config={})

        assert updated.trigger_config["secret"] == hook.trigger_config["secret"]

    @pytest.mark.asyncio
    async def test_ownership_is_enforced(self, db_session, test_user, service):
        hook = await service.create_hook(test_user.id, "h", "MANUAL", {}, [SINK_ACTION])
        other = await db_session.get_or_create_user_by_provider_id("someone_else")

        with pytest.raises(HookAccessDenied):
            await service.update_hook(hook.id, other.id, name="stolen")
        with pytest.raises(HookNotFound):
            await service.update_hook("missing", test_user.id, name="x")


class TestToggleHook:
    @pytest.mark.asyncio
    async def test_pause_and_resume_cron_hook(self, db_session, test_user, service, bridge):
        hook = await service.create_hook(
            test_user.id, "daily", "CRON", {"cronExpression": "0 9 * * *"}, [SINK_ACTION]
        )

        paused = await service.toggle_hook(hook.id, test_user.id, False)
        assert paused.status == HookStatus.PAUSED.value
        assert paused.is_active is False
        assert bridge.calls[-1][1] == {"job_name": f"hook_{hook.id}", "active": False}

        bridge.rows = [{"jobname": f"hook_{hook.id}", "schedule": "0 9 * * *", "active": False}]
        resumed = await service.toggle_hook(hook.id, test_user.id, True)
        assert resumed.status == HookStatus.ACTIVE.value
        assert bridge.calls[-1][1] == {"job_name": f"hook_{hook.id}", "active": True}

    @pytest.mark.asyncio
    async def test_resume_recreates_missing_job(self, db_session, test_user, service, bridge):
        hook = await service.create_hook(
            test_user.id, "daily", "CRON", {"cronExpression": "0 9 * * *"}, [SINK_ACTION]
        )
        await service.toggle_hook(hook.id, test_user.id, False)

        await service.toggle_hook(hook.id, test_user.id, True)

        assert bridge.queries()[-1].startswith("SELECT cron.schedule(")

    @pytest.mark.asyncio
    async def test_error_hook_cannot_be_paused(self, db_session, test_user, service):
        hook = await service.create_hook(test_user.id, "h", "MANUAL", {}, [SINK_ACTION])
        await db_session.set_hook_status(hook.id, HookStatus.ERROR)

        with pytest.raises(InvalidLifecycleTransition) as exc_info:
            await service.toggle_hook(hook.id, test_user.id, False)
        assert exc_info.value.status_code == 409

        reactivated = await service.toggle_hook(hook.id, test_user.id, True)
        assert reactivated.status == HookStatus.ACTIVE.value


class TestWebhookSecrets:
    @pytest.mark.asyncio
    async def test_regenerate_secret(self, db_session, test_user, service):
        hook = await service.create_hook(test_user.id, "in", "WEBHOOK", {}, [SINK_ACTION])

        updated = await service.regenerate_secret(hook.id, test_user.id)

        assert updated.trigger_config["secret"] != hook.trigger_config["secret"]
        assert len(updated.trigger_config["secret"]) == 64

    @pytest.mark.asyncio
    async def test_regenerate_requires_webhook_hook(self, db_session, test_user, service):
        hook = await service.create_hook(test_user.id, "h", "MANUAL", {}, [SINK_ACTION])

        with pytest.raises(InvalidTriggerConfig):
            await service.regenerate_secret(hook.id, test_user.id)

    @pytest.mark.asyncio
    async def test_webhook_details(self, db_session, test_user, service):
        hook = await service.create_hook(test_user.id, "in", "WEBHOOK", {}, [SINK_ACTION])
        run = await db_session.create_hook_run(
            hook.id, str(uuid.uuid4()), {"actions": []}, datetime.now(UTC)
        )
        await db_session.complete_hook_run(run.id, HookRunStatus.SUCCESS, meta={})

        details = await service.webhook_details(hook.id, test_user.id)

        secret = hook.trigger_config["secret"]
        assert details["webhookUrl"].endswith(f"/api/v1/webhooks/{hook.id}")
        assert details["secret"] == secret
        assert details["isActive"] is True
        assert details["lastRun"]["id"] == run.id
        assert details["lastRun"]["status"] == HookRunStatus.SUCCESS.value
        # The example signature is valid for the example payload
        signature = details["curlExample"].split("x-webhook-signature: ")[1].split('"')[0]
        assert verify_signature(
            secret, b'{"event": "test", "data": {"message": "Hello from webhook"}}', signature
        )


class TestDeleteHook:
    @pytest.mark.asyncio
    async def test_delete_cron_hook_removes_job(self, db_session, test_user, service, bridge):
        hook = await service.create_hook(
            test_user.id, "daily", "CRON", {"cronExpression": "0 9 * * *"}, [SINK_ACTION]
        )

        await service.delete_hook(hook.id, test_user.id)

        assert bridge.queries()[-1] == "SELECT cron.unschedule(:job_name)"
        assert await db_session.get_hook(hook.id) is None

    @pytest.mark.asyncio
    async def test_delete_onchain_hook_unregisters(
        self, db_session, test_user, service, onchain_engine
    ):
        hook = await service.create_hook(
            test_user.id,
            "transfers",
            "ONCHAIN",
            {"contractAddress": TOKEN, "eventName": "Transfer", "chainId": 1},
            [SINK_ACTION],
        )

        await service.delete_hook(hook.id, test_user.id)

        onchain_engine.unregister.assert_awaited_once()
        assert await db_session.get_hook(hook.id) is None
