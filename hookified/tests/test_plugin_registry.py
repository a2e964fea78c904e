import copy

import pytest

from hookified.enums import ActionType, TriggerType
from hookified.schemas.configs import OnchainTriggerConfig, WebhookActionBlock
from hookified.services.execution.executors.webhook import WebhookExecutor
from hookified.services.hooks.errors import InvalidActionConfig, InvalidTriggerConfig
from hookified.services.plugins.registry import PluginRegistry

TOKEN = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


@pytest.fixture
def registry():
    return PluginRegistry()


class TestTriggerValidation:
    def test_valid_cron(self, registry):
        result = registry.validate_trigger(TriggerType.CRON, {"cronExpression": "0 9 * * *"})
        assert result.is_valid

    def test_invalid_cron_expression(self, registry):
        result = registry.validate_trigger("CRON", {"cronExpression": "not-a-cron"})

        assert not result.is_valid
        assert result.errors == ["Invalid cron expression: not-a-cron"]

    def test_unknown_timezone(self, registry):
        result = registry.validate_trigger(
            TriggerType.CRON, {"cronExpression": "0 9 * * *", "timezone": "Mars/Olympus"}
        )
        assert "Unknown timezone: Mars/Olympus" in result.errors

    def test_blank_webhook_secret_is_a_warning(self, registry):
        result = registry.validate_trigger(TriggerType.WEBHOOK, {"secret": ""})

        assert result.is_valid
        assert result.warnings

    def test_onchain_single_event_form(self, registry):
        config = {"contractAddress": TOKEN, "eventName": "Transfer", "chainId": 1}

        assert registry.validate_trigger(TriggerType.ONCHAIN, config).is_valid
        parsed = registry.parse_trigger_config(TriggerType.ONCHAIN, config)
        assert isinstance(parsed, OnchainTriggerConfig)
        assert [e.event_name for e in parsed.monitored_events()] == ["Transfer"]

    def test_onchain_collects_every_error(self, registry):
        config = {
            "chainId": 999999,
            "events": [
                {"contractAddress": "0x123", "eventName": ""},
                {"contractAddress": TOKEN, "eventName": "Transfer", "filters": [{}]},
            ],
        }

        result = registry.validate_trigger(TriggerType.ONCHAIN, config)

        assert result.errors == [
            "Event 1: Invalid contract address format",
            "Event 1: Event name is required",
            "Event 2, Filter 1: Invalid filter configuration",
            "Unsupported chain: 999999",
        ]

    def test_onchain_requires_chain(self, registry):
        result = registry.validate_trigger(
            TriggerType.ONCHAIN, {"contractAddress": TOKEN, "eventName": "Transfer"}
        )
        assert "Chain selection is required" in result.errors

    def test_unknown_kind_and_bad_config(self, registry):
        assert not registry.validate_trigger("SMOKE_SIGNAL", {}).is_valid
        assert not registry.validate_trigger(TriggerType.CRON, "0 9 * * *").is_valid

    def test_parse_rejects_mistyped_config(self, registry):
        with pytest.raises(InvalidTriggerConfig):
            registry.parse_trigger_config(TriggerType.ONCHAIN, {"chainId": "mainnet"})


class TestActionValidation:
    def test_webhook_requires_https(self, registry):
        result = registry.validate_action(
            ActionType.WEBHOOK, {"webhookUrl": "http://example.test/sink"}
        )
        assert result.errors == ["Webhook URL must be a valid https URL"]

    def test_webhook_method(self, registry):
        result = registry.validate_action(
            "WEBHOOK", {"webhookUrl": "https://example.test", "method": "TRACE"}
        )
        assert result.errors == ["Unsupported HTTP method: TRACE"]

    def test_telegram_requires_chat(self, registry):
        assert registry.validate_action(ActionType.TELEGRAM, {}).errors == [
            "Chat ID is required"
        ]

    def test_native_transfer_needs_recipient_and_amount(self, registry):
        config = {
            "contractAddress": TOKEN,
            "isNativeTransfer": True,
            "parameters": ["0xrecipient"],
            "chainId": 1,
        }
        result = registry.validate_action(ActionType.CONTRACT_CALL, config)

        assert result.errors == ["Native transfer requires recipient and amount parameters"]

    def test_contract_call_requires_function(self, registry):
        result = registry.validate_action(
            ActionType.CONTRACT_CALL, {"contractAddress": TOKEN, "chainId": "abc"}
        )
        assert result.errors == ["Function name is required", "Invalid chain id: abc"]

    def test_unknown_action(self, registry):
        assert registry.validate_action("SMS", {}).errors == ["Unknown action type: SMS"]

    def test_parse_action_block(self, registry):
        block = registry.parse_action_block(
            {
                "id": "a1",
                "order": 0,
                "type": "WEBHOOK",
                "config": {"webhookUrl": "https://example.test/sink"},
            }
        )

        assert isinstance(block, WebhookActionBlock)
        assert block.config.method == "POST"

    def test_parse_action_block_rejects_missing_fields(self, registry):
        with pytest.raises(InvalidActionConfig):
            registry.parse_action_block({"id": "a1", "order": 0, "type": "CHAIN", "config": {}})


class TestHookValidation:
    def test_validation_is_idempotent_and_pure(self, registry):
        trigger_config = {"cronExpression": "not-a-cron"}
        actions = [
            {"type": "WEBHOOK", "config": {"webhookUrl": "ftp://x"}},
            {"type": "TELEGRAM", "config": {}},
        ]
        snapshot = copy.deepcopy((trigger_config, actions))

        first = registry.validate_hook(TriggerType.CRON, trigger_config, actions)
        second = registry.validate_hook(TriggerType.CRON, trigger_config, actions)

        assert first == second
        assert (trigger_config, actions) == snapshot
        assert first.errors == [
            "Invalid cron expression: not-a-cron",
            "Action 1: Webhook URL must be a valid https URL",
            "Action 2: Chat ID is required",
        ]

    def test_requires_an_action(self, registry):
        result = registry.validate_hook(TriggerType.MANUAL, {}, [])
        assert result.errors == ["At least one action is required"]


class TestLookup:
    def test_executor_lookup(self, registry):
        assert isinstance(registry.get_executor("WEBHOOK"), WebhookExecutor)
        with pytest.raises(InvalidActionConfig):
            registry.get_executor("SMS")

    def test_every_kind_is_described(self, registry):
        triggers = {t["type"] for t in registry.list_triggers()}
        actions = {a["type"] for a in registry.list_actions()}

        assert triggers == {t.value for t in TriggerType}
        assert actions == {a.value for a in ActionType}
        cron = registry.get_trigger(TriggerType.CRON).describe()
        assert cron["configSchema"]["fields"][0]["name"] == "cronExpression"
