from urllib.parse import urlparse

from hookified.enums import ActionType
from hookified.services.onchain.networks import SUPPORTED_CHAINS
from hookified.services.plugins.base import (
    ActionDefinition,
    FieldValidation,
    FormField,
    FormSchema,
    SelectOption,
    ValidationResult,
    is_address,
    is_blank,
)

WEBHOOK_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


class TelegramAction(ActionDefinition):
    type = ActionType.TELEGRAM
    name = "Telegram"
    description = "Send a message to a Telegram chat"
    icon = "Send"

    def validate_config(self, config: dict) -> ValidationResult:
        errors = []
        if is_blank(config.get("chatId")):
            errors.append("Chat ID is required")
        template = config.get("messageTemplate")
        if template is not None and not isinstance(template, str):
            errors.append("Message template must be a string")
        return ValidationResult.from_errors(errors)

    def get_config_schema(self) -> FormSchema:
        return FormSchema(
            fields=[
                FormField(
                    name="chatId",
                    label="Chat ID",
                    type="text",
                    placeholder="123456789 or @channel",
                    required=True,
                    description="Numeric chat id or @username of the destination chat",
                ),
                FormField(
                    name="messageTemplate",
                    label="Message",
                    type="textarea",
                    placeholder="Transfer of {trigger.eventParams[1]} detected",
                    description="Supports {placeholders} from the trigger and earlier actions",
                ),
            ]
        )


class WebhookAction(ActionDefinition):
    type = ActionType.WEBHOOK
    name = "Webhook"
    description = "Call an external HTTPS endpoint"
    icon = "Globe"

    def validate_config(self, config: dict) -> ValidationResult:
        errors = []
        url = config.get("webhookUrl")
        if is_blank(url):
            errors.append("Webhook URL is required")
        else:
            parsed = urlparse(str(url))
            if parsed.scheme != "https" or not parsed.netloc:
                errors.append("Webhook URL must be a valid https URL")

        method = config.get("method", "POST")
        if not isinstance(method, str) or method.upper() not in WEBHOOK_METHODS:
            errors.append(f"Unsupported HTTP method: {method}")

        headers = config.get("headers")
        if headers is not None and not isinstance(headers, dict):
            errors.append("Headers must be an object")

        return ValidationResult.from_errors(errors)

    def get_config_schema(self) -> FormSchema:
        return FormSchema(
            fields=[
                FormField(
                    name="webhookUrl",
                    label="Webhook URL",
                    type="text",
                    placeholder="https://example.com/hook",
                    required=True,
                    validation=FieldValidation(pattern="^https://"),
                ),
                FormField(
                    name="method",
                    label="Method",
                    type="select",
                    default="POST",
                    options=[SelectOption(value=m, label=m) for m in WEBHOOK_METHODS],
                ),
                FormField(
                    name="bodyTemplate",
                    label="Body",
                    type="textarea",
                    description="JSON body; the trigger payload is sent when left empty",
                ),
            ]
        )


class ContractCallAction(ActionDefinition):
    type = ActionType.CONTRACT_CALL
    name = "Contract Call"
    description = "Invoke a smart contract function or send a native transfer"
    icon = "FileCode"

    def validate_config(self, config: dict) -> ValidationResult:
        errors = []
        if is_blank(config.get("contractAddress")):
            errors.append("Contract address is required")
        elif not is_address(config.get("contractAddress")):
            errors.append("Invalid contract address format")

        parameters = config.get("parameters") or []
        if not isinstance(parameters, list):
            errors.append("Parameters must be a list")
            parameters = []

        if config.get("isNativeTransfer"):
            if len(parameters) < 2:
                errors.append("Native transfer requires recipient and amount parameters")
        elif is_blank(config.get("functionName")):
            errors.append("Function name is required")

        chain_id = config.get("chainId")
        if chain_id in (None, ""):
            errors.append("Chain ID is required")
        else:
            try:
                int(chain_id)
            except (TypeError, ValueError):
                errors.append(f"Invalid chain id: {chain_id}")

        return ValidationResult.from_errors(errors)

    def get_config_schema(self) -> FormSchema:
        return FormSchema(
            fields=[
                FormField(
                    name="contractAddress",
                    label="Contract Address",
                    type="text",
                    placeholder="0x...",
                    required=True,
                    validation=FieldValidation(pattern="^0x[a-fA-F0-9]{40}$"),
                ),
                FormField(
                    name="functionName",
                    label="Function",
                    type="text",
                    placeholder="transfer",
                ),
                FormField(
                    name="chainId",
                    label="Network",
                    type="select",
                    required=True,
                    options=[
                        SelectOption(value=chain_id, label=chain.label)
                        for chain_id, chain in SUPPORTED_CHAINS.items()
                    ],
                ),
                FormField(
                    name="isNativeTransfer",
                    label="Native transfer",
                    type="checkbox",
                    default=False,
                ),
            ]
        )


class ChainAction(ActionDefinition):
    type = ActionType.CHAIN
    name = "Chain Hook"
    description = "Run another of your hooks"
    icon = "Link"

    def validate_config(self, config: dict) -> ValidationResult:
        errors = []
        if is_blank(config.get("targetHookId")):
            errors.append("Target hook is required")
        return ValidationResult.from_errors(errors)

    def get_config_schema(self) -> FormSchema:
        return FormSchema(
            fields=[
                FormField(
                    name="targetHookId",
                    label="Target Hook",
                    type="text",
                    required=True,
                    description="Id of the hook to run after this one",
                )
            ]
        )
