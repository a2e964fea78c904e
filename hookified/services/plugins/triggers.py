from hookified.enums import TriggerType
from hookified.services.cron.schedule import is_valid_expression, resolve_timezone
from hookified.services.onchain.networks import SUPPORTED_CHAINS
from hookified.services.plugins.base import (
    FieldValidation,
    FormField,
    FormSchema,
    SelectOption,
    TriggerDefinition,
    ValidationResult,
    is_address,
    is_blank,
)


class CronTrigger(TriggerDefinition):
    type = TriggerType.CRON
    name = "Schedule"
    description = "Run the hook on a cron schedule"
    icon = "Clock"

    def validate_config(self, config: dict) -> ValidationResult:
        errors = []
        expression = config.get("cronExpression")

        if is_blank(expression):
            errors.append("Cron expression is required")
        elif not isinstance(expression, str) or not is_valid_expression(expression):
            errors.append(f"Invalid cron expression: {expression}")

        timezone = config.get("timezone")
        if timezone is not None and resolve_timezone(timezone) is None:
            errors.append(f"Unknown timezone: {timezone}")

        return ValidationResult.from_errors(errors)

    def get_config_schema(self) -> FormSchema:
        return FormSchema(
            fields=[
                FormField(
                    name="cronExpression",
                    label="Cron Expression",
                    type="text",
                    placeholder="0 9 * * *",
                    required=True,
                    description="Standard 5-field cron expression",
                ),
                FormField(
                    name="timezone",
                    label="Timezone",
                    type="text",
                    placeholder="UTC",
                    default="UTC",
                    description="IANA timezone the schedule is evaluated in",
                ),
            ]
        )


class WebhookTrigger(TriggerDefinition):
    type = TriggerType.WEBHOOK
    name = "Webhook"
    description = "Run the hook when an HTTP request hits its webhook URL"
    icon = "Webhook"

    def validate_config(self, config: dict) -> ValidationResult:
        warnings = []
        if "secret" in config and is_blank(config.get("secret")):
            warnings.append(
                "No webhook secret configured: requests will not be signature-checked"
            )
        return ValidationResult.from_errors([], warnings)

    def get_config_schema(self) -> FormSchema:
        return FormSchema(
            fields=[
                FormField(
                    name="secret",
                    label="Signing Secret",
                    type="password",
                    description="HMAC-SHA256 secret used to verify request signatures",
                )
            ]
        )


class OnchainTrigger(TriggerDefinition):
    type = TriggerType.ONCHAIN
    name = "Onchain Event"
    description = "Monitor smart contract events and token transfers"
    icon = "Blocks"

    def validate_config(self, config: dict) -> ValidationResult:
        errors = []
        events = config.get("events") or []

        if not events:
            # Single-event form
            if is_blank(config.get("contractAddress")) or is_blank(config.get("eventName")):
                errors.append("At least one event must be configured")
            elif not is_address(config.get("contractAddress")):
                errors.append("Invalid contract address format")
        else:
            for index, event in enumerate(events, start=1):
                if not isinstance(event, dict):
                    errors.append(f"Event {index}: Invalid event configuration")
                    continue
                if is_blank(event.get("contractAddress")):
                    errors.append(f"Event {index}: Contract address is required")
                elif not is_address(event.get("contractAddress")):
                    errors.append(f"Event {index}: Invalid contract address format")

                if is_blank(event.get("eventName")):
                    errors.append(f"Event {index}: Event name is required")

                for f_index, event_filter in enumerate(event.get("filters") or [], start=1):
                    if not isinstance(event_filter, dict) or not (
                        event_filter.get("parameter") and event_filter.get("operator")
                    ):
                        errors.append(
                            f"Event {index}, Filter {f_index}: Invalid filter configuration"
                        )

        chain_id = config.get("chainId")
        if chain_id in (None, ""):
            errors.append("Chain selection is required")
        else:
            try:
                if int(chain_id) not in SUPPORTED_CHAINS:
                    errors.append(f"Unsupported chain: {chain_id}")
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
                    description="The smart contract address to monitor",
                ),
                FormField(
                    name="eventName",
                    label="Event Name",
                    type="text",
                    placeholder="Transfer",
                    required=True,
                    description="The event name to listen for (e.g., Transfer, Approval)",
                ),
                FormField(
                    name="chainId",
                    label="Blockchain Network",
                    type="select",
                    required=True,
                    options=[
                        SelectOption(value=chain_id, label=chain.label)
                        for chain_id, chain in SUPPORTED_CHAINS.items()
                    ],
                    description="Select the blockchain network",
                ),
            ]
        )


class ManualTrigger(TriggerDefinition):
    type = TriggerType.MANUAL
    name = "Manual"
    description = "Run the hook on demand"
    icon = "Hand"

    def validate_config(self, config: dict) -> ValidationResult:
        return ValidationResult.from_errors([])

    def get_config_schema(self) -> FormSchema:
        return FormSchema(fields=[])
