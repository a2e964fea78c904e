"""Normalize firing events into TriggerContext values.

One builder per trigger kind. Builders do no I/O; they only parse and
verify what the caller hands them.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from hookified.enums import TriggerType
from hookified.services.execution.types import TriggerContext
from hookified.services.hooks.errors import InvalidTriggerConfig, Unauthorized
from hookified.utils.signatures import verify_signature
from hookified.utils.time import isoformat, utc_now

SIGNATURE_HEADERS = ("x-webhook-signature", "x-hub-signature-256")

# Request headers copied into webhook trigger data
FORWARDED_HEADERS = (
    "content-type",
    "user-agent",
    "x-request-id",
    "x-github-event",
    "x-github-delivery",
    "x-event-type",
)


def build_cron_context(
    cron_expression: Optional[str],
    timezone: Optional[str],
    now: datetime,
    last_executed_at: Optional[datetime] = None,
) -> TriggerContext:
    if not isinstance(cron_expression, str) or not cron_expression.strip():
        raise InvalidTriggerConfig("Cron expression is missing")

    return TriggerContext(
        type=TriggerType.CRON,
        data={
            "cronExpression": cron_expression,
            "timezone": timezone or "UTC",
            "scheduledAt": isoformat(now),
            "lastExecutedAt": isoformat(last_executed_at),
        },
    )


def signature_from_headers(headers: Mapping[str, str]) -> Optional[str]:
    for name in SIGNATURE_HEADERS:
        value = headers.get(name)
        if value:
            return value
    return None


def build_webhook_context(
    body: bytes,
    headers: Mapping[str, str],
    secret: Optional[str],
    client_ip: Optional[str] = None,
) -> TriggerContext:
    """Verify and parse an inbound webhook request.

    When the hook has no secret the signature is not checked at all.

    Raises:
        Unauthorized: if a secret is configured and the signature is missing
            or does not match the raw body
    """
    if secret:
        if not verify_signature(secret, body, signature_from_headers(headers)):
            raise Unauthorized("Invalid webhook signature")

    try:
        payload = json.loads(body) if body else {}
    except (ValueError, UnicodeDecodeError):
        logger.warning("Webhook body is not valid JSON, using an empty payload")
        payload = {}

    received_at = isoformat(utc_now())
    return TriggerContext(
        type=TriggerType.WEBHOOK,
        data={
            "webhookPayload": payload,
            "headers": {
                name: headers[name] for name in FORWARDED_HEADERS if name in headers
            },
            "timestamp": received_at,
            "source": headers.get("user-agent", "Unknown"),
            "clientIP": client_ip or "unknown",
        },
    )


def _extract_logs(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    block = ((payload.get("event") or {}).get("data") or {}).get("block")
    if block:
        return [_normalize_block_log(log, block) for log in block.get("logs") or []]
    # Address-activity style payloads carry logs at the top level
    return [_normalize_flat_log(log) for log in payload.get("logs") or []]


def _normalize_block_log(log: Dict[str, Any], block: Dict[str, Any]) -> Dict[str, Any]:
    transaction = log.get("transaction") or {}
    topics = log.get("topics") or []
    return {
        "address": (log.get("account") or {}).get("address"),
        "topics": topics,
        "data": log.get("data"),
        "logIndex": log.get("index"),
        "transactionHash": transaction.get("hash"),
        "from": (transaction.get("from") or {}).get("address"),
        "to": (transaction.get("to") or {}).get("address"),
        "value": transaction.get("value"),
        "blockNumber": block.get("number"),
        "blockHash": block.get("hash"),
        "blockTimestamp": block.get("timestamp"),
        "eventParams": topics[1:],
    }


def _normalize_flat_log(log: Dict[str, Any]) -> Dict[str, Any]:
    topics = log.get("topics") or []
    return {
        "address": log.get("address"),
        "topics": topics,
        "data": log.get("data"),
        "logIndex": log.get("logIndex"),
        "transactionHash": log.get("transactionHash"),
        "from": None,
        "to": None,
        "value": None,
        "blockNumber": log.get("blockNumber"),
        "blockHash": log.get("blockHash"),
        "blockTimestamp": None,
        "eventParams": topics[1:],
    }


def build_onchain_contexts(payload: Dict[str, Any]) -> List[TriggerContext]:
    """One context per matched log; an empty notification yields none."""
    if not isinstance(payload, dict):
        return []

    received_at = isoformat(utc_now())
    event = payload.get("event") or {}
    contexts = []
    for log in _extract_logs(payload):
        contexts.append(
            TriggerContext(
                type=TriggerType.ONCHAIN,
                data={
                    **log,
                    "network": event.get("network"),
                    "webhookId": payload.get("webhookId"),
                    "notificationId": payload.get("id"),
                    "receivedAt": received_at,
                },
            )
        )
    return contexts


def build_manual_context(
    user_id: int, extra: Optional[Dict[str, Any]] = None
) -> TriggerContext:
    """Caller fields are kept, but never override the triggering identity."""
    return TriggerContext(
        type=TriggerType.MANUAL,
        data={
            **(extra or {}),
            "triggeredBy": user_id,
            "triggeredAt": isoformat(utc_now()),
        },
    )
