"""GraphQL log filters for the notification provider's custom webhooks."""

import re
from typing import Dict, Iterable, List, Optional, Sequence, Set, Union

from hookified.schemas.configs import OnchainEventConfig

TopicItem = Union[str, List[str], None]

_TOPIC_PARAMETER = re.compile(r"^topic([1-3])$")

_TRANSACTION_FIELDS = """,
      transaction {
        hash,
        nonce,
        index,
        from {
          address
        },
        to {
          address
        },
        value,
        gasPrice,
        gas,
        status,
        gasUsed
      }"""


def build_topics(
    event_signatures: Sequence[str], topic_filters: Optional[Dict[int, Set[str]]] = None
) -> List[TopicItem]:
    """Topic positions 0-3; None is a wildcard."""
    topics: List[TopicItem] = []
    if event_signatures:
        topics.append(event_signatures[0] if len(event_signatures) == 1 else list(event_signatures))
    else:
        topics.append(None)

    topic_filters = topic_filters or {}
    for index in range(1, 4):
        values = sorted(topic_filters.get(index, ()))
        if not values:
            topics.append(None)
        else:
            topics.append(values[0] if len(values) == 1 else values)
    return topics


def _format_topic(item: TopicItem) -> str:
    if item is None:
        return "null"
    if isinstance(item, list):
        return "[" + ", ".join(f'"{v}"' for v in item) + "]"
    return f'"{item}"'


def build_log_filter_query(
    addresses: Sequence[str],
    event_signatures: Sequence[str] = (),
    topic_filters: Optional[Dict[int, Set[str]]] = None,
    include_transaction: bool = True,
) -> str:
    filters = []
    if addresses:
        filters.append("addresses: [" + ", ".join(f'"{a}"' for a in addresses) + "]")
    # Topic filtering needs topic0, which is only known when a signature is given
    if event_signatures:
        topics = build_topics(event_signatures, topic_filters)
        filters.append("topics: [" + ", ".join(_format_topic(t) for t in topics) + "]")

    query = "{\n  block {\n    hash,\n    number,\n    timestamp,\n"
    query += "    logs(filter: {" + ", ".join(filters) + "}) {\n"
    query += "      data,\n      topics,\n      index,\n"
    query += "      account {\n        address\n      }"
    if include_transaction:
        query += _TRANSACTION_FIELDS
    query += "\n    }\n  }\n}"
    return query


def topic_filters_for(events: Iterable[OnchainEventConfig]) -> Dict[int, Set[str]]:
    """Equality filters on indexed parameters named ``topic1``..``topic3``."""
    result: Dict[int, Set[str]] = {}
    for event in events:
        for event_filter in event.filters:
            match = _TOPIC_PARAMETER.match(event_filter.parameter)
            if match and event_filter.operator in ("eq", "==", "equals") and event_filter.value:
                result.setdefault(int(match.group(1)), set()).add(str(event_filter.value))
    return result


def build_query_for_events(events: Sequence[OnchainEventConfig]) -> str:
    addresses = sorted({e.contract_address for e in events})
    signatures = [e.event_signature for e in events if e.event_signature]
    # A partial signature list would drop the unsigned events
    if len(signatures) != len(events):
        signatures = []
    return build_log_filter_query(
        addresses,
        sorted(set(signatures)),
        topic_filters_for(events) if signatures else None,
    )
