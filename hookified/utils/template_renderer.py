"""Placeholder rendering for action configs, with support for nested paths."""

import json
import re
from typing import Any, Dict, Union

# {identifier.path}, {actions[0].result.id}, {action_notify.error}
_PLACEHOLDER = re.compile(r"\{\s*([A-Za-z_][\w\-]*(?:\.[\w\-]+|\[\d+\])*)\s*\}")
_SEGMENT = re.compile(r"([^.\[\]]+)|\[(\d+)\]")


def get_nested_value(obj: Any, path: str) -> Any:
    """
    Get a nested value using dot notation and list indexes.

    A key that literally contains the remaining path (as produced by
    flattening) wins over walking the structure.

    Args:
        obj: The object to traverse (dict, list or any)
        path: Path such as "a.b.c" or "items[0].name"

    Returns:
        The value at the path, or None if not found

    Examples:
        get_nested_value({"a": {"b": 1}}, "a.b") -> 1
        get_nested_value({"a.b": 2}, "a.b") -> 2
        get_nested_value({"a": [{"b": 3}]}, "a[0].b") -> 3
        get_nested_value({"a": 1}, "a.b") -> None
    """
    if not path:
        return obj

    if isinstance(obj, dict) and path in obj:
        return obj[path]

    match = _SEGMENT.match(path)
    if match is None:
        return None

    name, index = match.group(1), match.group(2)
    rest = path[match.end() :].lstrip(".")

    if index is not None:
        if not isinstance(obj, list) or int(index) >= len(obj):
            return None
        current = obj[int(index)]
    elif isinstance(obj, dict):
        current = obj.get(name)
    else:
        return None

    if current is None:
        return None
    return get_nested_value(current, rest)


def render_template(
    template: Union[str, dict, list, None],
    context: Dict[str, Any],
) -> Union[str, dict, list, None]:
    """
    Render a template with placeholder substitution supporting nested paths.

    Supports:
    - String templates: "Hello {trigger.name}"
    - Structured templates: {"key": "{trigger.value}"}
    - Nested paths: "{actions[0].result.messageId}"
    - Action aliases: "{action0.result.status}"

    Placeholders that cannot be resolved render as an empty string.
    Text in braces that is not a path (e.g. JSON literals) is left untouched.

    Args:
        template: String, dict, list, or None with {path} placeholders
        context: Resolution scope built by the variable context builder

    Returns:
        Rendered template with placeholders replaced
    """
    if template is None:
        return None

    if isinstance(template, dict):
        return {
            k: render_template(v, context) for k, v in template.items()
        }

    if isinstance(template, list):
        return [render_template(item, context) for item in template]

    # Handle non-string types (int, float, bool, etc.)
    if not isinstance(template, str):
        return template

    return _render_string(template, context)


def _render_string(template_str: str, context: Dict[str, Any]) -> str:
    if not template_str:
        return template_str

    def _replace(match: re.Match[str]) -> str:
        value = get_nested_value(context, match.group(1))
        return _to_text(value)

    return _PLACEHOLDER.sub(_replace, template_str)


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list, bool)):
        return json.dumps(value)
    return str(value)
