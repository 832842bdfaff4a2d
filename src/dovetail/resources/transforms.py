"""Named payload and result transforms referenced from the registry.

``prepare`` transforms receive the outgoing payload before validation and
return the payload to validate and send. ``finalize`` transforms receive the
unwrapped result and return what the caller gets.
"""

from typing import Any, Callable

# Names for the tag palette; the palette itself is the tags.create color rule in teamwork.yaml.
TAG_COLOR_NAMES = {
    "red": "#d84640",
    "red-orange": "#f78234",
    "orange": "#f4bd38",
    "yellow-green": "#b1da34",
    "green": "#53c944",
    "cyan": "#37ced0",
    "blue": "#2f8de4",
    "purple": "#9b7cdb",
    "pink": "#f47fbe",
    "gray": "#a6a6a6",
    "grey": "#a6a6a6",
    "slate": "#4d4d4d",
    "brown": "#9e6957",
}


def translate_tag_color(color: Any) -> Any:
    """Map a color name to its hex value; anything else passes through."""
    if isinstance(color, str) and color in TAG_COLOR_NAMES:
        return TAG_COLOR_NAMES[color]
    return color


def tag_color(payload: dict[str, Any]) -> dict[str, Any]:
    if "color" in payload:
        payload["color"] = translate_tag_color(payload["color"])
    return payload


def notify_flag(payload: dict[str, Any]) -> dict[str, Any]:
    """Teamwork expects notify as the strings 'yes' / 'no'."""
    value = payload.get("notify")
    if value is True or value == "yes" or (value and not isinstance(value, str)):
        payload["notify"] = "yes"
    else:
        payload["notify"] = "no"
    return payload


def backfill_id(result: Any) -> Any:
    # Task list creation answers with TASKLISTID only.
    if isinstance(result, dict) and "id" not in result and "TASKLISTID" in result:
        result["id"] = result["TASKLISTID"]
    return result


PREPARE_TRANSFORMS: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
    "tag_color": tag_color,
    "notify_flag": notify_flag,
}

FINALIZE_TRANSFORMS: dict[str, Callable[[Any], Any]] = {
    "backfill_id": backfill_id,
}
