"""
Topic and identifier helpers.

Everything here must be stable across restarts: Home Assistant persists the
unique_id of every entity it has discovered.
"""

TOPIC_PREFIX = "gv2mqtt"


def topic_safe_string(s: str) -> str:
    return "".join(ch if ch.isascii() and (ch.isalnum() or ch in "_-") else "_" for ch in str(s))


def topic_safe_id(device) -> str:
    """Device ids are MAC-like (AA:BB:CC:...); drop the separators."""
    return topic_safe_string(str(device.id).replace(":", ""))


def availability_topic() -> str:
    return f"{TOPIC_PREFIX}/availability"


def sensor_state_topic(unique_id: str) -> str:
    return f"{TOPIC_PREFIX}/sensor/{unique_id}/state"


def sensor_attributes_topic(unique_id: str) -> str:
    return f"{TOPIC_PREFIX}/sensor/{unique_id}/attributes"
