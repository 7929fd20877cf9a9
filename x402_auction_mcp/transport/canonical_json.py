"""JSON serialization for tool results."""

from __future__ import annotations

from typing import Any

import orjson

_ORJSON_OPTIONS = orjson.OPT_INDENT_2 | orjson.OPT_NON_STR_KEYS


def dumps(payload: Any) -> str:
    """Return the pretty-printed JSON text handed back to the agent."""
    return orjson.dumps(payload, option=_ORJSON_OPTIONS).decode("utf-8")
