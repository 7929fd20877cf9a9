"""Tool descriptors loaded from the JSON documents shipped with the package."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

from jsonschema import Draft202012Validator

_SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_schema: dict[str, Any]


class ToolSchemaRegistry:
    def __init__(self, schema_dir: Path) -> None:
        self._schema_dir = schema_dir
        self._tools: dict[str, ToolDescriptor] = {}
        self._load()

    def _load(self) -> None:
        for schema_path in sorted(self._schema_dir.glob("*.json")):
            data = json.loads(schema_path.read_text())
            name = data.get("name") or schema_path.stem
            input_schema = data.get("inputSchema") or {"type": "object", "properties": {}}
            Draft202012Validator.check_schema(input_schema)
            self._tools[name] = ToolDescriptor(
                name=name,
                description=str(data.get("description", "")),
                input_schema=input_schema,
            )

    def all(self) -> Iterable[ToolDescriptor]:
        return self._tools.values()

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)


@lru_cache(maxsize=1)
def get_tool_registry() -> ToolSchemaRegistry:
    return ToolSchemaRegistry(_SCHEMA_DIR)
