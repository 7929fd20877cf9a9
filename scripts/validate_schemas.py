"""Runs jsonschema validation for all tool input schemas."""

from pathlib import Path
import json
from jsonschema import Draft202012Validator


SCHEMA_DIR = Path(__file__).resolve().parent.parent / "x402_auction_mcp" / "schemas"
REQUIRED_KEYS = ("name", "description", "inputSchema")


def validate() -> None:
    for schema in sorted(SCHEMA_DIR.glob("*.json")):
        data = json.loads(schema.read_text())
        missing = [key for key in REQUIRED_KEYS if key not in data]
        if missing:
            raise SystemExit(f"{schema.name}: missing {', '.join(missing)}")
        if data["name"] != schema.stem:
            raise SystemExit(f"{schema.name}: name {data['name']!r} does not match file")
        Draft202012Validator.check_schema(data["inputSchema"])
        print(f"{schema.name}: ok")


if __name__ == "__main__":
    validate()
