# JSON config codec (Claude, Cursor, Windsurf, VS Code, Gemini, Roo)
import json
from typing import Any

from arbmcp.entry import build_json_entry
from arbmcp.models import ConfigFormat, ServerEntry
from arbmcp.platforms.base import ConfigCodec


class JsonCodec(ConfigCodec):
    """Codec for JSON platform configs.

    ABOUTME: Keeps key order and uses 2-space indentation for readability
    ABOUTME: Whitespace-only files read as an empty document
    """

    format: ConfigFormat = "json"

    def parse(self, text: str) -> dict[str, Any]:
        if not text.strip():
            return {}

        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object at top level, got {type(data).__name__}")
        return data

    def dump(self, document: dict[str, Any]) -> str:
        return json.dumps(document, indent=2, ensure_ascii=False) + "\n"

    def build_entry(self, forward_env: bool = False) -> ServerEntry:
        # JSON platforms inherit the user's environment, so nothing is forwarded
        return build_json_entry()
