# TOML config codec (Codex CLI)
from typing import Any

import tomli
import tomli_w

from arbmcp.entry import build_toml_entry
from arbmcp.models import ConfigFormat, ServerEntry
from arbmcp.platforms.base import ConfigCodec


class TomlCodec(ConfigCodec):
    """Codec for TOML platform configs (~/.codex/config.toml).

    ABOUTME: Parses with tomli and writes with tomli_w
    ABOUTME: Server tables serialize as [<config_key>.arbitrum]
    """

    format: ConfigFormat = "toml"

    def parse(self, text: str) -> dict[str, Any]:
        # tomli.TOMLDecodeError subclasses ValueError
        return tomli.loads(text)

    def dump(self, document: dict[str, Any]) -> str:
        return tomli_w.dumps(document)

    def build_entry(self, forward_env: bool = False) -> ServerEntry:
        return build_toml_entry(forward_env=forward_env)
