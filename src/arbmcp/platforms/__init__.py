# Platform registry and codec lookup
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import MappingProxyType

from arbmcp.models import SUPPORTED_OS, ConfigError, ConfigFormat, PlatformDescriptor
from arbmcp.platforms.base import ConfigCodec
from arbmcp.platforms.json_codec import JsonCodec
from arbmcp.platforms.toml_codec import TomlCodec

_VSCODE_GLOBAL_STORAGE = {
    "darwin": "~/Library/Application Support/Code/User/globalStorage",
    "win32": "%APPDATA%/Code/User/globalStorage",
    "linux": "~/.config/Code/User/globalStorage",
}
_ROO_EXTENSION = "rooveterinaryinc.roo-cline"


def _same_everywhere(template: str) -> dict[str, str]:
    return {os_name: template for os_name in SUPPORTED_OS}


# ABOUTME: Built-in platforms in display order
PLATFORMS: tuple[PlatformDescriptor, ...] = (
    PlatformDescriptor(
        id="claude-desktop",
        name="Claude Desktop",
        format="json",
        config_key="mcpServers",
        global_paths={
            "darwin": "~/Library/Application Support/Claude/claude_desktop_config.json",
            "win32": "%APPDATA%/Claude/claude_desktop_config.json",
            "linux": "~/.config/Claude/claude_desktop_config.json",
        },
        local_path=".claude/mcp.json",
        detect_paths={
            "darwin": (
                "/Applications/Claude.app",
                "~/Library/Application Support/Claude/claude_desktop_config.json",
            ),
            "win32": (
                "%LOCALAPPDATA%/Programs/Claude",
                "%APPDATA%/Claude/claude_desktop_config.json",
            ),
            "linux": ("~/.config/Claude/claude_desktop_config.json",),
        },
    ),
    PlatformDescriptor(
        id="claude-code",
        name="Claude Code",
        format="json",
        config_key="mcpServers",
        global_paths=_same_everywhere("~/.claude.json"),
        local_path=".mcp.json",
        detect_paths={"*": ("~/.claude.json", "~/.claude/settings.json")},
    ),
    PlatformDescriptor(
        id="cursor",
        name="Cursor",
        format="json",
        config_key="mcpServers",
        global_paths=_same_everywhere("~/.cursor/mcp.json"),
        local_path=".cursor/mcp.json",
        detect_paths={
            "darwin": ("/Applications/Cursor.app", "~/.cursor"),
            "*": ("~/.cursor",),
        },
    ),
    PlatformDescriptor(
        id="windsurf",
        name="Windsurf",
        format="json",
        config_key="mcpServers",
        global_paths={
            "darwin": "~/.codeium/windsurf/mcp_config.json",
            "win32": "%USERPROFILE%/.codeium/windsurf/mcp_config.json",
            "linux": "~/.codeium/windsurf/mcp_config.json",
        },
        local_path=".windsurf/mcp.json",
        detect_paths={"*": ("~/.codeium/windsurf",)},
    ),
    PlatformDescriptor(
        id="vscode",
        name="VS Code",
        format="json",
        config_key="servers",
        global_paths=_same_everywhere("~/.vscode/mcp.json"),
        local_path=".vscode/mcp.json",
        detect_paths={
            "darwin": ("/Applications/Visual Studio Code.app", "~/.vscode"),
            "*": ("~/.vscode",),
        },
    ),
    PlatformDescriptor(
        id="gemini",
        name="Gemini CLI",
        format="json",
        config_key="mcpServers",
        global_paths=_same_everywhere("~/.gemini/settings.json"),
        local_path=".gemini/settings.json",
        detect_paths={"*": ("~/.gemini",)},
    ),
    PlatformDescriptor(
        id="roo-code",
        name="Roo Code",
        format="json",
        config_key="mcpServers",
        global_paths={
            os_name: f"{base}/{_ROO_EXTENSION}/settings/cline_mcp_settings.json"
            for os_name, base in _VSCODE_GLOBAL_STORAGE.items()
        },
        local_path=".roo/mcp.json",
        detect_paths={
            os_name: (f"{base}/{_ROO_EXTENSION}",)
            for os_name, base in _VSCODE_GLOBAL_STORAGE.items()
        },
    ),
    PlatformDescriptor(
        id="codex",
        name="OpenAI Codex",
        format="toml",
        config_key="mcp_servers",
        global_paths=_same_everywhere("~/.codex/config.toml"),
        local_path=".codex/config.toml",
        # Codex sandboxes the shell environment; secrets must be forwarded by name
        forward_env=True,
        detect_paths={"*": ("~/.codex",)},
    ),
)


def _validate(descriptor: PlatformDescriptor) -> None:
    """Check the registry invariants for one descriptor.

    Raises:
        ConfigError: If a global template is missing for any OS, the local
            template is empty or absolute, or the format is unknown
    """
    if descriptor.format not in ("json", "toml"):
        raise ConfigError(f"Platform '{descriptor.id}' has unknown format '{descriptor.format}'")

    missing = [os_name for os_name in SUPPORTED_OS if not descriptor.global_paths.get(os_name)]
    if missing:
        raise ConfigError(
            f"Platform '{descriptor.id}' has no global path for: {', '.join(missing)}"
        )

    if not descriptor.local_path or Path(descriptor.local_path).is_absolute():
        raise ConfigError(f"Platform '{descriptor.id}' needs a relative local path")


class PlatformRegistry:
    """Read-only, ordered table of platform descriptors keyed by id.

    ABOUTME: Validated once on construction, then shared by reference
    ABOUTME: Tests build small registries of fake platforms the same way
    """

    def __init__(self, descriptors: Iterable[PlatformDescriptor]) -> None:
        table: dict[str, PlatformDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.id in table:
                raise ConfigError(f"Duplicate platform id '{descriptor.id}'")
            _validate(descriptor)
            table[descriptor.id] = descriptor
        self._table = MappingProxyType(table)

    def ids(self) -> list[str]:
        """Platform ids in registration order."""
        return list(self._table)

    def get(self, platform_id: str) -> PlatformDescriptor | None:
        return self._table.get(platform_id)

    def __iter__(self) -> Iterator[PlatformDescriptor]:
        return iter(self._table.values())

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, platform_id: object) -> bool:
        return platform_id in self._table


def default_registry() -> PlatformRegistry:
    """Build the registry of built-in platforms."""
    return PlatformRegistry(PLATFORMS)


def get_codec(config_format: ConfigFormat, backup_dir: Path | None = None) -> ConfigCodec:
    """Return the codec for a config format.

    Raises:
        ConfigError: If the format has no codec
    """
    if config_format == "json":
        return JsonCodec(backup_dir=backup_dir)
    if config_format == "toml":
        return TomlCodec(backup_dir=backup_dir)
    raise ConfigError(f"No codec for format '{config_format}'")


__all__ = [
    "PLATFORMS",
    "PlatformRegistry",
    "default_registry",
    "get_codec",
    "ConfigCodec",
    "JsonCodec",
    "TomlCodec",
]
