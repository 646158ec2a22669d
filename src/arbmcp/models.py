# Core data models for arbmcp
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

# ABOUTME: Serialization format of a platform's config file
ConfigFormat = Literal["json", "toml"]

# ABOUTME: global = user's home-directory config, local = project config under cwd
Scope = Literal["global", "local"]

# ABOUTME: OS identifiers used as keys in path templates (sys.platform values)
OSName = Literal["darwin", "win32", "linux"]

SUPPORTED_OS: tuple[OSName, ...] = ("darwin", "win32", "linux")
SCOPES: tuple[Scope, ...] = ("global", "local")


class ConfigError(Exception):
    """Raised for registry misconfiguration and missing required settings.

    ABOUTME: Signals a programmer or deployment error, never a missing/corrupt file
    """


@dataclass(frozen=True)
class PlatformDescriptor:
    """Static description of one supported MCP client platform.

    ABOUTME: Immutable, built once at startup and shared through the registry
    ABOUTME: Path templates may start with ~ and use %VAR% placeholders on Windows
    """
    id: str
    name: str
    format: ConfigFormat
    config_key: str
    global_paths: Mapping[str, str]
    local_path: str
    forward_env: bool = False
    detect_paths: Mapping[str, tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class ServerEntry:
    """The record installed under document[config_key]["arbitrum"].

    ABOUTME: enabled and env_vars are only set for TOML platforms
    ABOUTME: env_vars holds variable names to forward, never their values
    """
    command: str
    args: tuple[str, ...] = ()
    enabled: bool | None = None
    env_vars: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to the mapping written to disk, omitting unset fields."""
        result: dict[str, Any] = {
            "command": self.command,
            "args": list(self.args),
        }
        if self.enabled is not None:
            result["enabled"] = self.enabled
        if self.env_vars:
            result["env_vars"] = list(self.env_vars)
        return result


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a single install/uninstall against one config file.

    ABOUTME: Truthy on success so simple call sites can treat it as a bool
    ABOUTME: error explains a failure, warning reports a recoverable surprise
    ABOUTME: path is None when no config file was resolved for the target
    """
    success: bool
    path: Path | None
    error: str | None = None
    warning: str | None = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, path: Path, warning: str | None = None) -> "OperationResult":
        return cls(success=True, path=path, warning=warning)

    @classmethod
    def fail(cls, path: Path | None, error: str) -> "OperationResult":
        return cls(success=False, path=path, error=error)
