# Generated server entry for platform configs
from dataclasses import dataclass

from arbmcp.models import ServerEntry

# ABOUTME: Key under config_key that this tool owns
SERVER_NAME = "arbitrum"

# ABOUTME: Published package name used by the package runner
PACKAGE_NAME = "arbitrum-mcp-tools"

# ABOUTME: Variable names a sandboxed shell must forward to the server process
FORWARDED_ENV_VARS: tuple[str, ...] = (
    "ALCHEMY_API_KEY",
    "ARBISCAN_API_KEY",
    "STYLUS_PRIVATE_KEY",
    "STYLUS_PRIVATE_KEY_PATH",
    "STYLUS_KEYSTORE_PATH",
)


@dataclass(frozen=True)
class Launcher:
    """How a platform should invoke the packaged CLI.

    ABOUTME: command plus the arguments placed before the subcommand
    """
    command: str
    prefix: tuple[str, ...]

    def args_for(self, subcommand: str) -> tuple[str, ...]:
        return (*self.prefix, subcommand)


NPX_LAUNCHER = Launcher(command="npx", prefix=("-y", PACKAGE_NAME))


def build_json_entry(launcher: Launcher = NPX_LAUNCHER) -> ServerEntry:
    """Build the entry written to JSON platforms.

    ABOUTME: No env block, the server reads secrets from its own environment
    """
    return ServerEntry(command=launcher.command, args=launcher.args_for("serve"))


def build_toml_entry(
    forward_env: bool = False,
    launcher: Launcher = NPX_LAUNCHER,
) -> ServerEntry:
    """Build the entry written to TOML platforms.

    ABOUTME: Always enabled; env_vars only when the platform sandboxes the environment

    Args:
        forward_env: Include the FORWARDED_ENV_VARS name list
        launcher: Package invocation convention

    Returns:
        ServerEntry carrying only variable names, never values
    """
    return ServerEntry(
        command=launcher.command,
        args=launcher.args_for("serve"),
        enabled=True,
        env_vars=FORWARDED_ENV_VARS if forward_env else (),
    )
