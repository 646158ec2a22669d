# Configuration loading for arbmcp
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from arbmcp.models import ConfigError

logger = logging.getLogger(__name__)

# ABOUTME: Directory name under the user's home for arbmcp's own files
DATA_DIR_NAME = ".arbitrum-mcp"

# ABOUTME: Environment variables read by the served process
ALCHEMY_API_KEY_ENV = "ALCHEMY_API_KEY"
ARBISCAN_API_KEY_ENV = "ARBISCAN_API_KEY"
STYLUS_CREDENTIAL_ENVS = (
    "STYLUS_PRIVATE_KEY",
    "STYLUS_PRIVATE_KEY_PATH",
    "STYLUS_KEYSTORE_PATH",
)
RPC_URL_ENV = "ARBITRUM_MCP_RPC_URL"
HTTP_TIMEOUT_ENV = "ARBITRUM_MCP_HTTP_TIMEOUT"
LOG_LEVEL_ENV = "ARBITRUM_MCP_LOG_LEVEL"

ALCHEMY_ARBITRUM_URL = "https://arb-mainnet.g.alchemy.com/v2/{api_key}"
DEFAULT_HTTP_TIMEOUT = 15.0


def get_data_dir() -> Path:
    """Return the arbmcp data directory path.

    ABOUTME: Returns ~/.arbitrum-mcp, evaluated on each call
    ABOUTME: Does not create the directory

    Returns:
        Path to data directory
    """
    return Path.home() / DATA_DIR_NAME


def get_backup_dir() -> Path:
    """Return the directory holding copies of config files that were reset."""
    return get_data_dir() / "backups"


@dataclass(frozen=True)
class ServerSettings:
    """Runtime settings for the MCP server process.

    ABOUTME: Secrets come from the process environment at start time only
    ABOUTME: __repr__ masks every secret so settings can be logged safely
    """
    alchemy_api_key: str
    arbiscan_api_key: str | None = None
    stylus_private_key: str | None = None
    stylus_private_key_path: str | None = None
    stylus_keystore_path: str | None = None
    rpc_url_override: str | None = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @property
    def rpc_url(self) -> str:
        """JSON-RPC endpoint for Arbitrum One."""
        if self.rpc_url_override:
            return self.rpc_url_override
        return ALCHEMY_ARBITRUM_URL.format(api_key=self.alchemy_api_key)

    @property
    def stylus_credentials(self) -> list[str]:
        """Names of the Stylus credential variables that are set."""
        values = (
            self.stylus_private_key,
            self.stylus_private_key_path,
            self.stylus_keystore_path,
        )
        return [name for name, value in zip(STYLUS_CREDENTIAL_ENVS, values) if value]

    def __repr__(self) -> str:
        return (
            f"ServerSettings(rpc_url={self._masked_url()!r}, "
            f"arbiscan={'set' if self.arbiscan_api_key else 'unset'}, "
            f"stylus={self.stylus_credentials}, http_timeout={self.http_timeout})"
        )

    def _masked_url(self) -> str:
        return self.rpc_url.replace(self.alchemy_api_key, "***")


def _optional(env: Mapping[str, str], name: str) -> str | None:
    value = env.get(name, "").strip()
    return value or None


def _load_timeout(env: Mapping[str, str]) -> float:
    raw_timeout = env.get(HTTP_TIMEOUT_ENV)
    if raw_timeout:
        try:
            return float(raw_timeout)
        except ValueError:
            logger.warning(f"Ignoring invalid {HTTP_TIMEOUT_ENV}={raw_timeout!r}")
    return DEFAULT_HTTP_TIMEOUT


def load_settings(environ: Mapping[str, str] | None = None) -> ServerSettings:
    """Load server settings from environment variables.

    ABOUTME: Fail-fast when ALCHEMY_API_KEY is missing
    ABOUTME: Warns when more than one Stylus credential is configured

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Parsed ServerSettings

    Raises:
        ConfigError: If ALCHEMY_API_KEY is not set
    """
    env = environ if environ is not None else os.environ

    api_key = _optional(env, ALCHEMY_API_KEY_ENV)
    if api_key is None:
        raise ConfigError(f"{ALCHEMY_API_KEY_ENV} environment variable is required")

    private_key, private_key_path, keystore_path = (
        _optional(env, name) for name in STYLUS_CREDENTIAL_ENVS
    )

    settings = ServerSettings(
        alchemy_api_key=api_key,
        arbiscan_api_key=_optional(env, ARBISCAN_API_KEY_ENV),
        stylus_private_key=private_key,
        stylus_private_key_path=private_key_path,
        stylus_keystore_path=keystore_path,
        rpc_url_override=_optional(env, RPC_URL_ENV),
        http_timeout=_load_timeout(env),
    )

    if len(settings.stylus_credentials) > 1:
        names = ", ".join(settings.stylus_credentials)
        logger.warning(f"Multiple Stylus credentials set ({names}); only one is expected")

    return settings
