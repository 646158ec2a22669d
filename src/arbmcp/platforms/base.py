# Config codec base: format-independent install/uninstall logic
import logging
import os
import shutil
from pathlib import Path
from typing import Any

from arbmcp.config import get_backup_dir
from arbmcp.entry import SERVER_NAME
from arbmcp.models import ConfigFormat, OperationResult, ServerEntry
from arbmcp.utils.backup import create_backup

logger = logging.getLogger(__name__)

# ABOUTME: Errors a codec turns into a failed OperationResult
# ABOUTME: ValueError covers JSONDecodeError, TOMLDecodeError and UnicodeDecodeError
CODEC_ERRORS = (OSError, TypeError, ValueError)


class ConfigCodec:
    """Read, write and edit one platform config file format.

    ABOUTME: Subclasses provide parse(), dump() and build_entry()
    ABOUTME: Every document is re-read from disk; nothing is cached
    ABOUTME: Only document[config_key]["arbitrum"] is interpreted, the rest round-trips
    """

    format: ConfigFormat

    def __init__(self, backup_dir: Path | None = None) -> None:
        """Initialize codec with optional backup directory.

        ABOUTME: Defaults to ~/.arbitrum-mcp/backups, resolved when first needed
        """
        self._backup_dir = backup_dir

    @property
    def backup_dir(self) -> Path:
        return self._backup_dir if self._backup_dir is not None else get_backup_dir()

    def parse(self, text: str) -> dict[str, Any]:
        """Parse file content into a document, raising ValueError if invalid."""
        raise NotImplementedError

    def dump(self, document: dict[str, Any]) -> str:
        """Serialize a document to file content."""
        raise NotImplementedError

    def build_entry(self, forward_env: bool = False) -> ServerEntry:
        """Generate the server entry for this format."""
        raise NotImplementedError

    def _load(self, path: Path) -> tuple[dict[str, Any], bool]:
        """Load a document and report whether the file was unparsable.

        ABOUTME: Missing file -> ({}, False); invalid content -> ({}, True)
        ABOUTME: Raises OSError if an existing file cannot be read
        """
        if not path.exists():
            return {}, False

        raw = path.read_bytes()
        try:
            return self.parse(raw.decode("utf-8-sig")), False
        except ValueError as e:
            logger.warning(f"Invalid {self.format.upper()} in {path}: {e}")
            return {}, True

    def read(self, path: Path) -> dict[str, Any]:
        """Read a config document.

        ABOUTME: Never raises: missing, unreadable or corrupt files read as {}
        ABOUTME: Callers cannot tell "missing" from "corrupt" at this layer
        """
        try:
            document, _corrupt = self._load(path)
        except OSError as e:
            logger.warning(f"Could not read {path}: {e}")
            return {}
        return document

    def write(self, path: Path, document: dict[str, Any]) -> None:
        """Write a config document.

        ABOUTME: Creates parent directories if needed
        ABOUTME: Serializes first, then writes a sibling temp file and renames it over path
        ABOUTME: Symlinks are followed and the existing file mode is kept

        Raises:
            OSError: If the file cannot be written
            TypeError: If the document holds values the format cannot represent
        """
        content = self.dump(document)

        target = path.resolve()
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = target.with_name(f".{target.name}.tmp")
        try:
            tmp_path.write_text(content, encoding="utf-8")
            if target.exists():
                shutil.copymode(target, tmp_path)
            os.replace(tmp_path, target)
        finally:
            tmp_path.unlink(missing_ok=True)

    def add_server_entry(
        self,
        path: Path,
        config_key: str,
        forward_env: bool = False,
        backup_label: str | None = None,
    ) -> OperationResult:
        """Install the arbitrum entry under document[config_key].

        ABOUTME: Overwrites any existing arbitrum entry (no field merge)
        ABOUTME: Replaces config_key if it is missing or not a mapping
        ABOUTME: A corrupt file is backed up, then reset and rewritten

        Args:
            path: Config file path
            config_key: Key holding the server mapping, e.g. "mcpServers"
            forward_env: Add env_vars forwarding list (TOML sandboxed platforms)
            backup_label: Prefix for the backup file if the config must be reset

        Returns:
            OperationResult; warning is set when a corrupt file was reset
        """
        warning: str | None = None
        try:
            document, corrupt = self._load(path)

            if corrupt:
                backup_path = create_backup(path, self.backup_dir, backup_label)
                warning = f"config file was invalid and has been reset (backup: {backup_path})"
                logger.warning(f"{path}: {warning}")

            servers = document.get(config_key)
            if not isinstance(servers, dict):
                servers = {}
                document[config_key] = servers

            servers[SERVER_NAME] = self.build_entry(forward_env).to_dict()

            self.write(path, document)
        except CODEC_ERRORS as e:
            logger.error(f"Error adding {SERVER_NAME} to {path}: {e}")
            return OperationResult.fail(path, str(e))

        logger.info(f"Added {SERVER_NAME} to {path}")
        return OperationResult.ok(path, warning=warning)

    def remove_server_entry(self, path: Path, config_key: str) -> OperationResult:
        """Remove the arbitrum entry from document[config_key].

        ABOUTME: Drops config_key entirely once it holds no other servers
        ABOUTME: Never creates the file and never writes when nothing was removed
        """
        if not path.exists():
            return OperationResult.fail(path, f"Config file not found: {path}")

        try:
            document, _corrupt = self._load(path)

            servers = document.get(config_key)
            if not isinstance(servers, dict) or SERVER_NAME not in servers:
                return OperationResult.fail(
                    path, f"'{SERVER_NAME}' is not installed under '{config_key}'"
                )

            del servers[SERVER_NAME]

            # Clean up empty config_key
            if not servers:
                del document[config_key]

            self.write(path, document)
        except CODEC_ERRORS as e:
            logger.error(f"Error removing {SERVER_NAME} from {path}: {e}")
            return OperationResult.fail(path, str(e))

        logger.info(f"Removed {SERVER_NAME} from {path}")
        return OperationResult.ok(path)

    def is_server_installed(self, path: Path, config_key: str) -> bool:
        """Return True iff the file parses and holds an arbitrum entry under config_key."""
        try:
            document, _corrupt = self._load(path)
        except OSError:
            return False

        servers = document.get(config_key)
        return isinstance(servers, dict) and SERVER_NAME in servers
