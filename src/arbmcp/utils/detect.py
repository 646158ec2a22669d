# Best-effort detection of installed MCP client applications
import logging
from collections.abc import Mapping
from pathlib import Path, PurePosixPath, PureWindowsPath

from arbmcp.models import OSName, PlatformDescriptor
from arbmcp.utils.paths import current_os, expand_template

logger = logging.getLogger(__name__)


def detection_templates(descriptor: PlatformDescriptor, os_name: OSName) -> tuple[str, ...]:
    """Return the probe templates for an OS, falling back to the "*" entry."""
    templates = descriptor.detect_paths.get(os_name)
    if templates is None:
        templates = descriptor.detect_paths.get("*", ())
    return templates


def _is_absolute(expanded: str, os_name: OSName) -> bool:
    if os_name == "win32":
        return PureWindowsPath(expanded).is_absolute()
    return PurePosixPath(expanded).is_absolute()


def is_app_installed(
    descriptor: PlatformDescriptor,
    os_name: OSName | None = None,
    home: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> bool:
    """Guess whether the client application exists on this machine.

    ABOUTME: True if any probe path exists (app bundle, data dir or config file)
    ABOUTME: Probes relying on an unset %VAR% expand to relative paths and are skipped
    ABOUTME: Purely informational, never blocks install or uninstall

    Args:
        descriptor: Platform to probe for
        os_name: Target OS (defaults to the running OS)
        home: Home directory (defaults to Path.home())
        environ: Environment mapping (defaults to os.environ)

    Returns:
        True if the application looks installed
    """
    target = os_name or current_os()

    for template in detection_templates(descriptor, target):
        expanded = expand_template(template, target, home=home, environ=environ)
        if not _is_absolute(expanded, target):
            logger.debug(f"Skipping {descriptor.id} probe {template}: expands to {expanded}")
            continue

        try:
            if Path(expanded).exists():
                return True
        except OSError as e:
            logger.debug(f"Could not probe {expanded}: {e}")

    return False
