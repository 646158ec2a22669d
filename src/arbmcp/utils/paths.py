# Platform path template resolution
import ntpath
import os
import posixpath
import sys
from collections.abc import Mapping
from pathlib import Path

from arbmcp.models import ConfigError, OSName


def current_os() -> OSName:
    """Return the OS identifier used to pick global path templates.

    ABOUTME: Unknown platforms (BSDs, cygwin, ...) fall back to linux
    """
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform == "win32":
        return "win32"
    return "linux"


def expand_template(
    template: str,
    os_name: OSName,
    home: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Expand a path template for the given OS.

    ABOUTME: A leading ~ becomes the home directory on every OS
    ABOUTME: %APPDATA%, %USERPROFILE%, %LOCALAPPDATA% are expanded on win32 only

    Args:
        template: Path template, e.g. "~/.cursor/mcp.json"
        os_name: Target OS identifier
        home: Home directory (defaults to Path.home())
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Expanded path string normalized for the target OS

    Examples:
        >>> expand_template("~/.codex/config.toml", "linux", home="/home/al")
        '/home/al/.codex/config.toml'
        >>> expand_template("%APPDATA%/Claude/x.json", "win32", environ={"APPDATA": "C:\\\\AD"})
        'C:\\\\AD\\\\Claude\\\\x.json'
    """
    home_dir = str(home) if home is not None else str(Path.home())
    env = environ if environ is not None else os.environ

    resolved = template
    if resolved.startswith("~"):
        resolved = home_dir + resolved[1:]

    if os_name == "win32":
        resolved = resolved.replace("%APPDATA%", env.get("APPDATA", ""))
        resolved = resolved.replace("%USERPROFILE%", env.get("USERPROFILE") or home_dir)
        resolved = resolved.replace("%LOCALAPPDATA%", env.get("LOCALAPPDATA", ""))
        return ntpath.normpath(resolved)

    return posixpath.normpath(resolved)


def resolve(
    template: str,
    os_name: OSName,
    home: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Resolve a path template into a Path for the given OS."""
    return Path(expand_template(template, os_name, home=home, environ=environ))


def resolve_local(template: str, cwd: str | Path | None = None) -> Path:
    """Join a project-relative template onto the working directory.

    ABOUTME: No home or environment expansion for local templates
    """
    base = Path(cwd) if cwd is not None else Path.cwd()
    return base / template


def resolve_global(
    templates: Mapping[str, str],
    os_name: OSName | None = None,
    home: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Pick the template for the OS and resolve it.

    Raises:
        ConfigError: If no template is registered for the OS
    """
    target = os_name or current_os()
    template = templates.get(target)
    if not template:
        raise ConfigError(f"Unsupported platform: {target}")
    return resolve(template, target, home=home, environ=environ)
