# ABOUTME: Backup copies of platform config files that are about to be reset.
# ABOUTME: Timestamped names with retention cleanup (keep last 5 per label).
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

MAX_BACKUPS_PER_LABEL = 5

# ABOUTME: Matches {label}_{YYYYMMDD}_{HHMMSS}.{ext}, e.g. codex_20260108_143022.toml
BACKUP_PATTERN = re.compile(r"^(.+?)_(\d{8}_\d{6})\.(.+)$")

_UNSAFE_LABEL_CHARS = re.compile(r"[^A-Za-z0-9.-]+")


def backup_label_for(source_path: Path) -> str:
    """Derive a backup label from a config file name.

    ABOUTME: ~/.claude.json -> claude, settings.json -> settings
    """
    stem = source_path.name.lstrip(".").split(".")[0]
    return _UNSAFE_LABEL_CHARS.sub("-", stem) or "config"


def create_backup(source_path: Path, backup_dir: Path, label: str | None = None) -> Path:
    """Create a timestamped backup of a file.

    ABOUTME: Backup format: {label}_{YYYYMMDD}_{HHMMSS}{ext}
    ABOUTME: Uses shutil.copy2() to preserve file metadata
    ABOUTME: Creates backup_dir if it doesn't exist

    Args:
        source_path: Path to file to backup
        backup_dir: Directory where backup should be created
        label: Name prefix, usually the platform id (derived from the file name if omitted)

    Returns:
        Path to created backup file

    Raises:
        FileNotFoundError: If source_path doesn't exist
        OSError: If backup creation fails

    Examples:
        >>> backup_path = create_backup(Path("~/.codex/config.toml").expanduser(), backup_dir, "codex")
        >>> backup_path.name
        'codex_20260108_143022.toml'
    """
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {source_path}")

    backup_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    prefix = _UNSAFE_LABEL_CHARS.sub("-", label) if label else backup_label_for(source_path)
    extension = source_path.suffix or ".bak"
    backup_path = backup_dir / f"{prefix}_{timestamp}{extension}"

    shutil.copy2(source_path, backup_path)
    logger.info(f"Backed up {source_path} to {backup_path}")

    cleanup_old_backups(backup_dir)

    return backup_path


def cleanup_old_backups(
    backup_dir: Path,
    max_backups_per_label: int = MAX_BACKUPS_PER_LABEL,
) -> list[Path]:
    """Remove old backup files, keeping only the most recent per label.

    ABOUTME: Groups backups by label prefix (before _timestamp)
    ABOUTME: Logs warnings on errors but does not raise exceptions

    Args:
        backup_dir: Directory containing backup files
        max_backups_per_label: Maximum backups to keep per label (default 5)

    Returns:
        List of paths that were deleted
    """
    deleted_files: list[Path] = []

    if not backup_dir.exists():
        return deleted_files

    backups_by_label: dict[str, list[tuple[str, Path]]] = {}

    for file_path in backup_dir.iterdir():
        if not file_path.is_file():
            continue

        match = BACKUP_PATTERN.match(file_path.name)
        if not match:
            continue

        backups_by_label.setdefault(match.group(1), []).append((match.group(2), file_path))

    for backups in backups_by_label.values():
        # Newest first
        backups.sort(key=lambda x: x[0], reverse=True)

        for _timestamp, file_path in backups[max_backups_per_label:]:
            try:
                file_path.unlink()
                deleted_files.append(file_path)
                logger.debug(f"Deleted old backup: {file_path}")
            except OSError as e:
                logger.warning(f"Failed to delete old backup {file_path}: {e}")

    return deleted_files
