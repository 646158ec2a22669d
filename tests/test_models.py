# ABOUTME: Tests for core data models.
# ABOUTME: Covers ServerEntry serialization and OperationResult truthiness.
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from arbmcp.models import OperationResult, PlatformDescriptor, ServerEntry


class TestServerEntry:
    """Tests for ServerEntry dataclass."""

    def test_minimal_to_dict(self):
        entry = ServerEntry(command="npx", args=("-y", "pkg"))
        assert entry.to_dict() == {"command": "npx", "args": ["-y", "pkg"]}

    def test_args_serialize_as_list(self):
        entry = ServerEntry(command="npx", args=("serve",))
        assert isinstance(entry.to_dict()["args"], list)

    def test_enabled_false_is_kept(self):
        """enabled=False is a value, only None is omitted."""
        entry = ServerEntry(command="npx", enabled=False)
        assert entry.to_dict()["enabled"] is False

    def test_empty_env_vars_omitted(self):
        entry = ServerEntry(command="npx", enabled=True)
        assert "env_vars" not in entry.to_dict()

    def test_frozen(self):
        entry = ServerEntry(command="npx")
        with pytest.raises(FrozenInstanceError):
            entry.command = "node"


class TestOperationResult:
    """Tests for OperationResult."""

    def test_ok_is_truthy(self, tmp_path: Path):
        result = OperationResult.ok(tmp_path / "a.json")
        assert result
        assert result.success is True
        assert result.error is None

    def test_fail_is_falsy(self, tmp_path: Path):
        result = OperationResult.fail(tmp_path / "a.json", "boom")
        assert not result
        assert result.error == "boom"

    def test_ok_with_warning(self, tmp_path: Path):
        result = OperationResult.ok(tmp_path / "a.json", warning="reset")
        assert result
        assert result.warning == "reset"


def test_platform_descriptor_defaults():
    descriptor = PlatformDescriptor(
        id="x",
        name="X",
        format="json",
        config_key="mcpServers",
        global_paths={"darwin": "~/x", "win32": "~/x", "linux": "~/x"},
        local_path=".x/mcp.json",
    )
    assert descriptor.forward_env is False
    assert descriptor.detect_paths == {}
