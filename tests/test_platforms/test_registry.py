# Tests for the platform registry
from dataclasses import replace

import pytest

from arbmcp.models import SUPPORTED_OS, ConfigError, PlatformDescriptor
from arbmcp.platforms import PLATFORMS, PlatformRegistry, default_registry, get_codec


def make_descriptor(**overrides) -> PlatformDescriptor:
    fields = dict(
        id="fakeclient",
        name="Fake Client",
        format="json",
        config_key="mcpServers",
        global_paths={os_name: "~/.fakeclient/mcp.json" for os_name in SUPPORTED_OS},
        local_path=".fakeclient/mcp.json",
    )
    fields.update(overrides)
    return PlatformDescriptor(**fields)


class TestBuiltInPlatforms:
    def test_ids_in_registration_order(self) -> None:
        assert default_registry().ids() == [
            "claude-desktop",
            "claude-code",
            "cursor",
            "windsurf",
            "vscode",
            "gemini",
            "roo-code",
            "codex",
        ]

    def test_every_platform_has_all_templates(self) -> None:
        for descriptor in PLATFORMS:
            for os_name in SUPPORTED_OS:
                assert descriptor.global_paths[os_name], (descriptor.id, os_name)
            assert descriptor.local_path
            assert not descriptor.local_path.startswith(("/", "~"))

    def test_every_platform_has_detection_probes(self) -> None:
        for descriptor in PLATFORMS:
            assert descriptor.detect_paths, descriptor.id

    def test_config_keys(self) -> None:
        registry = default_registry()
        assert registry.get("vscode").config_key == "servers"
        assert registry.get("codex").config_key == "mcp_servers"
        assert registry.get("cursor").config_key == "mcpServers"

    def test_only_codex_is_toml_and_forwards_env(self) -> None:
        toml_ids = [d.id for d in PLATFORMS if d.format == "toml"]
        forwarding_ids = [d.id for d in PLATFORMS if d.forward_env]
        assert toml_ids == ["codex"]
        assert forwarding_ids == ["codex"]

    def test_windows_paths(self) -> None:
        registry = default_registry()
        assert registry.get("claude-desktop").global_paths["win32"].startswith("%APPDATA%")
        assert registry.get("windsurf").global_paths["win32"].startswith("%USERPROFILE%")

    def test_codec_exists_for_every_format(self) -> None:
        for descriptor in PLATFORMS:
            assert get_codec(descriptor.format).format == descriptor.format


class TestPlatformRegistry:
    def test_lookup(self) -> None:
        descriptor = make_descriptor()
        registry = PlatformRegistry([descriptor])

        assert registry.get("fakeclient") is descriptor
        assert registry.get("missing") is None
        assert "fakeclient" in registry
        assert "missing" not in registry
        assert len(registry) == 1
        assert list(registry) == [descriptor]

    def test_duplicate_ids_rejected(self) -> None:
        with pytest.raises(ConfigError, match="Duplicate platform id"):
            PlatformRegistry([make_descriptor(), make_descriptor(name="Other")])

    def test_missing_os_template_rejected(self) -> None:
        descriptor = make_descriptor(global_paths={"darwin": "~/x", "linux": "~/x"})
        with pytest.raises(ConfigError, match="win32"):
            PlatformRegistry([descriptor])

    def test_empty_os_template_rejected(self) -> None:
        descriptor = make_descriptor(global_paths={"darwin": "~/x", "win32": "", "linux": "~/x"})
        with pytest.raises(ConfigError):
            PlatformRegistry([descriptor])

    def test_empty_local_template_rejected(self) -> None:
        with pytest.raises(ConfigError, match="relative local path"):
            PlatformRegistry([make_descriptor(local_path="")])

    def test_absolute_local_template_rejected(self) -> None:
        with pytest.raises(ConfigError):
            PlatformRegistry([make_descriptor(local_path="/etc/mcp.json")])

    def test_unknown_format_rejected(self) -> None:
        with pytest.raises(ConfigError, match="unknown format"):
            PlatformRegistry([make_descriptor(format="yaml")])

    def test_registry_cannot_be_mutated_through_ids(self) -> None:
        registry = PlatformRegistry([make_descriptor()])
        registry.ids().append("sneaky")
        assert registry.ids() == ["fakeclient"]

    def test_descriptors_are_frozen(self) -> None:
        descriptor = make_descriptor()
        changed = replace(descriptor, name="Renamed")
        assert descriptor.name == "Fake Client"
        assert changed.name == "Renamed"


def test_get_codec_unknown_format() -> None:
    with pytest.raises(ConfigError):
        get_codec("yaml")
