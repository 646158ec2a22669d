# ABOUTME: Tests for best-effort application detection.
# ABOUTME: Probes are resolved against a temporary home directory.
from arbmcp.models import SUPPORTED_OS, PlatformDescriptor
from arbmcp.platforms import default_registry
from arbmcp.utils.detect import detection_templates, is_app_installed


def make_descriptor(detect_paths) -> PlatformDescriptor:
    return PlatformDescriptor(
        id="fakeclient",
        name="Fake Client",
        format="json",
        config_key="mcpServers",
        global_paths={os_name: "~/.fakeclient/mcp.json" for os_name in SUPPORTED_OS},
        local_path=".fakeclient/mcp.json",
        detect_paths=detect_paths,
    )


class TestDetectionTemplates:
    def test_os_specific_wins(self):
        descriptor = make_descriptor({"darwin": ("/Applications/X.app",), "*": ("~/.x",)})
        assert detection_templates(descriptor, "darwin") == ("/Applications/X.app",)

    def test_falls_back_to_wildcard(self):
        descriptor = make_descriptor({"darwin": ("/Applications/X.app",), "*": ("~/.x",)})
        assert detection_templates(descriptor, "linux") == ("~/.x",)

    def test_no_probes(self):
        assert detection_templates(make_descriptor({}), "linux") == ()


class TestIsAppInstalled:
    def test_detected_when_probe_exists(self, tmp_path):
        (tmp_path / ".fakeclient").mkdir()
        descriptor = make_descriptor({"*": ("~/.fakeclient",)})

        assert is_app_installed(descriptor, os_name="linux", home=tmp_path) is True

    def test_not_detected_when_nothing_exists(self, tmp_path):
        descriptor = make_descriptor({"*": ("~/.fakeclient",)})

        assert is_app_installed(descriptor, os_name="linux", home=tmp_path) is False

    def test_any_probe_is_enough(self, tmp_path):
        (tmp_path / ".claude").mkdir()
        (tmp_path / ".claude" / "settings.json").write_text("{}")
        descriptor = make_descriptor({"*": ("~/.claude.json", "~/.claude/settings.json")})

        assert is_app_installed(descriptor, os_name="linux", home=tmp_path) is True

    def test_unset_windows_variable_is_skipped(self, tmp_path, monkeypatch):
        """%APPDATA% unset expands to a relative path that must not be probed."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "Claude").mkdir()
        descriptor = make_descriptor({"win32": ("%APPDATA%/Claude",)})

        assert is_app_installed(descriptor, os_name="win32", home=tmp_path, environ={}) is False

    def test_builtin_codex_detected(self, tmp_path):
        (tmp_path / ".codex").mkdir()
        codex = default_registry().get("codex")

        assert is_app_installed(codex, os_name="linux", home=tmp_path) is True

    def test_builtin_cursor_not_detected_in_empty_home(self, tmp_path):
        cursor = default_registry().get("cursor")

        assert is_app_installed(cursor, os_name="linux", home=tmp_path) is False
