# ABOUTME: Tests for the Installer orchestration layer.
# ABOUTME: Uses a fake registry with a temporary home and working directory.
import json
from pathlib import Path

import pytest
import tomli

from arbmcp.models import SUPPORTED_OS, ConfigError, PlatformDescriptor
from arbmcp.operations import BatchReport, Installer
from arbmcp.platforms import PlatformRegistry, default_registry

ENTRY = {"command": "npx", "args": ["-y", "arbitrum-mcp-tools", "serve"]}


def everywhere(template: str) -> dict[str, str]:
    return {os_name: template for os_name in SUPPORTED_OS}


FAKE_JSON = PlatformDescriptor(
    id="fakeclient",
    name="Fake Client",
    format="json",
    config_key="mcpServers",
    global_paths=everywhere("~/.fakeclient/mcp.json"),
    local_path=".fakeclient/mcp.json",
    detect_paths={"*": ("~/.fakeclient",)},
)

FAKE_TOML = PlatformDescriptor(
    id="faketoml",
    name="Fake TOML",
    format="toml",
    config_key="mcp_servers",
    global_paths=everywhere("~/.faketoml/config.toml"),
    local_path=".faketoml/config.toml",
    forward_env=True,
)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def installer(tmp_path: Path, home: Path, project: Path) -> Installer:
    return Installer(
        PlatformRegistry([FAKE_JSON, FAKE_TOML]),
        cwd=project,
        home=home,
        environ={},
        os_name="linux",
        backup_dir=tmp_path / "backups",
    )


class TestConfigPath:
    def test_global(self, installer: Installer, home: Path) -> None:
        assert installer.config_path(FAKE_JSON, "global") == home / ".fakeclient" / "mcp.json"

    def test_local(self, installer: Installer, project: Path) -> None:
        assert installer.config_path(FAKE_JSON, "local") == project / ".fakeclient" / "mcp.json"

    def test_windows_appdata(self, tmp_path: Path) -> None:
        installer = Installer(
            default_registry(),
            home="C:\\Users\\al",
            environ={"APPDATA": "C:\\Users\\al\\AppData\\Roaming"},
            os_name="win32",
        )
        path = installer.config_path(default_registry().get("claude-desktop"), "global")
        assert str(path).endswith("claude_desktop_config.json")
        assert "AppData" in str(path)

    def test_unknown_scope_raises(self, installer: Installer) -> None:
        with pytest.raises(ConfigError):
            installer.config_path(FAKE_JSON, "system")


class TestInstall:
    def test_fresh_global_install(self, installer: Installer, home: Path) -> None:
        result = installer.install(FAKE_JSON, "global")

        path = home / ".fakeclient" / "mcp.json"
        assert result
        assert result.path == path
        assert json.loads(path.read_text()) == {"mcpServers": {"arbitrum": ENTRY}}

    def test_local_install_does_not_touch_home(
        self, installer: Installer, home: Path, project: Path
    ) -> None:
        assert installer.install(FAKE_JSON, "local")

        assert (project / ".fakeclient" / "mcp.json").exists()
        assert not (home / ".fakeclient").exists()

    def test_toml_platform_forwards_env(self, installer: Installer, home: Path) -> None:
        assert installer.install(FAKE_TOML, "global")

        data = tomli.loads((home / ".faketoml" / "config.toml").read_text())
        assert data["mcp_servers"]["arbitrum"]["env_vars"][0] == "ALCHEMY_API_KEY"

    def test_corrupt_file_backup_uses_platform_id(
        self, installer: Installer, home: Path, tmp_path: Path
    ) -> None:
        path = home / ".fakeclient" / "mcp.json"
        path.parent.mkdir()
        path.write_text("{broken")

        result = installer.install(FAKE_JSON, "global")

        assert result
        assert result.warning
        assert len(list((tmp_path / "backups").glob("fakeclient_*.json"))) == 1

    def test_failure_is_returned_not_raised(self, installer: Installer, home: Path) -> None:
        (home / ".fakeclient").write_text("a file, not a directory")

        result = installer.install(FAKE_JSON, "global")

        assert not result
        assert result.error

    def test_codec_exception_becomes_failure(self, home: Path) -> None:
        class ExplodingCodec:
            format = "json"

            def add_server_entry(self, *args, **kwargs):
                raise RuntimeError("kaboom")

        installer = Installer(
            PlatformRegistry([FAKE_JSON]),
            codecs={"json": ExplodingCodec()},
            home=home,
            os_name="linux",
        )

        result = installer.install(FAKE_JSON, "global")

        assert not result
        assert result.error == "kaboom"

    def test_missing_os_template_raises(self, home: Path) -> None:
        """Registry bypass: a descriptor with no darwin template fails loudly."""
        broken = PlatformDescriptor(
            id="broken",
            name="Broken",
            format="json",
            config_key="mcpServers",
            global_paths={"linux": "~/.broken.json"},
            local_path=".broken.json",
        )
        installer = Installer(PlatformRegistry([FAKE_JSON]), home=home, os_name="darwin")

        with pytest.raises(ConfigError, match="Unsupported platform: darwin"):
            installer.install(broken, "global")


class TestUninstall:
    def test_uninstall_after_install(self, installer: Installer, home: Path) -> None:
        installer.install(FAKE_JSON, "global")

        result = installer.uninstall(FAKE_JSON, "global")

        assert result
        assert json.loads((home / ".fakeclient" / "mcp.json").read_text()) == {}

    def test_uninstall_not_installed(self, installer: Installer, home: Path) -> None:
        result = installer.uninstall(FAKE_JSON, "global")

        assert not result
        assert not (home / ".fakeclient" / "mcp.json").exists()


class TestStatus:
    def test_is_installed(self, installer: Installer) -> None:
        assert installer.is_installed(FAKE_JSON, "global") is False
        installer.install(FAKE_JSON, "global")
        assert installer.is_installed(FAKE_JSON, "global") is True
        assert installer.is_installed(FAKE_JSON, "local") is False

    def test_is_installed_swallows_config_errors(self, home: Path) -> None:
        broken = PlatformDescriptor(
            id="broken",
            name="Broken",
            format="json",
            config_key="mcpServers",
            global_paths={"linux": "~/.broken.json"},
            local_path=".broken.json",
        )
        installer = Installer(PlatformRegistry([FAKE_JSON]), home=home, os_name="win32")

        assert installer.is_installed(broken, "global") is False

    def test_is_detected(self, installer: Installer, home: Path) -> None:
        assert installer.is_detected(FAKE_JSON) is False
        (home / ".fakeclient").mkdir()
        assert installer.is_detected(FAKE_JSON) is True

    def test_detection_does_not_gate_install(self, installer: Installer) -> None:
        assert installer.is_detected(FAKE_TOML) is False
        assert installer.install(FAKE_TOML, "global")

    def test_installations_order(self, installer: Installer) -> None:
        installer.install(FAKE_TOML, "local")
        installer.install(FAKE_JSON, "local")
        installer.install(FAKE_JSON, "global")

        found = [(d.id, scope) for d, scope in installer.installations()]

        assert found == [
            ("fakeclient", "global"),
            ("fakeclient", "local"),
            ("faketoml", "local"),
        ]


class TestBatch:
    def test_install_many(self, installer: Installer) -> None:
        report = installer.install_many(["fakeclient", "faketoml"], "global")

        assert isinstance(report, BatchReport)
        assert [item.platform for item in report.succeeded] == ["fakeclient", "faketoml"]
        assert report.failed == []
        assert report.any_succeeded

    def test_unknown_platform_recorded_as_failure(self, installer: Installer) -> None:
        report = installer.install_many(["nope", "fakeclient"], "global")

        assert [item.platform for item in report.failed] == ["nope"]
        assert "Unknown platform" in report.failed[0].result.error
        assert report.failed[0].result.path is None
        assert [item.platform for item in report.succeeded] == ["fakeclient"]

    def test_one_failure_does_not_stop_the_batch(self, installer: Installer, home: Path) -> None:
        (home / ".fakeclient").write_text("blocks the config directory")

        report = installer.install_many(["fakeclient", "faketoml"], "global")

        assert [item.platform for item in report.failed] == ["fakeclient"]
        assert [item.platform for item in report.succeeded] == ["faketoml"]
        assert report.any_succeeded

    def test_all_failed(self, installer: Installer) -> None:
        report = installer.uninstall_many([("fakeclient", "global"), ("faketoml", "local")])

        assert len(report.failed) == 2
        assert not report.any_succeeded

    def test_uninstall_many(self, installer: Installer) -> None:
        installer.install_many(["fakeclient", "faketoml"], "local")

        report = installer.uninstall_many([("fakeclient", "local"), ("faketoml", "local")])

        assert len(report.succeeded) == 2
        assert installer.installations() == []

    def test_config_error_isolated_to_target(self, home: Path) -> None:
        broken = PlatformDescriptor(
            id="broken",
            name="Broken",
            format="json",
            config_key="mcpServers",
            global_paths=everywhere("~/.broken.json"),
            local_path=".broken.json",
        )
        installer = Installer(PlatformRegistry([broken, FAKE_JSON]), home=home, os_name="linux")

        report = installer.install_many(["broken", "fakeclient"], "system")

        assert len(report.failed) == 2
        assert all("Unknown scope" in item.result.error for item in report.failed)
        assert all(item.result.path is None for item in report.failed)

    def test_empty_report(self) -> None:
        report = BatchReport()
        assert not report.any_succeeded
        assert report.succeeded == []
