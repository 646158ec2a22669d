# Install/uninstall orchestration across platforms and scopes
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from arbmcp.models import (
    SCOPES,
    ConfigError,
    ConfigFormat,
    OperationResult,
    OSName,
    PlatformDescriptor,
    Scope,
)
from arbmcp.platforms import PlatformRegistry, get_codec
from arbmcp.platforms.base import ConfigCodec
from arbmcp.utils.detect import is_app_installed
from arbmcp.utils.paths import resolve_global, resolve_local

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchItem:
    """Outcome for one (platform, scope) target of a batch."""
    platform: str
    scope: Scope
    result: OperationResult


@dataclass
class BatchReport:
    """Report from a batch install or uninstall.

    ABOUTME: One item per requested target, in request order
    ABOUTME: Failures are recorded, never raised, so a batch always completes
    """
    results: list[BatchItem] = field(default_factory=list)

    def add(self, platform: str, scope: Scope, result: OperationResult) -> None:
        self.results.append(BatchItem(platform=platform, scope=scope, result=result))

    @property
    def succeeded(self) -> list[BatchItem]:
        return [item for item in self.results if item.result.success]

    @property
    def failed(self) -> list[BatchItem]:
        return [item for item in self.results if not item.result.success]

    @property
    def any_succeeded(self) -> bool:
        return any(item.result.success for item in self.results)


class Installer:
    """Apply install/uninstall/status operations to registered platforms.

    ABOUTME: Picks the codec by descriptor.format and the path by scope
    ABOUTME: Working directory, home, environment and OS are injectable for tests
    ABOUTME: Recoverable failures become failed results; ConfigError propagates
    """

    def __init__(
        self,
        registry: PlatformRegistry,
        codecs: Mapping[ConfigFormat, ConfigCodec] | None = None,
        cwd: str | Path | None = None,
        home: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
        os_name: OSName | None = None,
        backup_dir: Path | None = None,
    ) -> None:
        self.registry = registry
        self._codecs: dict[str, ConfigCodec] = dict(codecs) if codecs else {}
        self._cwd = cwd
        self._home = home
        self._environ = environ
        self._os_name = os_name
        self._backup_dir = backup_dir

    def codec_for(self, descriptor: PlatformDescriptor) -> ConfigCodec:
        codec = self._codecs.get(descriptor.format)
        if codec is None:
            codec = get_codec(descriptor.format, backup_dir=self._backup_dir)
            self._codecs[descriptor.format] = codec
        return codec

    def config_path(self, descriptor: PlatformDescriptor, scope: Scope) -> Path:
        """Resolve the config file path for a platform and scope.

        Raises:
            ConfigError: If the platform has no template for the target OS
        """
        if scope == "local":
            return resolve_local(descriptor.local_path, cwd=self._cwd)
        if scope == "global":
            return resolve_global(
                descriptor.global_paths,
                os_name=self._os_name,
                home=self._home,
                environ=self._environ,
            )
        raise ConfigError(f"Unknown scope '{scope}'")

    def install(self, descriptor: PlatformDescriptor, scope: Scope) -> OperationResult:
        """Write the arbitrum entry into the platform's config for scope."""
        path = self.config_path(descriptor, scope)
        try:
            return self.codec_for(descriptor).add_server_entry(
                path,
                descriptor.config_key,
                forward_env=descriptor.forward_env,
                backup_label=descriptor.id,
            )
        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"Install failed for {descriptor.id} ({scope}): {e}")
            return OperationResult.fail(path, str(e))

    def uninstall(self, descriptor: PlatformDescriptor, scope: Scope) -> OperationResult:
        """Remove the arbitrum entry from the platform's config for scope."""
        path = self.config_path(descriptor, scope)
        try:
            return self.codec_for(descriptor).remove_server_entry(path, descriptor.config_key)
        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"Uninstall failed for {descriptor.id} ({scope}): {e}")
            return OperationResult.fail(path, str(e))

    def is_installed(self, descriptor: PlatformDescriptor, scope: Scope) -> bool:
        try:
            path = self.config_path(descriptor, scope)
            return self.codec_for(descriptor).is_server_installed(path, descriptor.config_key)
        except Exception as e:
            logger.debug(f"Status check failed for {descriptor.id} ({scope}): {e}")
            return False

    def is_detected(self, descriptor: PlatformDescriptor) -> bool:
        """Hint for display only; install and uninstall never consult it."""
        return is_app_installed(
            descriptor,
            os_name=self._os_name,
            home=self._home,
            environ=self._environ,
        )

    def installations(self) -> list[tuple[PlatformDescriptor, Scope]]:
        """Every (platform, scope) pair holding an arbitrum entry.

        ABOUTME: Registry order, global before local for each platform
        """
        return [
            (descriptor, scope)
            for descriptor in self.registry
            for scope in SCOPES
            if self.is_installed(descriptor, scope)
        ]

    def install_many(self, platform_ids: Iterable[str], scope: Scope) -> BatchReport:
        """Install to several platforms in one scope, one at a time."""
        return self._run_batch(((platform_id, scope) for platform_id in platform_ids), self.install)

    def uninstall_many(self, targets: Iterable[tuple[str, Scope]]) -> BatchReport:
        """Uninstall from several (platform id, scope) targets, one at a time."""
        return self._run_batch(targets, self.uninstall)

    def _run_batch(
        self,
        targets: Iterable[tuple[str, Scope]],
        operation: Callable[[PlatformDescriptor, Scope], OperationResult],
    ) -> BatchReport:
        report = BatchReport()

        for platform_id, scope in targets:
            descriptor = self.registry.get(platform_id)
            if descriptor is None:
                report.add(
                    platform_id, scope, OperationResult.fail(None, f"Unknown platform: {platform_id}")
                )
                continue

            try:
                result = operation(descriptor, scope)
            except ConfigError as e:
                # Registry bug affects this target only
                logger.error(f"{descriptor.id}: {e}")
                result = OperationResult.fail(None, str(e))

            report.add(platform_id, scope, result)

        return report
