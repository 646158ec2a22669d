# CLI interface for arbmcp
import argparse
import logging
import os
import sys
from collections.abc import Mapping

from arbmcp import __version__
from arbmcp.config import LOG_LEVEL_ENV
from arbmcp.entry import PACKAGE_NAME
from arbmcp.models import SCOPES, ConfigError, OSName, Scope
from arbmcp.operations import BatchReport, Installer
from arbmcp.platforms import PlatformRegistry, default_registry
from arbmcp.prompts import (
    BOLD,
    CYAN,
    DIM,
    GREEN,
    RED,
    RESET,
    YELLOW,
    confirm,
    multi_select,
    select_one,
)
from arbmcp.utils.paths import current_os

logger = logging.getLogger(__name__)

# ABOUTME: Exit codes
# 0 = success (at least one target updated, or nothing to do), 1 = failure, 2 = config error
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2

COMMANDS = ("install", "uninstall", "list", "serve")

SCOPE_OPTIONS = [
    ("global", "Global (all projects, recommended)"),
    ("local", "Local (current directory only)"),
]


def print_header(title: str) -> None:
    print()
    print(f"{BOLD}{CYAN}{title}{RESET}")
    print()


def print_success(message: str) -> None:
    print(f"{GREEN}✓{RESET} {message}")


def print_error(message: str) -> None:
    print(f"{RED}✗{RESET} {message}")


def print_warning(message: str) -> None:
    print(f"{YELLOW}⚠{RESET} {message}")


def api_key_instructions(os_name: OSName) -> list[str]:
    """Lines explaining how to export the server's API keys on this OS.

    ABOUTME: PowerShell commands on win32, shell rc file exports elsewhere
    """
    if os_name == "win32":
        return [
            "IMPORTANT: Set up your API keys:",
            "",
            "Option 1: Set environment variables permanently (PowerShell Admin):",
            '[System.Environment]::SetEnvironmentVariable("ALCHEMY_API_KEY", "your-key", "User")',
            '[System.Environment]::SetEnvironmentVariable("ARBISCAN_API_KEY", "your-key", "User")',
            "",
            "Option 2: Set for current session (PowerShell):",
            '$env:ALCHEMY_API_KEY = "your-key-here"',
            '$env:ARBISCAN_API_KEY = "your-key-here"',
            "",
            "Option 3: Set via System Properties > Environment Variables",
            "",
            "Restart your editors to apply changes.",
        ]

    shell_config = "~/.zshrc" if os_name == "darwin" else "~/.bashrc"
    return [
        "IMPORTANT: Set up your API keys:",
        "",
        f"# Add to {shell_config}:",
        'export ALCHEMY_API_KEY="your-key-here"',
        'export ARBISCAN_API_KEY="your-key-here"',
        "",
        "Then restart your terminal or run:",
        f"source {shell_config}",
        "",
        "Restart your editors to apply changes.",
    ]


def _print_report(report: BatchReport, installer: Installer, with_scope: bool) -> None:
    for item in report.results:
        descriptor = installer.registry.get(item.platform)
        label = descriptor.name if descriptor else item.platform
        if with_scope:
            label = f"{label} ({item.scope})"

        if item.result.success:
            print_success(f"{label} config updated")
            if item.result.warning:
                print_warning(f"{label}: {item.result.warning}")
        else:
            print_error(f"{label}: {item.result.error or 'Failed to update config'}")


def _unknown_platforms(requested: list[str] | None, registry: PlatformRegistry) -> list[str]:
    return [platform_id for platform_id in requested or [] if platform_id not in registry]


def cmd_install(args: argparse.Namespace, installer: Installer) -> int:
    """Execute install command.

    ABOUTME: Interactive wizard unless --platform or --all is given
    ABOUTME: Prints one line per platform, then API key instructions on success
    ABOUTME: Returns EXIT_FAILURE only if every selected platform failed
    """
    registry = installer.registry
    print_header("Arbitrum MCP Tools - Installation Wizard")

    try:
        unknown = _unknown_platforms(args.platform, registry)
        if unknown:
            print_error(f"Unknown platform(s): {', '.join(unknown)}")
            print(f"Supported platforms: {', '.join(registry.ids())}")
            return EXIT_FAILURE

        if args.all or args.platform:
            selected = registry.ids() if args.all else list(dict.fromkeys(args.platform))
            scope: Scope | None = args.scope or "global"
        else:
            options = []
            for descriptor in registry:
                if any(installer.is_installed(descriptor, s) for s in SCOPES):
                    status = f" {YELLOW}(already installed){RESET}"
                elif installer.is_detected(descriptor):
                    status = f" {GREEN}✓ detected{RESET}"
                else:
                    status = ""
                options.append((descriptor.id, f"{descriptor.name}{status}"))

            selected = multi_select(
                "Which platforms do you want to install to?", options, preselected=set()
            )
            if not selected:
                print("No platforms selected. Installation cancelled.")
                return EXIT_SUCCESS

            scope = args.scope or select_one("Installation scope:", SCOPE_OPTIONS)
            if scope is None:
                print("Installation cancelled.")
                return EXIT_SUCCESS

        print(f"{CYAN}Selected platforms:{RESET}")
        for platform_id in selected:
            print(f"  • {registry.get(platform_id).name}")
        print()

        if not args.yes and not confirm(
            f"Install to {len(selected)} platform(s) ({scope})?", default=True
        ):
            print("Installation cancelled.")
            return EXIT_SUCCESS

        print()
        report = installer.install_many(selected, scope)
        _print_report(report, installer, with_scope=False)
        print()

        if not report.any_succeeded:
            print("Installation failed. No platforms were configured.")
            return EXIT_FAILURE

        print_success(f"{BOLD}Installation complete!{RESET}")
        print()
        for line in api_key_instructions(current_os()):
            print(f"  {line}" if line else "")
        print()
        return EXIT_SUCCESS

    except KeyboardInterrupt:
        print()
        print("Installation cancelled.")
        return EXIT_SUCCESS
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FAILURE


def cmd_uninstall(args: argparse.Namespace, installer: Installer) -> int:
    """Execute uninstall command.

    ABOUTME: Offers every current installation, all preselected
    ABOUTME: Confirmation defaults to no; --yes skips it
    """
    registry = installer.registry
    print_header("Arbitrum MCP Tools - Uninstall Wizard")

    try:
        unknown = _unknown_platforms(args.platform, registry)
        if unknown:
            print_error(f"Unknown platform(s): {', '.join(unknown)}")
            print(f"Supported platforms: {', '.join(registry.ids())}")
            return EXIT_FAILURE

        installed = [
            (descriptor.id, scope)
            for descriptor, scope in installer.installations()
            if args.scope is None or scope == args.scope
        ]

        if not installed:
            print("No installations found. Nothing to uninstall.")
            return EXIT_SUCCESS

        if args.all or args.platform:
            wanted = set(args.platform or [])
            targets = [(pid, scope) for pid, scope in installed if args.all or pid in wanted]
            if not targets:
                print("No matching installations found. Nothing to uninstall.")
                return EXIT_SUCCESS
        else:
            options = [
                (f"{pid}:{scope}", f"{registry.get(pid).name} ({scope})")
                for pid, scope in installed
            ]
            chosen = multi_select(
                "Which installations do you want to remove?",
                options,
                preselected={value for value, _label in options},
            )
            if not chosen:
                print("No platforms selected. Uninstall cancelled.")
                return EXIT_SUCCESS
            targets = []
            for value in chosen:
                pid, scope = value.rsplit(":", 1)
                targets.append((pid, scope))

        if not args.yes and not confirm(
            f"Remove from {len(targets)} installation(s)?", default=False
        ):
            print("Uninstall cancelled.")
            return EXIT_SUCCESS

        print()
        report = installer.uninstall_many(targets)
        _print_report(report, installer, with_scope=True)
        print()

        if not report.any_succeeded:
            print("Uninstall failed. No configurations were modified.")
            return EXIT_FAILURE

        print_success(f"{BOLD}Uninstall complete!{RESET}")
        return EXIT_SUCCESS

    except KeyboardInterrupt:
        print()
        print("Uninstall cancelled.")
        return EXIT_SUCCESS
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FAILURE


def cmd_list(args: argparse.Namespace, installer: Installer) -> int:
    """Execute list command.

    ABOUTME: One row per platform: detected, global and local status
    """
    print_header("Arbitrum MCP Tools - Supported Platforms")

    try:
        print(f"{DIM}{'Platform':<28} │ {'Detected':<8} │ {'Global':<11} │ Local{RESET}")
        print(f"{DIM}{'─' * 61}{RESET}")

        for descriptor in installer.registry:
            detected = "✓" if installer.is_detected(descriptor) else "-"
            global_status = "✓ installed" if installer.is_installed(descriptor, "global") else "-"
            local_status = "✓ installed" if installer.is_installed(descriptor, "local") else "-"
            print(f"{descriptor.name:<28} │ {detected:<8} │ {global_status:<11} │ {local_status}")

        print()
        print(f"{DIM}Legend:{RESET}")
        print(f"{DIM}  Detected: Platform app/folder found on system{RESET}")
        print(f"{DIM}  Global: Installed in user's home directory (all projects){RESET}")
        print(f"{DIM}  Local: Installed in current directory (this project only){RESET}")
        print()
        return EXIT_SUCCESS

    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FAILURE


def cmd_serve(args: argparse.Namespace, environ: Mapping[str, str] | None = None) -> int:
    """Execute serve command.

    ABOUTME: Runs the MCP server over stdio; stdout belongs to the protocol
    ABOUTME: Missing ALCHEMY_API_KEY exits with EXIT_CONFIG_ERROR
    """
    from arbmcp.config import load_settings
    from arbmcp.server import create_server

    try:
        settings = load_settings(environ)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    logger.info(f"Starting Arbitrum MCP server v{__version__} with {settings!r}")
    server = create_server(settings)
    server.run()
    return EXIT_SUCCESS


def build_parser(registry: PlatformRegistry) -> argparse.ArgumentParser:
    platform_lines = "\n".join(f"  {d.id:<16} {d.name}" for d in registry)
    parser = argparse.ArgumentParser(
        prog=PACKAGE_NAME,
        description="Arbitrum MCP Tools - Universal MCP Server Installer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            f"  {PACKAGE_NAME} install     # Start interactive installation\n"
            f"  {PACKAGE_NAME} uninstall   # Start interactive uninstall\n"
            f"  {PACKAGE_NAME} list        # Show platform status\n"
            f"  {PACKAGE_NAME} install --platform cursor --scope local --yes\n"
            "\n"
            f"supported platforms:\n{platform_lines}"
        ),
    )

    parser.add_argument(
        "--version", "-v",
        action="store_true",
        help="Show version number"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (
        ("install", "Interactive installation wizard"),
        ("uninstall", "Interactive uninstall wizard"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--platform", "-p",
            action="append",
            metavar="ID",
            help="Platform id to target (repeatable, skips the platform prompt)"
        )
        sub.add_argument(
            "--all",
            action="store_true",
            help="Target every platform"
        )
        sub.add_argument(
            "--scope",
            choices=list(SCOPES),
            help="global (home directory) or local (current directory)"
        )
        sub.add_argument(
            "--yes", "-y",
            action="store_true",
            help="Do not ask for confirmation"
        )

    subparsers.add_parser(
        "list",
        help="Show supported platforms and installation status"
    )
    subparsers.add_parser(
        "serve",
        help="Run the MCP server over stdio"
    )

    return parser


def configure_logging(command: str | None, verbose: bool) -> None:
    """Send log records to stderr.

    ABOUTME: --verbose wins, then ARBITRUM_MCP_LOG_LEVEL, then INFO for serve and WARNING otherwise
    """
    if verbose:
        level = logging.DEBUG
    else:
        default = "INFO" if command == "serve" else "WARNING"
        level_name = os.environ.get(LOG_LEVEL_ENV, default).upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            level = logging.getLevelName(default)

    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None, registry: PlatformRegistry | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Returns exit code for sys.exit()
    """
    argv = list(sys.argv[1:] if argv is None else argv)

    try:
        registry = registry if registry is not None else default_registry()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    parser = build_parser(registry)

    # Top-level options take no values, so the first positional is the command
    command = next((arg for arg in argv if not arg.startswith("-")), None)
    if command is not None and command not in COMMANDS:
        print(f"Unknown command: {command}")
        print()
        parser.print_help()
        return EXIT_FAILURE

    args = parser.parse_args(argv)

    if args.version:
        print(f"{PACKAGE_NAME} v{__version__}")
        return EXIT_SUCCESS

    if args.command == "serve":
        # Before logging setup so .env can set the log level
        from dotenv import find_dotenv, load_dotenv

        load_dotenv(find_dotenv(usecwd=True), override=False)

    configure_logging(args.command, args.verbose)

    if args.command == "serve":
        return cmd_serve(args)

    installer = Installer(registry)
    if args.command == "install":
        return cmd_install(args, installer)
    elif args.command == "uninstall":
        return cmd_uninstall(args, installer)
    elif args.command == "list":
        return cmd_list(args, installer)
    else:
        # No command specified, show help
        parser.print_help()
        return EXIT_SUCCESS


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
