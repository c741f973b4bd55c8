"""
CacheWarmer Command Line Interface.

Watches a Symfony project and refreshes its cache whenever a watched
file changes.
Requires Python 3.11+.

Usage:
    cache-warmer /path/to/symfony/project
    cache-warmer . --vendor acme/widget --exclude Tests --pools
"""

import argparse
import os
import signal
import sys
import time
from pathlib import Path
from typing import NoReturn

from symfony.console import SymfonyConsole
from symfony.project import resolve_project_dir
from utils.config import (
    PROJECT_CONFIG_FILE_NAME,
    Settings,
    WatchConfiguration,
    get_settings,
    load_settings,
)
from utils.errors import ConfigurationError, NothingToWatchError, RebuildError
from utils.logger import configure_logging, get_logger
from watcher.watch_loop import WatchLoop

SEPARATOR_LENGTH = 80


def parse_comma_separated(value: str | None) -> list[str]:
    """Split a comma-separated flag value, dropping empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def print_welcome() -> None:
    """Print the startup banner."""
    settings = get_settings()
    separator = "=" * SEPARATOR_LENGTH

    print(separator)
    print(f"  {settings.app_name} version {settings.app_version}")
    print(separator)
    print(f"{settings.app_name} watches your files and automatically refreshes your project cache.")
    print(separator)


def print_nothing_to_watch(error: NothingToWatchError) -> None:
    """Explain how to fix an empty watch set."""
    print(f"Error: {error}", file=sys.stderr)
    print("  If you are using an \"old\" Symfony project directory structure", file=sys.stderr)
    print(
        f"  you have to customize the watched directories with a {PROJECT_CONFIG_FILE_NAME} file",
        file=sys.stderr,
    )
    print("  at the root of your Symfony project.", file=sys.stderr)


def fail(message: str, error: Exception | None = None) -> NoReturn:
    """Report a fatal startup error and exit."""
    print(f"Error: {message}", file=sys.stderr)
    if error is not None:
        print(f"  {error}", file=sys.stderr)
    sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cache-warmer",
        description="Watch a Symfony project and refresh its cache on every change.",
        epilog="Examples:\n"
        "  cache-warmer .                        # Watch the current project\n"
        "  bin/cache-warmer .                    # From the project's bin directory\n"
        "  cache-warmer . --vendor acme/widget   # Also watch vendor/acme/widget\n"
        "  cache-warmer . --pools                # Clear all cache pools before warmup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "path",
        help="Path to the Symfony project",
    )
    parser.add_argument(
        "--vendor",
        default=None,
        help="Comma-separated vendor sub-paths to watch (enables vendor watching)",
    )
    parser.add_argument(
        "--exclude",
        default=None,
        help="Comma-separated directory fragments not to watch, added to the defaults",
    )
    parser.add_argument(
        "--cache",
        action="store_true",
        help="Run cache:clear instead of only cache:warmup",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Remove var/cache before warming up (replaces --cache)",
    )
    parser.add_argument(
        "--no-debug",
        action="store_true",
        help="Pass --no-debug to the console",
    )
    parser.add_argument(
        "--env",
        default=None,
        help="Symfony environment passed with --env (default: dev)",
    )
    parser.add_argument(
        "--pools",
        nargs="?",
        const="",
        default=None,
        help="Comma-separated cache pools to clear before warmup; all pools when given empty",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Settings file (default: <project>/{PROJECT_CONFIG_FILE_NAME})",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {get_settings().app_version}",
    )
    return parser


def build_settings(args: argparse.Namespace, config_file: Path | None) -> Settings:
    """
    Load settings and apply the command line flags on top.

    Raises:
        ConfigurationError: If the settings file is invalid
    """
    settings = load_settings(config_file)

    symfony_updates: dict[str, object] = {}
    if args.env:
        symfony_updates["env"] = args.env
    if args.no_debug:
        symfony_updates["debug"] = False

    watcher_updates: dict[str, object] = {}
    vendor_list = parse_comma_separated(args.vendor)
    if vendor_list:
        watcher_updates["vendor_watch"] = True
        watcher_updates["vendor_list"] = vendor_list
    excluded = parse_comma_separated(args.exclude)
    if excluded:
        watcher_updates["exclude_dirs"] = [*settings.watcher.exclude_dirs, *excluded]

    cache_updates: dict[str, object] = {}
    if args.cache:
        cache_updates["clear_cache"] = True
    if args.force:
        cache_updates["clear_cache"] = False
        cache_updates["force_clear_cache"] = True
    if args.pools is not None:
        cache_updates["pools"] = parse_comma_separated(args.pools)

    return settings.model_copy(
        update={
            "symfony": settings.symfony.model_copy(update=symfony_updates),
            "watcher": settings.watcher.model_copy(update=watcher_updates),
            "cache": settings.cache.model_copy(update=cache_updates),
        }
    )


def main(argv: list[str] | None = None) -> None:
    """
    Main entry point.

    Exit codes: 0 after a clean stop, 1 on a startup error,
    130 when interrupted with Ctrl+C.
    """
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()

    print_welcome()
    if not argv:
        parser.print_help()
        sys.exit(0)

    args = parser.parse_args(argv)

    try:
        project_dir = resolve_project_dir(args.path)
    except ConfigurationError as e:
        fail("project directory not found", e)

    config_file = args.config if args.config is not None else project_dir / PROJECT_CONFIG_FILE_NAME
    if args.config is not None and not config_file.is_file():
        fail(f"settings file not found: {config_file}")

    try:
        settings = build_settings(args, config_file)
    except ConfigurationError as e:
        fail("invalid configuration", e)

    configure_logging(settings)
    logger = get_logger("cli")
    logger.info("project_directory", path=str(project_dir))

    console = SymfonyConsole(project_dir, settings.symfony, settings.cache)
    try:
        console.check()
    except ConfigurationError as e:
        fail("symfony console not found", e)
    logger.info("symfony_console", path=str(console.console_path))

    try:
        version = console.version()
    except RebuildError as e:
        fail("error while running the Symfony version command", e)
    logger.info("symfony_env", version=version.strip(), env=settings.symfony.env)

    config = WatchConfiguration.from_settings(settings, project_dir)
    loop = WatchLoop(config, rebuild=console.cache_warmup)

    start = time.perf_counter()
    try:
        count = loop.initialize()
    except NothingToWatchError as e:
        print_nothing_to_watch(e)
        sys.exit(1)
    except OSError as e:
        fail("cannot scan the watched directories", e)
    elapsed_ms = (time.perf_counter() - start) * 1000

    logger.info(
        "files_watched",
        count=count,
        project_dir=str(project_dir),
        elapsed_ms=round(elapsed_ms),
    )
    print(f" > CTRL+C to stop watching or run kill {os.getpid()}.")

    signal.signal(signal.SIGTERM, lambda signum, frame: loop.stop())

    try:
        loop.run()
    except KeyboardInterrupt:
        print("\nStopped watching")
        sys.exit(130)


if __name__ == "__main__":
    main()
