"""
CacheWarmer Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

import os
import stat
from collections.abc import Callable
from pathlib import Path

import pytest
import structlog

from utils.config import Settings, WatchConfiguration


PROJECT_FILES = {
    ".env": "APP_ENV=dev\n",
    "config/services.yaml": "services: ~\n",
    "src/Kernel.php": "<?php\n",
    "src/Controller/HomeController.php": "<?php\n",
    "templates/base.html.twig": "{% block body %}{% endblock %}\n",
    "translations/messages.en.yaml": "hello: Hello\n",
    "migrations/Version1.php": "<?php\n",
    "vendor/acme/widget/src/Widget.php": "<?php\n",
    "vendor/other/pkg/Pkg.php": "<?php\n",
    "node_modules/lib/index.js": "module.exports = {};\n",
    "var/cache/dev/container.php": "<?php\n",
}

# Files of PROJECT_FILES watched with the default settings
DEFAULT_WATCHED = {
    ".env",
    "config/services.yaml",
    "src/Kernel.php",
    "src/Controller/HomeController.php",
    "templates/base.html.twig",
    "translations/messages.en.yaml",
    "migrations/Version1.php",
}

CONSOLE_SCRIPT = """#!/bin/sh
echo "$@" >> "$(dirname "$0")/../console.log"
echo "console $@"
"""

FAILING_CONSOLE_SCRIPT = """#!/bin/sh
echo "$@" >> "$(dirname "$0")/../console.log"
echo "something went wrong"
exit 3
"""


def write_files(root: Path, files: dict[str, str]) -> None:
    """Create files (and their parent directories) below root."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


def write_console(project: Path, script: str) -> Path:
    """Install an executable fake bin/console."""
    console = project / "bin" / "console"
    console.parent.mkdir(parents=True, exist_ok=True)
    console.write_text(script)
    console.chmod(console.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return console


def read_console_log(project: Path) -> list[str]:
    """Arguments of every fake console call, one line per call."""
    log_file = project / "console.log"
    if not log_file.exists():
        return []
    return log_file.read_text().splitlines()


@pytest.fixture
def symfony_project(tmp_path: Path) -> Path:
    """Create a Symfony Flex style project tree."""
    project = tmp_path / "project"
    project.mkdir()
    write_files(project, PROJECT_FILES)
    return project.resolve()


@pytest.fixture
def watch_config(symfony_project: Path) -> WatchConfiguration:
    """Default watch configuration for the sample project."""
    return WatchConfiguration.from_settings(Settings(), symfony_project)


@pytest.fixture
def src_only_project(tmp_path: Path) -> tuple[Path, WatchConfiguration]:
    """A project with three files in a single watched src directory."""
    project = (tmp_path / "small").resolve()
    write_files(project, {"src/a.php": "a", "src/b.php": "b", "src/sub/c.php": "c"})
    config = WatchConfiguration(
        project_dir=project,
        watch_dirs=(project / "src",),
        vendor_dir=project / "vendor",
    )
    return project, config


@pytest.fixture
def bump_mtime() -> Callable[[Path], int]:
    """Return a function moving a file's mtime one second forward."""

    def _bump(path: Path) -> int:
        current = path.stat().st_mtime_ns
        new = current + 1_000_000_000
        os.utime(path, ns=(new, new))
        return new

    return _bump


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo configure_logging() between tests so log levels do not leak."""
    yield
    structlog.reset_defaults()
