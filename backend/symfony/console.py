"""
CacheWarmer Symfony Console.

Runs bin/console commands for the rebuild action.
Requires Python 3.11+.
"""

import shutil
import subprocess
from pathlib import Path

from utils.config import CacheSettings, SymfonySettings
from utils.errors import (
    CommandFailedError,
    CommandLaunchError,
    ConsoleNotFoundError,
    RebuildError,
)
from utils.logger import LoggerMixin

VERSION_OPTION = "--version"
CACHE_WARMUP_COMMAND = "cache:warmup"
CACHE_CLEAR_COMMAND = "cache:clear"
CACHE_POOL_CLEAR_COMMAND = "cache:pool:clear"
ALL_POOLS_OPTION = "--all"


class SymfonyConsole(LoggerMixin):
    """
    Wrapper around a project's Symfony console.

    Every command runs synchronously in the project directory with the
    configured --env and, when debug is off, --no-debug. Output is
    stdout and stderr combined.
    """

    def __init__(
        self,
        project_dir: Path,
        symfony: SymfonySettings,
        cache: CacheSettings | None = None,
    ) -> None:
        """
        Initialize the console wrapper.

        Args:
            project_dir: Absolute Symfony project directory
            symfony: Console path, env and debug settings
            cache: What cache_warmup() does before warming up
        """
        self._project_dir = project_dir
        self._symfony = symfony
        self._cache = cache or CacheSettings()

    @property
    def console_path(self) -> Path:
        return self._project_dir / self._symfony.console_path

    def check(self) -> None:
        """
        Fail fast when the console is missing.

        Raises:
            ConsoleNotFoundError: If no file exists at the console path
        """
        if not self.console_path.exists():
            raise ConsoleNotFoundError(str(self.console_path))

    def _build_command(self, arguments: tuple[str, ...]) -> list[str]:
        command = [str(self.console_path), *arguments, f"--env={self._symfony.env}"]
        if not self._symfony.debug:
            command.append("--no-debug")
        return command

    def run_command(self, *arguments: str) -> str:
        """
        Run a console command.

        Args:
            arguments: Command name and its arguments, e.g. ("cache:pool:clear", "app.cache")

        Returns:
            Combined output of the command

        Raises:
            CommandLaunchError: If the process could not be started
            CommandFailedError: If the process exited with a non-zero status
        """
        command = self._build_command(arguments)
        self.log.debug("console_command", command=command)

        try:
            completed = subprocess.run(
                command,
                cwd=self._project_dir,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
        except OSError as e:
            raise CommandLaunchError(command, str(e)) from e

        output = completed.stdout or ""
        if completed.returncode != 0:
            raise CommandFailedError(command, completed.returncode, output)

        return output

    def version(self) -> str:
        """Get the Symfony version banner of the project."""
        return self.run_command(VERSION_OPTION)

    def remove_cache(self) -> None:
        """
        Delete the var/cache directory of the project.

        Raises:
            RebuildError: If the directory lies outside the project or cannot be removed
        """
        cache_dir = self._project_dir / "var" / "cache"

        if not cache_dir.resolve().is_relative_to(self._project_dir.resolve()):
            raise RebuildError(
                f"invalid cache directory: {cache_dir} is not within {self._project_dir}"
            )

        try:
            shutil.rmtree(cache_dir)
        except FileNotFoundError:
            return
        except OSError as e:
            raise RebuildError(f"failed to remove cache directory {cache_dir}: {e}") from e

        self.log.debug("cache_directory_removed", path=str(cache_dir))

    def cache_warmup(self) -> str:
        """
        Refresh the project cache.

        Runs cache:clear, removes var/cache and clears pools when
        configured, then always runs cache:warmup.

        Returns:
            Output of cache:warmup

        Raises:
            RebuildError: If any step fails; later steps are not run
        """
        if self._cache.clear_cache:
            self.run_command(CACHE_CLEAR_COMMAND)

        if self._cache.force_clear_cache:
            self.remove_cache()

        if self._cache.pools_provided:
            for pool in self._cache.pools or [ALL_POOLS_OPTION]:
                self.run_command(CACHE_POOL_CLEAR_COMMAND, pool)

        return self.run_command(CACHE_WARMUP_COMMAND)
