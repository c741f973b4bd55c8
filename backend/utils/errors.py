"""
CacheWarmer Error Types.

Configuration errors are fatal at startup; rebuild errors are reported
and the watch loop keeps running.
"""


class CacheWarmerError(Exception):
    """Base class for all CacheWarmer errors."""


class ConfigurationError(CacheWarmerError):
    """Invalid or missing configuration detected before the loop starts."""


class NothingToWatchError(ConfigurationError):
    """The initial scan found no file to watch."""


class ConsoleNotFoundError(ConfigurationError):
    """The Symfony console is not present at the configured path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"symfony console not found at {path}")
        self.path = path


class RebuildError(CacheWarmerError):
    """The rebuild action did not complete."""


class CommandFailedError(RebuildError):
    """A console command ran but exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, output: str) -> None:
        super().__init__(
            f"symfony command failed: {' '.join(command)} exited with status {returncode}"
        )
        self.command = command
        self.returncode = returncode
        self.output = output


class CommandLaunchError(RebuildError):
    """A console command could not be started at all."""

    def __init__(self, command: list[str], reason: str) -> None:
        super().__init__(f"failed to execute symfony command {' '.join(command)}: {reason}")
        self.command = command
        self.reason = reason
