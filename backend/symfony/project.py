"""
CacheWarmer Project Resolution.

Requires Python 3.11+.
"""

from pathlib import Path

from utils.errors import ConfigurationError


def resolve_project_dir(path: str | Path, cwd: Path | None = None) -> Path:
    """
    Turn the user supplied project path into an absolute directory.

    Args:
        path: Absolute path, or path relative to cwd
        cwd: Base for relative paths (defaults to the working directory)

    Returns:
        Resolved project directory

    Raises:
        ConfigurationError: If the path does not exist or is not a directory
    """
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = (cwd or Path.cwd()) / candidate

    if not candidate.exists():
        raise ConfigurationError(f"project directory not found: {candidate}")
    if not candidate.is_dir():
        raise ConfigurationError(f"project path is not a directory: {candidate}")

    return candidate.resolve()
