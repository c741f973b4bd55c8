"""
CacheWarmer Symfony Package.

Symfony console invocation and project resolution.
Requires Python 3.11+.
"""

from symfony.console import SymfonyConsole
from symfony.project import resolve_project_dir

__all__ = ["SymfonyConsole", "resolve_project_dir"]
