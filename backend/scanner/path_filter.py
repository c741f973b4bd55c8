"""
CacheWarmer Path Filter.

Decides which directories are traversed and which files are watched.
Requires Python 3.11+.
"""

from collections.abc import Sequence
from pathlib import Path

from utils.config import WatchConfiguration


class PathFilter:
    """
    Directory-level filter for the tree scanner.

    Exclusion uses substring containment on the path relative to the
    project root, so excluding "cache" also excludes "src/mycache".
    When vendor-watch is on, the vendor tree is allow-listed: only
    directories at or below one of the configured vendor paths are kept.
    """

    def __init__(
        self,
        project_dir: Path,
        excluded_fragments: Sequence[str],
        vendor_dir: Path,
        vendor_watch: bool = False,
        vendor_paths: Sequence[Path] = (),
    ) -> None:
        """
        Initialize the path filter.

        Args:
            project_dir: Absolute project root, paths are matched relative to it
            excluded_fragments: Substrings that exclude a directory and its subtree
            vendor_dir: Absolute vendor root
            vendor_watch: Whether allow-listed vendor paths are watched
            vendor_paths: Absolute allow-listed vendor paths
        """
        self._project_dir = project_dir
        self._excluded_fragments = tuple(f for f in excluded_fragments if f)
        self._vendor_dir = vendor_dir
        self._vendor_watch = vendor_watch
        self._vendor_paths = tuple(vendor_paths)

    @classmethod
    def from_config(cls, config: WatchConfiguration) -> "PathFilter":
        return cls(
            project_dir=config.project_dir,
            excluded_fragments=config.excluded_fragments,
            vendor_dir=config.vendor_dir,
            vendor_watch=config.vendor_watch,
            vendor_paths=config.vendor_paths,
        )

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self._project_dir).as_posix()
        except ValueError:
            return path.as_posix()

    def is_excluded(self, path: Path) -> bool:
        """Check whether a path contains an excluded fragment."""
        relative = self._relative(path)
        return any(fragment in relative for fragment in self._excluded_fragments)

    def _in_vendor_tree(self, path: Path) -> bool:
        return path == self._vendor_dir or self._vendor_dir in path.parents

    def _is_allow_listed(self, path: Path) -> bool:
        return any(path == allowed or allowed in path.parents for allowed in self._vendor_paths)

    def allows_directory(self, path: Path) -> bool:
        """
        Check whether a directory should be descended into.

        Args:
            path: Absolute directory path

        Returns:
            False if the directory and its whole subtree must be skipped
        """
        if self.is_excluded(path):
            return False

        if self._vendor_watch and self._in_vendor_tree(path):
            return self._is_allow_listed(path)

        return True

    def allows_file(self, path: Path) -> bool:
        """
        Check whether a file reached by traversal should be watched.

        Files carry no filter of their own: any file below an allowed
        directory is watched. Only vendor files outside the allow-list
        are refused.
        """
        if self._vendor_watch and self._in_vendor_tree(path):
            return self._is_allow_listed(path)
        return True
