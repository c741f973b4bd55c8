"""
CacheWarmer Tree Scanner.

Walks the configured roots and collects the files to watch.
Requires Python 3.11+.
"""

import fnmatch
import os
from pathlib import Path

from scanner.path_filter import PathFilter
from utils.config import WatchConfiguration
from utils.logger import LoggerMixin


def _raise_walk_error(error: OSError) -> None:
    # A partial scan would look like deleted files, so abort instead
    raise error


class TreeScanner(LoggerMixin):
    """
    Produces the watch set of a project.

    Each scan is a fresh depth-first traversal; nothing is cached
    between two scans.
    """

    def __init__(
        self,
        config: WatchConfiguration,
        path_filter: PathFilter | None = None,
    ) -> None:
        """
        Initialize the scanner.

        Args:
            config: Watch configuration providing roots and the env glob
            path_filter: Filter to apply (built from config when omitted)
        """
        self._config = config
        self._filter = path_filter or PathFilter.from_config(config)

    def scan(self, root: Path) -> set[str]:
        """
        Collect all watched files below a root directory.

        Args:
            root: Absolute directory to walk

        Returns:
            Absolute file paths

        Raises:
            OSError: If the root does not exist or any directory cannot be read
        """
        top = str(root)
        files: set[str] = set()

        for dirpath, dirnames, filenames in os.walk(top, onerror=_raise_walk_error):
            current = Path(dirpath)

            if dirpath == top and not self._filter.allows_directory(current):
                dirnames.clear()
                continue

            # Prune in place so os.walk never enters skipped subtrees
            dirnames[:] = [
                name for name in dirnames if self._filter.allows_directory(current / name)
            ]

            for name in filenames:
                path = current / name
                if self._filter.allows_file(path):
                    files.add(str(path))

        return files

    def glob_project_files(self) -> set[str]:
        """
        Match the top-level dotfile pattern (e.g. .env*) in the project root.

        Raises:
            OSError: If the project root cannot be listed
        """
        project_dir = self._config.project_dir
        files: set[str] = set()

        # Listing errors propagate, unlike with glob.glob()
        with os.scandir(project_dir) as entries:
            for entry in entries:
                if entry.is_file() and fnmatch.fnmatch(entry.name, self._config.env_glob):
                    files.add(str(project_dir / entry.name))

        return files

    def scan_all(self) -> set[str]:
        """
        Build the complete watch set.

        Unions the top-level glob matches with the files of every scan
        root (project directories, then allow-listed vendor paths).

        Raises:
            OSError: If any root is missing or unreadable
        """
        files = self.glob_project_files()

        for root in self._config.scan_roots:
            root_files = self.scan(root)
            self.log.debug("root_scanned", root=str(root), files=len(root_files))
            files |= root_files

        return files
