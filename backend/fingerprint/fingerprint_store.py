"""
CacheWarmer Fingerprint Store.

Modification-time fingerprints for watched files.
Requires Python 3.11+.
"""

import os
from collections.abc import Iterable

# Absolute file path -> modification time in nanoseconds
FingerprintMap = dict[str, int]

class FingerprintStore:
    """
    Computes fingerprint maps from the filesystem.

    The fingerprint of a file is its st_mtime_ns, so two writes within
    the same second are still told apart. File contents are never read.
    """

    def fingerprint_file(self, path: str) -> int:
        """
        Get the fingerprint of a single file.

        Raises:
            OSError: If the file cannot be stat'ed (removed, permission denied)
        """
        return os.stat(path).st_mtime_ns

    def fingerprint(self, paths: Iterable[str]) -> FingerprintMap:
        """
        Fingerprint every path of a watch set.

        Args:
            paths: Absolute file paths

        Returns:
            Mapping of path to fingerprint, ordered by path

        Raises:
            OSError: If any path cannot be stat'ed; no partial map is returned
        """
        fingerprints: FingerprintMap = {}

        for path in sorted(paths):
            fingerprints[path] = self.fingerprint_file(path)

        return fingerprints
