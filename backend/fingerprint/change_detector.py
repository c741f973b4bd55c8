"""
CacheWarmer Change Detector.

Compares two fingerprint maps.
Requires Python 3.11+.
"""

from dataclasses import dataclass, field

from fingerprint.fingerprint_store import FingerprintMap


@dataclass
class ChangeSet:
    """Paths that differ between two fingerprint maps."""

    added: set[str] = field(default_factory=set)
    removed: set[str] = field(default_factory=set)
    modified: set[str] = field(default_factory=set)

    @property
    def total_changes(self) -> int:
        """Get total number of changes."""
        return len(self.added) + len(self.removed) + len(self.modified)


class ChangeDetector:
    """
    Whole-map comparison of fingerprint maps.

    There is no incremental tracking: every cycle compares the complete
    new map against the complete baseline.
    """

    def changed(self, old: FingerprintMap, new: FingerprintMap) -> bool:
        """
        Check whether two maps differ.

        Maps are equal when they have the same keys and the same
        fingerprint for every key.

        Args:
            old: Baseline map
            new: Map of the current scan

        Returns:
            True if any path was added, removed or has a different fingerprint
        """
        if len(old) != len(new):
            return True

        # Same size, so every new key found in old means identical key sets
        for path, fingerprint in new.items():
            if path not in old or old[path] != fingerprint:
                return True

        return False

    def compare(self, old: FingerprintMap, new: FingerprintMap) -> ChangeSet:
        """
        List the paths that differ between two maps.

        Args:
            old: Baseline map
            new: Map of the current scan

        Returns:
            ChangeSet of added, removed and modified paths
        """
        old_keys = set(old)
        new_keys = set(new)

        return ChangeSet(
            added=new_keys - old_keys,
            removed=old_keys - new_keys,
            modified={key for key in old_keys & new_keys if old[key] != new[key]},
        )
