"""
CacheWarmer Fingerprint Package.

Change detection based on file modification times.
Requires Python 3.11+.
"""

from fingerprint.fingerprint_store import FingerprintMap, FingerprintStore
from fingerprint.change_detector import ChangeDetector, ChangeSet

__all__ = [
    "FingerprintMap",
    "FingerprintStore",
    "ChangeDetector",
    "ChangeSet",
]
