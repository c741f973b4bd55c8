"""
CacheWarmer Scanner Package.

Filtered traversal of the watched project directories.
Requires Python 3.11+.
"""

from scanner.path_filter import PathFilter
from scanner.tree_scanner import TreeScanner

__all__ = [
    "PathFilter",
    "TreeScanner",
]
