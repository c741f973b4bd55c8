"""
CacheWarmer Watcher Package.

Polling loop that triggers cache warm-ups.
Requires Python 3.11+.
"""

from watcher.watch_loop import CycleResult, RebuildAction, WatchLoop, WatchState

__all__ = ["CycleResult", "RebuildAction", "WatchLoop", "WatchState"]
