#!/usr/bin/env python3
"""
CacheWarmer Benchmark Script.

Measures the cost of one poll cycle (scan, fingerprint, compare) on a
real project, to choose a sensible poll interval.
Requires Python 3.11+.

Usage:
    python scripts/benchmark.py /path/to/symfony/project
"""

import argparse
import statistics
import sys
import time
from pathlib import Path
from typing import Callable, TypeVar

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from fingerprint.change_detector import ChangeDetector
from fingerprint.fingerprint_store import FingerprintStore
from scanner.tree_scanner import TreeScanner
from symfony.project import resolve_project_dir
from utils.config import PROJECT_CONFIG_FILE_NAME, WatchConfiguration, load_settings
from utils.errors import ConfigurationError
from utils.logger import configure_logging


configure_logging()

T = TypeVar("T")


def benchmark(name: str, func: Callable[[], T], iterations: int = 5) -> tuple[T, dict]:
    """
    Benchmark a function.

    Returns:
        Tuple of (result, stats)
    """
    times = []
    result = None

    for _ in range(iterations):
        start = time.perf_counter()
        result = func()
        elapsed = time.perf_counter() - start
        times.append(elapsed * 1000)  # Convert to ms

    stats = {
        "name": name,
        "iterations": iterations,
        "min_ms": min(times),
        "max_ms": max(times),
        "mean_ms": statistics.mean(times),
        "median_ms": statistics.median(times),
        "stdev_ms": statistics.stdev(times) if len(times) > 1 else 0,
    }

    return result, stats


def print_stats(stats: dict) -> None:
    """Print benchmark statistics."""
    print(f"\n  {stats['name']}:")
    print(f"    Mean:   {stats['mean_ms']:.2f}ms")
    print(f"    Median: {stats['median_ms']:.2f}ms")
    print(f"    Min:    {stats['min_ms']:.2f}ms")
    print(f"    Max:    {stats['max_ms']:.2f}ms")
    if stats["stdev_ms"] > 0:
        print(f"    StdDev: {stats['stdev_ms']:.2f}ms")


def run_benchmarks(project_dir: Path, iterations: int) -> None:
    """Run all benchmarks."""
    settings = load_settings(project_dir / PROJECT_CONFIG_FILE_NAME)
    config = WatchConfiguration.from_settings(settings, project_dir)

    print("\n=== CacheWarmer Benchmarks ===")
    print(f"Project: {project_dir}")
    print(f"Roots: {', '.join(str(root) for root in config.scan_roots)}")

    scanner = TreeScanner(config)
    store = FingerprintStore()
    detector = ChangeDetector()

    files, stats = benchmark("Scan all roots", scanner.scan_all, iterations=iterations)
    print_stats(stats)
    print(f"    Files: {len(files)}")

    if not files:
        print("No files to watch found!")
        return

    fingerprints, stats = benchmark(
        "Fingerprint watch set",
        lambda: store.fingerprint(files),
        iterations=iterations,
    )
    print_stats(stats)
    files_per_sec = len(files) / (stats["mean_ms"] / 1000) if stats["mean_ms"] else 0.0
    print(f"    Files/sec: {files_per_sec:.1f}")

    baseline = dict(fingerprints)
    _, stats = benchmark(
        "Compare with baseline",
        lambda: detector.changed(baseline, fingerprints),
        iterations=iterations,
    )
    print_stats(stats)

    _, stats = benchmark(
        "Full poll cycle",
        lambda: detector.changed(baseline, store.fingerprint(scanner.scan_all())),
        iterations=iterations,
    )
    print_stats(stats)
    print(f"    Configured poll interval: {config.poll_interval * 1000:.0f}ms")

    print("\n=== Benchmark Complete ===\n")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run CacheWarmer poll cycle benchmarks"
    )
    parser.add_argument(
        "path",
        type=Path,
        nargs="?",
        default=Path.cwd(),
        help="Path to the Symfony project to benchmark",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=5,
        help="Number of runs per benchmark",
    )

    args = parser.parse_args()

    try:
        project_dir = resolve_project_dir(args.path)
        run_benchmarks(project_dir, max(args.iterations, 1))
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except OSError as e:
        print(f"Error: cannot scan the project: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nCancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
