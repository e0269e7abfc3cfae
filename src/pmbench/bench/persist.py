"""Write a run's chart into its timestamped results directory.

Layout::

    results/
      2024-03-01T12-30-05.123Z/
        benchmark_results.png
        benchmark_results.json

The directory name is the UTC completion time in ISO-8601 with every
``:`` replaced by ``-``.  Whether older run directories survive is
decided by the :class:`Retention` policy.
"""

from __future__ import annotations

import enum
import logging
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path

from pmbench.bench.results import BenchmarkResult, save_results

log = logging.getLogger("pmbench")

IMAGE_NAME = "benchmark_results.png"
RESULTS_NAME = "benchmark_results.json"

# Names produced by run_dir_name().
RUN_DIR_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.\d{3}Z$")


class Retention(enum.Enum):
    """What happens to earlier run directories when a new run is saved."""

    KEEP = "keep"  # every run directory is kept
    PRUNE = "prune"  # earlier run directories are deleted first


def run_dir_name(completed_at: datetime) -> str:
    """Filesystem-safe directory name for a run finished at *completed_at*.

    Naive datetimes are taken to be UTC.  Aware ones are converted.
    """
    if completed_at.tzinfo is None:
        completed_at = completed_at.replace(tzinfo=timezone.utc)
    utc = completed_at.astimezone(timezone.utc)
    stamp = utc.strftime("%Y-%m-%dT%H:%M:%S") + f".{utc.microsecond // 1000:03d}Z"
    return stamp.replace(":", "-")


def prune_runs(base_dir: Path) -> list[Path]:
    """Delete every run directory under *base_dir*.

    Only directories named like :func:`run_dir_name` output are removed;
    plain files and any other directory are left alone.  Returns the
    removed directories.
    """
    removed: list[Path] = []
    if not base_dir.exists():
        return removed
    for entry in sorted(base_dir.iterdir()):
        if entry.is_dir() and RUN_DIR_PATTERN.match(entry.name):
            shutil.rmtree(entry)
            removed.append(entry)
            log.debug("Removed previous run %s", entry)
    return removed


def persist_results(
    image: bytes,
    completed_at: datetime,
    base_dir: Path,
    retention: Retention = Retention.PRUNE,
    *,
    results: list[BenchmarkResult] | None = None,
) -> Path:
    """Write *image* (and optionally *results*) into a new run directory.

    I/O errors propagate to the caller.

    Returns:
        Path of the written image.
    """
    if retention is Retention.PRUNE:
        removed = prune_runs(base_dir)
        if removed:
            log.info("Pruned %d previous run(s) from %s", len(removed), base_dir)

    run_dir = base_dir / run_dir_name(completed_at)
    run_dir.mkdir(parents=True, exist_ok=True)

    image_path = run_dir / IMAGE_NAME
    image_path.write_bytes(image)
    if results is not None:
        save_results(run_dir / RESULTS_NAME, results)

    log.info("Benchmark results saved to %s", image_path)
    return image_path
