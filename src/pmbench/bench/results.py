"""Benchmark result data structures and serialization.

A run produces one :class:`BenchmarkResult` per matrix cell, in the
order the cells were executed.  That order is preserved everywhere
downstream: the chart draws rows in it and ``benchmark_results.json``
lists results in it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

log = logging.getLogger("pmbench")


# ---------------------------------------------------------------------------
# Task and result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BenchmarkTask:
    """One cell of the benchmark matrix."""

    package_manager: str
    category: str


@dataclass
class BenchmarkResult:
    """Timing of one package-manager command."""

    package_manager: str
    category: str
    elapsed_ms: int
    command: str = ""
    exit_code: int = 0
    status: str = "ok"  # "ok", "fail", "timeout"

    def __post_init__(self) -> None:
        if self.elapsed_ms < 0:
            raise ValueError(f"elapsed_ms must be non-negative (got {self.elapsed_ms})")

    @property
    def ok(self) -> bool:
        """True if the command exited cleanly within its timeout."""
        return self.status == "ok"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "package_manager": self.package_manager,
            "category": self.category,
            "elapsed_ms": self.elapsed_ms,
            "command": self.command,
            "exit_code": self.exit_code,
            "status": self.status,
        }


# ---------------------------------------------------------------------------
# Run summary
# ---------------------------------------------------------------------------


@dataclass
class BenchRun:
    """Everything a finished run produced."""

    results: list[BenchmarkResult] = field(default_factory=list)
    start_time: str = ""
    end_time: str = ""
    image_path: Path | None = None
    readme_updated: bool = False

    @property
    def failed(self) -> list[BenchmarkResult]:
        """Results whose command failed or timed out."""
        return [r for r in self.results if not r.ok]


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def save_results(path: Path, results: list[BenchmarkResult]) -> None:
    """Write results as a JSON list, preserving their order."""
    data = [r.to_dict() for r in results]
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    log.debug("Wrote %d results to %s", len(results), path)
