"""Shared test fixtures for benchmark tests."""

from __future__ import annotations

from pmbench.bench.results import BenchmarkResult


def make_result(
    package_manager: str = "npm",
    category: str = "install",
    elapsed_ms: int = 500,
    *,
    status: str = "ok",
) -> BenchmarkResult:
    """Create a BenchmarkResult with a plausible command line."""
    return BenchmarkResult(
        package_manager=package_manager,
        category=category,
        elapsed_ms=elapsed_ms,
        command=f"{package_manager} {category} next@latest",
        exit_code=0 if status == "ok" else 1,
        status=status,
    )


def make_results(timings: dict[str, list[int]], categories: list[str]) -> list[BenchmarkResult]:
    """Create results in matrix order from manager -> per-category timings."""
    results = []
    for pm, times in timings.items():
        for category, elapsed in zip(categories, times):
            results.append(make_result(pm, category, elapsed))
    return results
