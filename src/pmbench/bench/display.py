"""Terminal summary of a finished benchmark run."""

from __future__ import annotations

from pmbench.bench.results import BenchRun
from pmbench.formatting import format_elapsed, format_table


def format_run_summary(run: BenchRun) -> str:
    """Format one row per result, in execution order, plus the artifact path."""
    rows = [
        [r.package_manager, r.category, format_elapsed(r.elapsed_ms), r.status]
        for r in run.results
    ]
    lines = [
        format_table(
            ["Manager", "Category", "Time", "Status"],
            rows,
            alignments=["l", "l", "r", "l"],
        )
    ]
    failed = run.failed
    if failed:
        lines.append("")
        lines.append(f"  {len(failed)} command(s) did not succeed; their timings are flagged.")
    if run.image_path is not None:
        lines.append("")
        lines.append(f"  Chart: {run.image_path}")
    return "\n".join(lines)
