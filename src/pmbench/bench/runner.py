"""Benchmark execution engine.

Orchestrates:
1. Configuration validation
2. The package-manager x category matrix, one blocking command at a time
3. Workspace lifecycle around each command
4. Chart rendering and persistence
5. README update

Ordering is fixed: the outer loop walks package managers, the inner loop
walks categories in their declared order.  Installs therefore run before
the uninstalls that depend on them, and the result list comes out in the
row order the chart draws.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pmbench.bench.chart import load_background, render_chart
from pmbench.bench.config import BenchConfig, CategoryDef, validate_config
from pmbench.bench.docs import update_readme
from pmbench.bench.persist import persist_results
from pmbench.bench.results import BenchmarkResult, BenchmarkTask, BenchRun
from pmbench.bench.timing import run_timed
from pmbench.bench.workspace import Workspace

log = logging.getLogger("pmbench")


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Progress callback
# ---------------------------------------------------------------------------


@dataclass
class BenchProgress:
    """Progress info passed to the callback after each command."""

    package_manager: str
    category: str
    index: int  # 1-based position in the matrix
    total: int
    command: str
    elapsed_ms: int = 0
    status: str = ""


# Type alias for the progress callback.
ProgressCallback = Any  # Callable[[BenchProgress], None] | None


# ---------------------------------------------------------------------------
# BenchRunner
# ---------------------------------------------------------------------------


class BenchRunner:
    """Executes a benchmark run according to a BenchConfig.

    Usage::

        runner = BenchRunner(BenchConfig())
        run = runner.run()
        print(run.image_path)
    """

    def __init__(
        self,
        config: BenchConfig,
        progress_callback: ProgressCallback = None,
    ) -> None:
        self.config = config
        self.progress: Any = progress_callback or self._default_progress
        self.workspace = Workspace(config.workspace_dir)

    def run(self) -> BenchRun:
        """Execute the full benchmark and persist the chart.

        Returns:
            BenchRun with the results and the written image path.

        Raises:
            ValueError: If the configuration is invalid.
            RuntimeError: If the workspace cannot be prepared.
            OSError: If the chart cannot be written.
        """
        # Phase 1: Validate configuration.
        errors = validate_config(self.config)
        fatal = [e for e in errors if e.severity == "error"]
        for w in (e for e in errors if e.severity == "warning"):
            log.warning("Config warning: %s: %s", w.field, w.message)
        if fatal:
            messages = [f"  {e.field}: {e.message}" for e in fatal]
            raise ValueError("Invalid benchmark configuration:\n" + "\n".join(messages))

        run = BenchRun(start_time=_now().isoformat())
        log.info(
            "Benchmarking %d package manager(s) x %d categories (%s@%s)",
            len(self.config.package_managers),
            len(self.config.categories),
            self.config.package,
            self.config.tag,
        )

        # Phase 2: Execute the matrix.
        run.results = self.run_all(self.config.package_managers, self.config.categories)
        completed_at = _now()
        run.end_time = completed_at.isoformat()
        self.workspace.remove()

        # Phase 3: Render.
        background = self._load_background()
        image = render_chart(
            run.results,
            self.config.chart,
            date_label=completed_at.astimezone().strftime("%Y-%m-%d"),
            background=background,
        )

        # Phase 4: Persist.
        run.image_path = persist_results(
            image,
            completed_at,
            self.config.results_dir,
            self.config.retention,
            results=run.results,
        )

        # Phase 5: Point the README at the new chart.
        readme = self.config.readme_path
        if readme is not None:
            if readme.exists():
                run.readme_updated = update_readme(readme, run.image_path)
            else:
                log.debug("README %s not found, not updating it", readme)

        return run

    def run_all(
        self,
        package_managers: list[str],
        categories: list[CategoryDef],
    ) -> list[BenchmarkResult]:
        """Time every (package manager, category) pair, in matrix order.

        Returns:
            One BenchmarkResult per pair; package managers outer,
            categories inner.
        """
        results: list[BenchmarkResult] = []
        total = len(package_managers) * len(categories)

        for pm in package_managers:
            for category in categories:
                task = BenchmarkTask(pm, category.name)
                result = self._run_task(task, category)
                results.append(result)
                self.progress(
                    BenchProgress(
                        package_manager=task.package_manager,
                        category=task.category,
                        index=len(results),
                        total=total,
                        command=result.command,
                        elapsed_ms=result.elapsed_ms,
                        status=result.status,
                    )
                )

        return results

    def _run_task(self, task: BenchmarkTask, category: CategoryDef) -> BenchmarkResult:
        """Prepare the workspace and time the command for *task*."""
        command = self.config.command_for(task.package_manager, category)
        log.debug("Starting %s %s: %s", task.package_manager, task.category, command)

        self.workspace.prepare(category.destructive)
        timed = run_timed(command, cwd=self.workspace.path, timeout=self.config.timeout)

        if timed.timed_out:
            log.warning(
                "%s %s timed out after %ds; recording %d ms",
                task.package_manager,
                task.category,
                self.config.timeout,
                timed.elapsed_ms,
            )
        elif timed.exit_code != 0:
            log.warning(
                "%s %s exited with %d; its timing is flagged on the chart",
                task.package_manager,
                task.category,
                timed.exit_code,
            )

        return BenchmarkResult(
            package_manager=task.package_manager,
            category=task.category,
            elapsed_ms=timed.elapsed_ms,
            command=command,
            exit_code=timed.exit_code,
            status=timed.status,
        )

    def _load_background(self) -> Any:
        """Load the decorative background, honouring ``strict_background``.

        Returns None when no background is configured, or when loading
        fails and the policy is lenient.
        """
        path: Path | None = self.config.background_image
        if path is None:
            return None
        start = time.monotonic()
        try:
            background = load_background(path)
        except (OSError, ValueError) as exc:
            if self.config.strict_background:
                log.error("Error loading background image %s: %s", path, exc)
                raise
            log.warning("Error loading background image %s: %s; using plain fill", path, exc)
            return None
        log.debug("Loaded background %s in %.2fs", path, time.monotonic() - start)
        return background

    @staticmethod
    def _default_progress(progress: BenchProgress) -> None:
        """Default progress callback: log one line per command."""
        line = (
            f"  [{progress.index}/{progress.total}] {progress.package_manager:8s} "
            f"{progress.category:12s} {progress.elapsed_ms:8d} ms"
        )
        if progress.status and progress.status != "ok":
            line += f" [{progress.status}]"
        log.info(line)
