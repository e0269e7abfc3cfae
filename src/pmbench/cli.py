"""Command-line interface for pmbench.

``pmbench`` takes no arguments: the benchmark matrix comes from the
built-in defaults or from ``pmbench.yaml`` in the current directory.
The only options control logging.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from pmbench import __version__
from pmbench.logging import setup_logging

log = logging.getLogger("pmbench")


@click.command()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write a DEBUG log to this file.",
)
def main(verbose: bool, quiet: bool, log_file: Path | None) -> None:
    """Time npm, pnpm and yarn operations and chart the results."""
    from pmbench.bench.config import load_config
    from pmbench.bench.display import format_run_summary
    from pmbench.bench.runner import BenchRunner

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    try:
        config = load_config(Path.cwd())
        run = BenchRunner(config).run()
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904
    except (ValueError, RuntimeError, OSError) as exc:
        log.debug("Benchmark failed", exc_info=True)
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    if not quiet:
        click.echo()
        click.echo(format_run_summary(run))
