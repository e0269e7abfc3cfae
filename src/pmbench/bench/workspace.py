"""The throwaway directory package-manager commands run in.

Install-class categories get a fresh directory seeded with a minimal
``package.json``.  Destructive categories (uninstall, update) reuse
whatever the preceding installs left behind, so the workspace is only
rebuilt at the start of each package manager's block.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

log = logging.getLogger("pmbench")

MANIFEST_NAME = "package.json"


def minimal_manifest(name: str = "pmbench-workspace") -> dict[str, object]:
    """Return the smallest manifest every benchmarked manager accepts."""
    return {
        "name": name,
        "version": "1.0.0",
        "private": True,
    }


class Workspace:
    """A single working directory, exclusively owned by one run."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.recreations = 0

    def prepare(self, destructive: bool) -> None:
        """Get the workspace ready for the next command.

        Args:
            destructive: True for uninstall/update-class categories,
                which operate on the state left by earlier installs.

        Raises:
            RuntimeError: If the directory cannot be removed, created
                or seeded.  The run cannot continue without it.
        """
        if destructive:
            log.debug("Reusing workspace %s", self.path)
            return

        try:
            if self.path.exists():
                shutil.rmtree(self.path)
            self.path.mkdir(parents=True)
            manifest = minimal_manifest()
            (self.path / MANIFEST_NAME).write_text(
                json.dumps(manifest, indent=2) + "\n", encoding="utf-8"
            )
        except OSError as exc:
            raise RuntimeError(f"Cannot prepare workspace {self.path}: {exc}") from exc

        self.recreations += 1
        log.debug("Recreated workspace %s", self.path)

    def remove(self) -> None:
        """Delete the workspace directory if it exists."""
        if self.path.exists():
            try:
                shutil.rmtree(self.path)
            except OSError as exc:
                raise RuntimeError(f"Cannot remove workspace {self.path}: {exc}") from exc
