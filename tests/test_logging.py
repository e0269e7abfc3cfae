"""Tests for pmbench.logging — logger configuration."""

from __future__ import annotations

import logging
import tempfile
import unittest
from pathlib import Path

from pmbench.logging import setup_logging


class TestSetupLogging(unittest.TestCase):
    def tearDown(self) -> None:
        logger = logging.getLogger("pmbench")
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

    def _console_level(self, logger: logging.Logger) -> int:
        return next(h.level for h in logger.handlers if not isinstance(h, logging.FileHandler))

    def test_default_info(self) -> None:
        logger = setup_logging()
        self.assertEqual(self._console_level(logger), logging.INFO)

    def test_verbose(self) -> None:
        self.assertEqual(self._console_level(setup_logging(verbose=True)), logging.DEBUG)

    def test_quiet(self) -> None:
        self.assertEqual(self._console_level(setup_logging(quiet=True)), logging.WARNING)

    def test_verbose_wins_over_quiet(self) -> None:
        logger = setup_logging(verbose=True, quiet=True)
        self.assertEqual(self._console_level(logger), logging.DEBUG)

    def test_reconfigure_replaces_handlers(self) -> None:
        setup_logging()
        logger = setup_logging()
        self.assertEqual(len(logger.handlers), 1)

    def test_log_file_gets_debug(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "run.log"
            logger = setup_logging(quiet=True, log_file=log_file)
            logging.getLogger("pmbench").debug("detail for the file")
            for handler in logger.handlers:
                handler.flush()
            self.assertIn("detail for the file", log_file.read_text())
