"""Tests for pmbench.bench.persist — timestamped result directories."""

from __future__ import annotations

import json
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from bench_test_helpers import make_result
from pmbench.bench.persist import (
    IMAGE_NAME,
    RESULTS_NAME,
    Retention,
    persist_results,
    prune_runs,
    run_dir_name,
)

ILLEGAL_SEGMENT_CHARS = set(':<>"/\\|?*')


class TestRunDirName(unittest.TestCase):
    def test_format(self) -> None:
        ts = datetime(2024, 3, 1, 12, 30, 5, 123456, tzinfo=timezone.utc)
        self.assertEqual(run_dir_name(ts), "2024-03-01T12-30-05.123Z")

    def test_naive_is_utc(self) -> None:
        ts = datetime(2024, 3, 1, 12, 30, 5)
        self.assertEqual(run_dir_name(ts), "2024-03-01T12-30-05.000Z")

    def test_converts_to_utc(self) -> None:
        ts = datetime(2024, 3, 1, 14, 30, 5, tzinfo=timezone(timedelta(hours=2)))
        self.assertEqual(run_dir_name(ts), "2024-03-01T12-30-05.000Z")

    def test_no_illegal_characters(self) -> None:
        ts = datetime(2024, 12, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)
        name = run_dir_name(ts)
        self.assertFalse(ILLEGAL_SEGMENT_CHARS & set(name))

    def test_injective_for_distinct_seconds(self) -> None:
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        names = {run_dir_name(start + timedelta(seconds=s)) for s in range(0, 200000, 7)}
        self.assertEqual(len(names), len(range(0, 200000, 7)))

    def test_sorts_chronologically(self) -> None:
        a = run_dir_name(datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc))
        b = run_dir_name(datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc))
        self.assertLess(a, b)


class TestPersistResults(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.base = Path(self._tmp.name) / "results"
        self.ts = datetime(2024, 3, 1, 12, 30, 5, tzinfo=timezone.utc)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_writes_image(self) -> None:
        path = persist_results(b"png-bytes", self.ts, self.base, Retention.KEEP)
        self.assertEqual(path, self.base / "2024-03-01T12-30-05.000Z" / IMAGE_NAME)
        self.assertEqual(path.read_bytes(), b"png-bytes")

    def test_writes_results_json(self) -> None:
        results = [make_result("npm", "install", 500), make_result("npm", "uninstall", 250)]
        path = persist_results(b"x", self.ts, self.base, Retention.KEEP, results=results)
        data = json.loads((path.parent / RESULTS_NAME).read_text())
        self.assertEqual([d["elapsed_ms"] for d in data], [500, 250])

    def test_no_results_json_by_default(self) -> None:
        path = persist_results(b"x", self.ts, self.base, Retention.KEEP)
        self.assertFalse((path.parent / RESULTS_NAME).exists())

    def test_keep_retains_previous_runs(self) -> None:
        first = persist_results(b"1", self.ts, self.base, Retention.KEEP)
        second = persist_results(b"2", self.ts + timedelta(seconds=1), self.base, Retention.KEEP)
        self.assertTrue(first.exists())
        self.assertTrue(second.exists())
        self.assertEqual(len([p for p in self.base.iterdir() if p.is_dir()]), 2)

    def test_prune_removes_previous_runs(self) -> None:
        first = persist_results(b"1", self.ts, self.base, Retention.PRUNE)
        second = persist_results(b"2", self.ts + timedelta(seconds=1), self.base, Retention.PRUNE)
        self.assertFalse(first.exists())
        self.assertTrue(second.exists())
        self.assertEqual([p.name for p in self.base.iterdir()], [second.parent.name])

    def test_prune_keeps_plain_files(self) -> None:
        self.base.mkdir(parents=True)
        (self.base / "README.txt").write_text("keep me")
        persist_results(b"1", self.ts, self.base, Retention.PRUNE)
        self.assertTrue((self.base / "README.txt").exists())

    def test_prune_keeps_unrelated_directories(self) -> None:
        for name in ("src", ".git", "2024-03-01"):
            (self.base / name).mkdir(parents=True)
        old = self.base / run_dir_name(self.ts - timedelta(days=1))
        old.mkdir()
        removed = prune_runs(self.base)
        self.assertEqual(removed, [old])
        for name in ("src", ".git", "2024-03-01"):
            self.assertTrue((self.base / name).is_dir())

    def test_prune_missing_base(self) -> None:
        self.assertEqual(prune_runs(self.base), [])

    def test_write_failure_propagates(self) -> None:
        self.base.parent.mkdir(parents=True, exist_ok=True)
        self.base.write_text("a file where the directory should be")
        with self.assertRaises(OSError):
            persist_results(b"x", self.ts, self.base, Retention.KEEP)
