#!/usr/bin/env python3
"""
Tests for the throttled progress reporter.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
from unittest.mock import Mock

from cib_detector.utils.progress_tracker import ProgressReporter, compute_progress_step


class TestProgressReporter(unittest.TestCase):
    """Test suite for ProgressReporter."""

    def test_throttled_updates(self):
        callback = Mock()
        reporter = ProgressReporter(callback, throttle=1000)
        reporter.report('Embedding', 0, 10)
        reporter.report('Embedding', 1, 10)
        reporter.report('Embedding', 2, 10)
        reporter.report('Embedding', 10, 10)

        self.assertEqual(callback.call_count, 2)
        callback.assert_called_with('Embedding', 10, 10)

    def test_stage_change_forces_emit(self):
        callback = Mock()
        reporter = ProgressReporter(callback, throttle=1000)
        reporter.report('Loading', 1, 10)
        reporter.report('Comparing', 1, 10)
        self.assertEqual([c.args[0] for c in callback.call_args_list], ['Loading', 'Comparing'])

    def test_forced_update(self):
        callback = Mock()
        reporter = ProgressReporter(callback, throttle=1000)
        reporter.report('Stage', 1, 10)
        reporter.report('Stage', 2, 10, force=True)
        self.assertEqual(callback.call_count, 2)

    def test_without_callback(self):
        reporter = ProgressReporter()
        reporter.report('Stage', 1, 10)

    def test_stage_times(self):
        with ProgressReporter() as reporter:
            reporter.report('A')
            reporter.report('B')
        stats = reporter.get_stats()
        self.assertEqual(stats['stages'], 2)
        self.assertIn('A', stats['stage_times'])

    def test_compute_progress_step(self):
        self.assertEqual(compute_progress_step(0), 1)
        self.assertEqual(compute_progress_step(50), 1)
        self.assertEqual(compute_progress_step(1000), 10)


if __name__ == '__main__':
    unittest.main()
