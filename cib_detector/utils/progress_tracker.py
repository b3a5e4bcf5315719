"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
progress_tracker.py

MAIN OBJECTIVE:
---------------
This script provides stage-level progress reporting for detection runs, forwarding throttled
updates to an optional callback and drawing tqdm bars when verbose output is requested.

Dependencies:
-------------
- time
- typing
- tqdm

MAIN FEATURES:
--------------
1) Throttled progress callback (stage, current, total)
2) Forced emission on stage start/end
3) One tqdm bar per stage in verbose mode
4) Per-stage timing statistics

Author:
-------
Antoine Lemor
"""

import time
from typing import Optional, Callable, Dict, Any
from tqdm import tqdm

PROGRESS_THROTTLE_SECONDS = 0.12


def compute_progress_step(total: int) -> int:
    """Report roughly every 1% of ``total`` items."""
    if not total or total <= 0:
        return 1
    return max(1, total // 100)


class ProgressReporter:
    """
    Progress reporter shared by the pipeline stages.

    The callback receives (stage, current, total); updates closer together
    than the throttle interval are dropped unless forced or final.
    """

    def __init__(self, callback: Optional[Callable[[str, Optional[int], Optional[int]], None]] = None,
                 verbose: bool = False, throttle: float = PROGRESS_THROTTLE_SECONDS):
        self.callback = callback
        self.verbose = verbose
        self.throttle = throttle
        self._last_emit = 0.0
        self._stage = None
        self._stage_start = None
        self._bar = None
        self.stage_times: Dict[str, float] = {}

    def report(self, stage: str, current: Optional[int] = None, total: Optional[int] = None,
               force: bool = False) -> None:
        if stage != self._stage:
            self._switch_stage(stage, total)
            force = True

        if self._bar is not None and current is not None:
            self._bar.n = current
            self._bar.refresh()

        if self.callback is None:
            return
        now = time.time()
        final = current is not None and total is not None and current >= total
        if force or final or current is None or total is None or now - self._last_emit >= self.throttle:
            self._last_emit = now
            self.callback(stage, current, total)

    def _switch_stage(self, stage: str, total: Optional[int]) -> None:
        self._close_stage()
        self._stage = stage
        self._stage_start = time.time()
        if self.verbose and total:
            self._bar = tqdm(total=total, desc=stage, leave=False)

    def _close_stage(self) -> None:
        if self._stage is not None:
            self.stage_times[self._stage] = time.time() - self._stage_start
        if self._bar is not None:
            self._bar.close()
            self._bar = None

    def close(self) -> None:
        self._close_stage()
        self._stage = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def get_stats(self) -> Dict[str, Any]:
        return {
            'stages': len(self.stage_times),
            'stage_times': dict(self.stage_times),
            'total_time': sum(self.stage_times.values())
        }
