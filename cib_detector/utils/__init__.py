"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
__init__.py (utils module)

MAIN OBJECTIVE:
---------------
This script initializes the utils module.

Dependencies:
-------------
- cib_detector.utils.progress_tracker

MAIN FEATURES:
--------------
1) Exports ProgressReporter

Author:
-------
Antoine Lemor
"""

from cib_detector.utils.progress_tracker import ProgressReporter, compute_progress_step

__all__ = ['ProgressReporter', 'compute_progress_step']
