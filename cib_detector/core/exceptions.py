"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
exceptions.py

MAIN OBJECTIVE:
---------------
This script defines custom exception classes for the CIB detection framework, providing
structured error handling for configuration, ingestion, detection, embedding and graph components.

Dependencies:
-------------
None

MAIN FEATURES:
--------------
1) Base CIBDetectorError exception class
2) Specialized exceptions for configuration, validation and detection errors
3) Embedding provider failures
4) Graph annotation errors

Author:
-------
Antoine Lemor
"""


class CIBDetectorError(Exception):
    """Base exception for CIB detector."""
    pass


class ConfigurationError(CIBDetectorError):
    """Configuration-related errors."""
    pass


class ValidationError(CIBDetectorError):
    """Invalid input record at the ingestion boundary."""
    pass


class DetectionError(CIBDetectorError):
    """Detection-related errors."""
    pass


class EmbeddingError(CIBDetectorError):
    """Embedding provider errors."""
    pass


class GraphError(CIBDetectorError):
    """Graph annotation errors."""
    pass
