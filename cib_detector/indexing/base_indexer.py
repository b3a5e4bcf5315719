"""
PROJECT:
-------
CIB-coordinated-behavior-detection

TITLE:
------
base_indexer.py

MAIN OBJECTIVE:
---------------
This script provides the abstract base class for indexing strategies in the CIB detection
framework, defining the common interface for index creation, querying and statistics.

Dependencies:
-------------
- abc
- typing
- datetime
- logging

MAIN FEATURES:
--------------
1) Abstract interface for index building and querying
2) Index metadata (creation time, entry count)
3) Statistics reporting shared by all indexers

Author:
-------
Antoine Lemor
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Any, List
import logging

logger = logging.getLogger(__name__)


class AbstractIndexer(ABC):
    """
    Abstract base class for all indexing strategies.
    Provides common functionality and interface.
    """

    def __init__(self, name: str = "indexer"):
        """
        Initialize indexer.

        Args:
            name: Name of the indexer for logging
        """
        self.name = name
        self.index = {}
        self.metadata = {
            'created': None,
            'n_entries': 0
        }

    @abstractmethod
    def build_index(self, data: Any, **kwargs) -> Dict[Any, Any]:
        """
        Build index from data.

        Args:
            data: Source data
            **kwargs: Additional parameters

        Returns:
            Dictionary containing the index
        """
        pass

    @abstractmethod
    def query_index(self, criteria: Dict[str, Any]) -> List[Any]:
        """
        Query the index based on criteria.

        Args:
            criteria: Query criteria

        Returns:
            List of matching entries
        """
        pass

    def _mark_built(self, n_entries: int) -> None:
        self.metadata['created'] = datetime.now().isoformat()
        self.metadata['n_entries'] = n_entries
        logger.debug(f"{self.name}: {len(self.index)} keys, {n_entries} entries")

    def get_statistics(self) -> Dict[str, Any]:
        """Get index statistics."""
        return {
            'name': self.name,
            'n_keys': len(self.index),
            'n_entries': self.metadata['n_entries'],
            'created': self.metadata['created']
        }
