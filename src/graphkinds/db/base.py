"""
Connection abstraction consumed by graphkinds.

Repositories never talk to a driver directly: they resolve collection and
view handles and run composed queries through this narrow interface, so a
different transport (or a test double) can be swapped in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional


class Connection(ABC):
    """Abstract base class for store connections."""

    @abstractmethod
    def resolve_collection(self, name: str) -> Any:
        """Return a durable handle for a document collection.

        Must be idempotent and safe to call once the schema exists.
        """
        pass

    @abstractmethod
    def resolve_edge_collection(self, name: str) -> Any:
        """Return a durable handle for an edge collection."""
        pass

    @abstractmethod
    def resolve_view(self, name: str) -> Any:
        """Return a durable handle for a search view."""
        pass

    @abstractmethod
    def execute_query(
        self, query: str, bind_vars: Optional[Dict[str, Any]] = None
    ) -> Optional[Iterable[Dict[str, Any]]]:
        """
        Execute a composed query and return its rows.

        The rows may be consumed lazily. Returns None when the store hands
        back no cursor; raises StoreError on any store or transport failure.
        """
        pass

    @abstractmethod
    def drop_collection(self, name: str) -> bool:
        """Drop a collection. Returns False if it did not exist."""
        pass

    @abstractmethod
    def list_indexes(self, name: str) -> List[Dict[str, Any]]:
        """Describe the indexes of a collection."""
        pass
