"""
ArangoDB connection for graphkinds.

Wraps a python-arango database handle behind the Connection interface and
translates driver and transport failures into StoreError. Creating
databases, collections or views is left to whoever owns the schema.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, Iterator, List, Optional

from arango import ArangoClient
from arango.database import StandardDatabase
from arango.exceptions import ArangoError

from ..exceptions import StoreError
from ..settings import GraphKindsSettings, settings as default_settings
from .base import Connection

logger = logging.getLogger(__name__)

# requests' exceptions derive from OSError; timeouts and refused
# connections surface as those rather than as ArangoError.
_STORE_FAILURES = (ArangoError, OSError)


class ArangoConnection(Connection):
    """
    python-arango backed connection.

    The database handle is opened on `connect()` or lazily on first use;
    concurrent first users open it once. Use as a context manager to close
    the HTTP client on exit.
    """

    def __init__(
        self,
        url: str = "http://localhost:8529",
        database: str = "_system",
        username: str = "root",
        password: str = "",
        request_timeout: float = 60.0,
    ):
        self.url = url
        self.database_name = database
        self.username = username
        self.password = password
        self.request_timeout = request_timeout

        self.client: Optional[ArangoClient] = None
        self.db: Optional[StandardDatabase] = None
        self._connect_lock = threading.Lock()

    @classmethod
    def from_settings(cls, cfg: Optional[GraphKindsSettings] = None) -> "ArangoConnection":
        cfg = cfg or default_settings
        return cls(
            url=cfg.arango_url,
            database=cfg.arango_database,
            username=cfg.arango_username,
            password=cfg.arango_password,
            request_timeout=cfg.request_timeout,
        )

    def __enter__(self) -> "ArangoConnection":
        self.connect()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def connect(self) -> StandardDatabase:
        """Open the database handle (once) and return it."""
        if self.db is not None:
            return self.db
        with self._connect_lock:
            if self.db is not None:
                return self.db
            try:
                client = ArangoClient(hosts=self.url, request_timeout=self.request_timeout)
                db = client.db(
                    self.database_name,
                    username=self.username,
                    password=self.password,
                    verify=True,
                )
            except _STORE_FAILURES as e:
                logger.error(f"Failed to connect to ArangoDB at {self.url}: {e}")
                raise StoreError(f"Cannot connect to ArangoDB at {self.url}: {e}") from e

            self.client = client
            self.db = db
            logger.info(f"Connected to ArangoDB at {self.url} (database '{self.database_name}')")
            return db

    def close(self) -> None:
        """Close the HTTP client."""
        with self._connect_lock:
            if self.client:
                self.client.close()
                logger.info("Disconnected from ArangoDB")
            self.client = None
            self.db = None

    # ------------------------------------------------------------------
    # handles
    # ------------------------------------------------------------------

    def resolve_collection(self, name: str) -> Any:
        db = self.connect()
        try:
            if not db.has_collection(name):
                raise StoreError(f"Collection '{name}' does not exist")
            return db.collection(name)
        except _STORE_FAILURES as e:
            logger.error(f"Failed to resolve collection {name}: {e}")
            raise StoreError(f"Cannot resolve collection '{name}': {e}") from e

    def resolve_edge_collection(self, name: str) -> Any:
        collection = self.resolve_collection(name)
        try:
            properties = collection.properties()
        except _STORE_FAILURES as e:
            logger.error(f"Failed to read properties of collection {name}: {e}")
            raise StoreError(f"Cannot resolve edge collection '{name}': {e}") from e
        if not (properties.get("edge") or properties.get("type") == "edge"):
            raise StoreError(f"Collection '{name}' is not an edge collection")
        return collection

    def resolve_view(self, name: str) -> Any:
        db = self.connect()
        try:
            return db.view(name)
        except _STORE_FAILURES as e:
            logger.error(f"Failed to resolve view {name}: {e}")
            raise StoreError(f"Cannot resolve view '{name}': {e}") from e

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def execute_query(
        self, query: str, bind_vars: Optional[Dict[str, Any]] = None
    ) -> Optional[Iterable[Dict[str, Any]]]:
        """Execute an AQL query, returning its rows as a lazy iterator."""
        db = self.connect()
        try:
            cursor = db.aql.execute(query, bind_vars=bind_vars or {})
        except _STORE_FAILURES as e:
            logger.error(f"AQL query failed: {e}")
            raise StoreError(str(e)) from e

        if cursor is None:
            return None
        return self._rows(cursor)

    @staticmethod
    def _rows(cursor: Iterable[Dict[str, Any]]) -> Iterator[Dict[str, Any]]:
        # Later batches are fetched while iterating; keep their failures typed.
        try:
            yield from cursor
        except _STORE_FAILURES as e:
            logger.error(f"Fetching query results failed: {e}")
            raise StoreError(str(e)) from e

    # ------------------------------------------------------------------
    # maintenance
    # ------------------------------------------------------------------

    def drop_collection(self, name: str) -> bool:
        db = self.connect()
        try:
            dropped = db.delete_collection(name, ignore_missing=True)
        except _STORE_FAILURES as e:
            logger.error(f"Failed to drop collection {name}: {e}")
            raise StoreError(f"Cannot drop collection '{name}': {e}") from e
        if dropped:
            logger.info(f"Dropped collection {name}")
        return bool(dropped)

    def list_indexes(self, name: str) -> List[Dict[str, Any]]:
        collection = self.resolve_collection(name)
        try:
            return list(collection.indexes())
        except _STORE_FAILURES as e:
            logger.error(f"Failed to list indexes of {name}: {e}")
            raise StoreError(f"Cannot list indexes of '{name}': {e}") from e
