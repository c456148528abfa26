"""Store connections."""

from .base import Connection
from .arango import ArangoConnection

__all__ = [
    "Connection",
    "ArangoConnection",
]
