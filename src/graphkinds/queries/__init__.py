"""Pure AQL composers. Nothing in this package performs I/O."""

from . import documents, traversal
from .base import DEFAULT_LIMIT, AqlQuery, Direction

__all__ = ["AqlQuery", "DEFAULT_LIMIT", "Direction", "documents", "traversal"]
