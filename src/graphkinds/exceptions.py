"""Exceptions raised by graphkinds.

"Not found" is never an exception here: lookups return ``None`` or an
empty list. Everything below is either a caller/configuration mistake or
a failure of the underlying store.
"""

from __future__ import annotations


class GraphKindsError(Exception):
    """Base exception for graphkinds."""


class ConfigurationError(GraphKindsError):
    """Schema metadata or call arguments make the operation impossible.

    Raised before anything is sent to the store and never retried.
    """


class RelationNotConfiguredError(ConfigurationError):
    """A traversal relation was looked up for a kind that never registered it."""

    def __init__(self, kind: str, relation: str):
        super().__init__(f"Relation '{relation}' is not configured for kind '{kind}'")
        self.kind = kind
        self.relation = relation


class StoreError(GraphKindsError):
    """The store or its transport failed (connectivity, constraints, bad AQL)."""


class CompositionStepError(GraphKindsError):
    """One step of a hyperedge composition failed.

    Attributes:
        step: Name of the step ("hub", "from_edge", "info_edge", "to_edge").
        cause: The underlying StoreError, if the store was reached.
    """

    def __init__(self, step: str, message: str, cause: StoreError | None = None):
        super().__init__(f"{step}: {message}")
        self.step = step
        self.cause = cause


class PartialCompositionError(GraphKindsError):
    """Aggregate of the step errors met while composing a hyperedge."""

    def __init__(self, errors: list[CompositionStepError]):
        steps = ", ".join(e.step for e in errors)
        super().__init__(f"Hyperedge composition failed in {len(errors)} step(s): {steps}")
        self.errors = list(errors)
