"""Store-level errors.

Reads of missing rows return None; these are raised only when a write
cannot be applied.
"""


class StoreError(Exception):
    """Base class for data-access failures the caller can act on."""


class NotFoundError(StoreError):
    """The row targeted by a delete or point update does not exist."""


class ConstraintError(StoreError):
    """A uniqueness or referential-integrity rule rejected the write."""
