"""Error taxonomy for the album store.

Every operation raises one of these instead of returning a sentinel:

- NotFound: a referenced album or asset id does not exist
- InvalidReference: a cross-entity reference breaks an invariant
  (cover asset owned by another album, parent inside own subtree)
- InvalidArgument: the caller's input does not match stored state
  (reorder list is not exactly the album's asset set)
- Collision: generated identifiers kept colliding after every retry
- StorageError: the underlying SQLite medium failed
"""


class AlbumStoreError(Exception):
    """Base class for all album store errors."""


class NotFound(AlbumStoreError):
    """Referenced album/asset does not exist."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind.capitalize()} not found: {entity_id}")


class InvalidReference(AlbumStoreError):
    """Cross-entity reference violates an invariant."""


class InvalidArgument(InvalidReference):
    """Input set does not match the stored set.

    Subclass of InvalidReference: a reorder mismatch is a reference
    violation too, so callers handling either name catch it.
    """


class Collision(AlbumStoreError):
    """Identifier collided on every retry."""

    def __init__(self, table: str, attempts: int):
        self.table = table
        self.attempts = attempts
        super().__init__(f"Identifier collision on {table} after {attempts} attempts")


class StorageError(AlbumStoreError):
    """Underlying storage failure (disk full, corruption, unwritable)."""
