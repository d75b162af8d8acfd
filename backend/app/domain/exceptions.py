"""Domain-specific exceptions — framework-independent."""

from pathlib import Path


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class StoreError(Exception):
    """Base class for failures of a file-backed store."""

    def __init__(self, path: str | Path, message: str):
        self.path = str(path)
        super().__init__(message)


class CorruptStoreError(StoreError):
    """Raised when the backing file exists but cannot be understood.

    The file is left untouched; the next write must not replace it with an
    empty list.
    """

    def __init__(self, path: str | Path, reason: str):
        self.reason = reason
        super().__init__(path, f"Store file '{path}' is corrupt: {reason}")


class StoreIOError(StoreError):
    """Raised when the backing file could not be read or written."""

    def __init__(self, path: str | Path, operation: str):
        self.operation = operation
        super().__init__(path, f"Could not {operation} store file '{path}'")
