"""Error taxonomy shared by the store, the accessors and the reconciliation engines."""


class ZenTaskError(Exception):
    """Base class for all ZenTask errors."""


class ProtectedRecord(ZenTaskError):
    """Raised when deleting a system category or a pinned subcategory."""


class InvalidOperation(ZenTaskError):
    """Raised when a mutation is not allowed (e.g. changing a category's kind)."""


class StoreUnavailable(ZenTaskError):
    """Raised when the document store cannot be read or written."""


class NotFound(ZenTaskError):
    """Raised when a referenced record does not exist."""
