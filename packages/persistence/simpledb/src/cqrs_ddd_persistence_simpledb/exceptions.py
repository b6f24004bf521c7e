"""SimpleDB persistence exceptions."""

from __future__ import annotations

STORE_NAME = "simpledb-store"


class SimpleDBPersistenceError(Exception):
    """Base for SimpleDB persistence errors."""


class SimpleDBConnectionError(SimpleDBPersistenceError):
    """Raised when the SimpleDB client cannot be created or is closed."""


class SimpleDBQueryError(SimpleDBPersistenceError):
    """Raised when a filter cannot be rendered as a select expression."""


class SimpleDBStoreError(SimpleDBPersistenceError):
    """Generic wrapper for any error returned by the store or transport.

    Carries the entity error ``code`` and the ``store`` name so callers can
    tell adapter failures apart without inspecting botocore internals.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "entity/error",
        store: str = STORE_NAME,
    ) -> None:
        self.code = code
        self.store = store
        super().__init__(f"{store}: {code}: {message}")


class SimpleDBConfigurationError(SimpleDBStoreError):
    """Raised when the store cannot be configured from its settings."""

    def __init__(self, message: str, *, store: str = STORE_NAME) -> None:
        super().__init__(message, code="entity/configure", store=store)
