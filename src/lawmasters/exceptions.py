"""Exception hierarchy for the LawMasters dashboard client.

All library exceptions inherit from LawMastersError so callers can catch
every client error with a single base class. Store mutations themselves
never raise on bad input; these types describe failures of the
collaborators around the store (storage backends, persisted payloads)
and misuse of the store (re-entrant mutation).
"""

from typing import Any


class LawMastersError(Exception):
    """Base exception for all LawMasters client errors.

    Includes an error_code for structured logs and extra context.
    """

    error_code: str = "LM_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for logs and CLI output."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(LawMastersError):
    """Base exception for durable key-value storage failures."""

    error_code = "STORAGE_ERROR"


class StorageReadError(StorageError):
    """Raised when a storage backend cannot read a key."""

    error_code = "STORAGE_READ_ERROR"

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(
            f"Could not read '{key}' from storage: {reason}",
            context={"key": key, "reason": reason},
        )


class StorageWriteError(StorageError):
    """Raised when a storage backend cannot write or remove a key."""

    error_code = "STORAGE_WRITE_ERROR"

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(
            f"Could not write '{key}' to storage: {reason}",
            context={"key": key, "reason": reason},
        )


class PersistedStateError(LawMastersError):
    """Raised when a persisted preference payload cannot be decoded."""

    error_code = "PERSISTED_STATE_INVALID"

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(
            f"Persisted state under '{key}' is invalid: {reason}",
            context={"key": key, "reason": reason},
        )


# =============================================================================
# Store Errors
# =============================================================================


class StoreError(LawMastersError):
    """Base exception for misuse of the session store."""

    error_code = "STORE_ERROR"


class ReentrantMutationError(StoreError):
    """Raised when a listener mutates the store while being notified."""

    error_code = "REENTRANT_MUTATION"

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"Cannot call '{operation}' while store listeners are being notified",
            context={"operation": operation},
        )


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(LawMastersError):
    """Raised when settings describe an unusable setup."""

    error_code = "CONFIGURATION_ERROR"
