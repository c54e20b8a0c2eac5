"""Exception hierarchy raised by the identity stores.

Absence is never an error for lookups (``find_by_*`` return ``None``).
Cancellation is kept outside :class:`IdentityStoreError` so callers can tell
an abandoned call from a failed one.
"""

from __future__ import annotations


class IdentityStoreError(Exception):
    """Base class for every failure surfaced by a store."""


class InvalidArgumentError(IdentityStoreError, ValueError):
    """A required argument was None, blank or malformed. Raised before any I/O."""

    def __init__(self, argument: str, message: str | None = None) -> None:
        self.argument = argument
        super().__init__(message or f"Argument '{argument}' must not be None")


class InvalidOperationError(IdentityStoreError):
    """The requested operation depends on state that does not exist."""


class RoleNotFoundError(InvalidOperationError):
    def __init__(self, role_name: str) -> None:
        self.role_name = role_name
        super().__init__(f"Role {role_name} not found")


class PersistenceError(IdentityStoreError):
    """The backing database rejected a query or command.

    The driver-level exception is always chained as ``__cause__``.
    """


class OperationCanceledError(Exception):
    """The caller canceled the operation before it started."""
