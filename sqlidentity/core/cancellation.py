"""Cooperative cancellation signal checked at the entry of every store call."""

from __future__ import annotations

from sqlidentity.core.exceptions import OperationCanceledError


class CancellationToken:
    """A one-way flag a caller flips to abandon pending store operations.

    In-flight awaits are interrupted by regular asyncio task cancellation;
    the token only guards the start of each operation.
    """

    __slots__ = ("_canceled",)

    def __init__(self) -> None:
        self._canceled = False

    def cancel(self) -> None:
        self._canceled = True

    @property
    def is_cancellation_requested(self) -> bool:
        return self._canceled

    def raise_if_cancellation_requested(self) -> None:
        if self._canceled:
            raise OperationCanceledError("The operation was canceled")

    @classmethod
    def canceled(cls) -> "CancellationToken":
        token = cls()
        token.cancel()
        return token

    def __repr__(self) -> str:
        return f"<CancellationToken canceled={self._canceled}>"
