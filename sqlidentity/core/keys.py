"""Key converters — strategy objects describing the primary-key type of users and roles.

A converter owns everything the stores need to know about a key type ``K``:
the SQLAlchemy column type, the string round-trip used by ``find_by_id`` /
``get_user_id``, the zero value returned for a missing id, and how (or
whether) a fresh key is generated when an entity is default-constructed.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from sqlalchemy import Integer, String, Uuid
from sqlalchemy.types import TypeEngine

from sqlidentity.core.exceptions import InvalidArgumentError

K = TypeVar("K")


class KeyConverter(ABC, Generic[K]):
    """Equality-comparable key type with an invariant string form."""

    name: str = "key"

    @abstractmethod
    def column_type(self) -> TypeEngine[Any]:
        """SQLAlchemy type used for ``Id`` and every foreign key column."""

    @abstractmethod
    def parse(self, value: str) -> K:
        """Convert the string form back to a key. May raise ValueError/TypeError."""

    def format(self, key: K) -> str:
        return str(key)

    @property
    def zero(self) -> K | None:
        """Value used when the string form is None."""
        return None

    def new_key(self) -> K | None:
        """Fresh key for a default-constructed entity, or None when the database assigns it."""
        return None

    def from_string(self, value: str | None) -> K | None:
        if value is None:
            return self.zero
        try:
            return self.parse(value)
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(
                "id", f"'{value}' is not a valid {self.name} key"
            ) from exc

    def to_string(self, key: K | None) -> str | None:
        if key is None:
            return None
        return self.format(key)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


class StringKey(KeyConverter[str]):
    """Text keys; new entities get a UUID4 rendered as text."""

    name = "string"

    def __init__(self, length: int = 450) -> None:
        self.length = length

    def column_type(self) -> TypeEngine[Any]:
        return String(self.length)

    def parse(self, value: str) -> str:
        return value

    def new_key(self) -> str:
        return str(uuid.uuid4())


class UuidKey(KeyConverter[uuid.UUID]):
    name = "uuid"

    def column_type(self) -> TypeEngine[Any]:
        return Uuid(as_uuid=True)

    def parse(self, value: str) -> uuid.UUID:
        return uuid.UUID(value)

    def new_key(self) -> uuid.UUID:
        return uuid.uuid4()


class IntKey(KeyConverter[int]):
    """Integer keys. Not generated client-side; callers assign them."""

    name = "int"

    def column_type(self) -> TypeEngine[Any]:
        return Integer()

    def parse(self, value: str) -> int:
        return int(value.strip())

    @property
    def zero(self) -> int:
        return 0


STRING_KEY = StringKey()
