"""Declarative base and shared helpers."""

from typing import Any, ClassVar

from sqlalchemy import inspect
from sqlalchemy.orm import DeclarativeBase

from sqlidentity.core.keys import STRING_KEY, KeyConverter


class Base(DeclarativeBase):
    """Declarative base holding the default identity tables."""
    pass


class KeyedMixin:
    """Binds an entity to the key type of its schema.

    Override ``key_converter`` on your own subclasses to switch every key
    column (``Id``, ``UserId``, ``RoleId``) to another type.
    """

    key_converter: ClassVar[KeyConverter] = STRING_KEY


def column_values(entity: Any) -> dict[str, Any]:
    """Return ``{attribute: value}`` for every mapped column of *entity*.

    Reads plain instance state, so it works on transient and detached
    objects without touching a session.
    """
    mapper = inspect(type(entity))
    return {attr.key: getattr(entity, attr.key) for attr in mapper.column_attrs}



def by_attribute(model: type, values: dict[str, Any]) -> dict[Any, Any]:
    """Key *values* by mapped attribute so DML statements resolve PascalCase columns."""
    return {getattr(model, key): value for key, value in values.items()}
