"""IdentityRole model — one row per role."""

from __future__ import annotations

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from sqlidentity.models.base import Base, KeyedMixin


class IdentityRoleMixin(KeyedMixin):
    __tablename__ = "Roles"

    @declared_attr
    def id(cls) -> Mapped[Any]:
        return mapped_column("Id", cls.key_converter.column_type(), primary_key=True)

    name: Mapped[str | None] = mapped_column("Name", String(256))
    normalized_name: Mapped[str | None] = mapped_column("NormalizedName", String(256), index=True)

    def __init__(self, name: str | None = None, **kwargs: Any) -> None:
        if "id" not in kwargs:
            kwargs["id"] = self.key_converter.new_key()
        if name is not None:
            kwargs.setdefault("name", name)
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} id={self.id!r}>"


class IdentityRole(IdentityRoleMixin, Base):
    pass
