"""IdentityUserRole model — user/role association rows.

No foreign keys: both referenced rows are expected to exist, but nothing in
the schema enforces it.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from sqlidentity.models.base import Base, KeyedMixin


class IdentityUserRoleMixin(KeyedMixin):
    __tablename__ = "UserRoles"

    @declared_attr
    def role_id(cls) -> Mapped[Any]:
        return mapped_column("RoleId", cls.key_converter.column_type(), primary_key=True)

    @declared_attr
    def user_id(cls) -> Mapped[Any]:
        return mapped_column("UserId", cls.key_converter.column_type(), primary_key=True)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} user={self.user_id!r} role={self.role_id!r}>"


class IdentityUserRole(IdentityUserRoleMixin, Base):
    pass
