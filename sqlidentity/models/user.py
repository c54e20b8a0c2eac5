"""IdentityUser model — one row per principal."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from sqlidentity.models.base import Base, KeyedMixin

_DEFAULTS: dict[str, Any] = {
    "email_confirmed": False,
    "phone_number_confirmed": False,
    "two_factor_enabled": False,
    "lockout_enabled": False,
    "access_failed_count": 0,
}


class IdentityUserMixin(KeyedMixin):
    """Columns of the ``Users`` table.

    Combine with your own declarative base to add application columns::

        class AppUser(IdentityUserMixin, MyBase):
            display_name: Mapped[str | None] = mapped_column(String(100))
    """

    __tablename__ = "Users"

    @declared_attr
    def id(cls) -> Mapped[Any]:
        return mapped_column("Id", cls.key_converter.column_type(), primary_key=True)

    user_name: Mapped[str | None] = mapped_column("UserName", String(256))
    normalized_user_name: Mapped[str | None] = mapped_column(
        "NormalizedUserName", String(256), index=True
    )
    email: Mapped[str | None] = mapped_column("Email", String(256))
    normalized_email: Mapped[str | None] = mapped_column(
        "NormalizedEmail", String(256), index=True
    )
    email_confirmed: Mapped[bool] = mapped_column("EmailConfirmed", Boolean, nullable=False)

    # Hash produced by the framework; never interpreted here
    password_hash: Mapped[str | None] = mapped_column("PasswordHash", Text)
    security_stamp: Mapped[str | None] = mapped_column("SecurityStamp", Text)

    phone_number: Mapped[str | None] = mapped_column("PhoneNumber", String(50))
    phone_number_confirmed: Mapped[bool] = mapped_column(
        "PhoneNumberConfirmed", Boolean, nullable=False
    )
    two_factor_enabled: Mapped[bool] = mapped_column("TwoFactorEnabled", Boolean, nullable=False)

    lockout_enabled: Mapped[bool] = mapped_column("LockoutEnabled", Boolean, nullable=False)
    lockout_end: Mapped[datetime | None] = mapped_column("LockoutEnd", DateTime(timezone=True))
    access_failed_count: Mapped[int] = mapped_column("AccessFailedCount", Integer, nullable=False)

    def __init__(self, user_name: str | None = None, **kwargs: Any) -> None:
        if "id" not in kwargs:
            kwargs["id"] = self.key_converter.new_key()
        if user_name is not None:
            kwargs.setdefault("user_name", user_name)
        for attr, default in _DEFAULTS.items():
            kwargs.setdefault(attr, default)
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.user_name!r} id={self.id!r}>"


class IdentityUser(IdentityUserMixin, Base):
    pass
