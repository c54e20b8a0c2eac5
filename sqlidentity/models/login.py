"""IdentityUserLogin model — external login associations.

The composite key is (LoginProvider, ProviderDisplayName) even though
lookups go through (LoginProvider, ProviderKey). Both columns of the key
are therefore required.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from sqlidentity.models.base import Base, KeyedMixin


class IdentityUserLoginMixin(KeyedMixin):
    __tablename__ = "UserLogins"

    login_provider: Mapped[str] = mapped_column("LoginProvider", String(128), primary_key=True)
    provider_display_name: Mapped[str] = mapped_column(
        "ProviderDisplayName", String(128), primary_key=True
    )
    provider_key: Mapped[str] = mapped_column("ProviderKey", String(128), nullable=False)

    @declared_attr
    def user_id(cls) -> Mapped[Any]:
        return mapped_column(
            "UserId", cls.key_converter.column_type(), nullable=False, index=True
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.login_provider}:{self.provider_key} user={self.user_id!r}>"


class IdentityUserLogin(IdentityUserLoginMixin, Base):
    pass
