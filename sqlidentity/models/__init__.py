"""SQLAlchemy ORM models for the identity tables."""

from sqlidentity.models.base import Base, KeyedMixin, column_values
from sqlidentity.models.claim import (
    IdentityRoleClaim,
    IdentityRoleClaimMixin,
    IdentityUserClaim,
    IdentityUserClaimMixin,
)
from sqlidentity.models.login import IdentityUserLogin, IdentityUserLoginMixin
from sqlidentity.models.role import IdentityRole, IdentityRoleMixin
from sqlidentity.models.schema import DEFAULT_SCHEMA, IdentitySchema
from sqlidentity.models.user import IdentityUser, IdentityUserMixin
from sqlidentity.models.user_role import IdentityUserRole, IdentityUserRoleMixin

__all__ = [
    "Base", "KeyedMixin", "column_values", "DEFAULT_SCHEMA", "IdentitySchema",
    "IdentityUser", "IdentityUserMixin", "IdentityRole", "IdentityRoleMixin",
    "IdentityUserClaim", "IdentityUserClaimMixin", "IdentityRoleClaim",
    "IdentityRoleClaimMixin", "IdentityUserLogin", "IdentityUserLoginMixin",
    "IdentityUserRole", "IdentityUserRoleMixin",
]
