"""IdentitySchema — the set of entity classes a pair of stores operates on."""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlidentity.core.exceptions import InvalidArgumentError
from sqlidentity.core.keys import KeyConverter
from sqlidentity.models.claim import (
    IdentityRoleClaim,
    IdentityRoleClaimMixin,
    IdentityUserClaim,
    IdentityUserClaimMixin,
)
from sqlidentity.models.login import IdentityUserLogin, IdentityUserLoginMixin
from sqlidentity.models.role import IdentityRole, IdentityRoleMixin
from sqlidentity.models.user import IdentityUser, IdentityUserMixin
from sqlidentity.models.user_role import IdentityUserRole, IdentityUserRoleMixin


@dataclass(frozen=True)
class IdentitySchema:
    """Binds the six identity entities and their shared key type.

    Applications with custom user/role classes or a non-string key build
    their own schema::

        schema = IdentitySchema(
            user=AppUser, role=AppRole,
            user_claim=AppUserClaim, role_claim=AppRoleClaim,
            user_login=AppUserLogin, user_role=AppUserRole,
        )
    """

    user: type[IdentityUserMixin] = IdentityUser
    role: type[IdentityRoleMixin] = IdentityRole
    user_claim: type[IdentityUserClaimMixin] = IdentityUserClaim
    role_claim: type[IdentityRoleClaimMixin] = IdentityRoleClaim
    user_login: type[IdentityUserLoginMixin] = IdentityUserLogin
    user_role: type[IdentityUserRoleMixin] = IdentityUserRole
    keys: KeyConverter = field(init=False)

    def __post_init__(self) -> None:
        expected = {
            "user": IdentityUserMixin,
            "role": IdentityRoleMixin,
            "user_claim": IdentityUserClaimMixin,
            "role_claim": IdentityRoleClaimMixin,
            "user_login": IdentityUserLoginMixin,
            "user_role": IdentityUserRoleMixin,
        }
        for attr, mixin in expected.items():
            cls = getattr(self, attr)
            if not (isinstance(cls, type) and issubclass(cls, mixin)):
                raise InvalidArgumentError(attr, f"{attr} must subclass {mixin.__name__}")

        converters = {id(cls.key_converter) for cls in self.entities()}
        if len(converters) != 1:
            raise InvalidArgumentError(
                "key_converter", "All identity entities must share one key converter"
            )
        object.__setattr__(self, "keys", self.user.key_converter)

    def entities(self) -> tuple[type, ...]:
        return (
            self.user, self.role, self.user_claim,
            self.role_claim, self.user_login, self.user_role,
        )


DEFAULT_SCHEMA = IdentitySchema()
