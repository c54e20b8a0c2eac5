"""sqlidentity — SQLAlchemy persistence for user and role identities."""

from sqlidentity.core.cancellation import CancellationToken
from sqlidentity.core.claims import Claim, IdentityError, IdentityResult, UserLoginInfo
from sqlidentity.core.exceptions import (
    IdentityStoreError,
    InvalidArgumentError,
    InvalidOperationError,
    OperationCanceledError,
    PersistenceError,
    RoleNotFoundError,
)
from sqlidentity.core.keys import IntKey, KeyConverter, StringKey, UuidKey
from sqlidentity.models import (
    DEFAULT_SCHEMA,
    IdentityRole,
    IdentitySchema,
    IdentityUser,
)
from sqlidentity.stores import RoleStore, UserStore

__all__ = [
    "CancellationToken", "Claim", "IdentityError", "IdentityResult", "UserLoginInfo",
    "IdentityStoreError", "InvalidArgumentError", "InvalidOperationError",
    "OperationCanceledError", "PersistenceError", "RoleNotFoundError",
    "IntKey", "KeyConverter", "StringKey", "UuidKey",
    "DEFAULT_SCHEMA", "IdentityRole", "IdentitySchema", "IdentityUser",
    "RoleStore", "UserStore",
]
