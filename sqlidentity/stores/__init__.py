"""Store adapters implementing the identity capability protocols."""

from sqlidentity.stores.role_store import RoleStore
from sqlidentity.stores.user_store import UserStore

__all__ = ["RoleStore", "UserStore"]
