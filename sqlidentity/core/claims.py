"""Value types exchanged with the authentication framework."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Claim:
    type: str
    value: str

    def __str__(self) -> str:
        return f"{self.type}: {self.value}"


@dataclass(frozen=True)
class UserLoginInfo:
    """An external login as reported by the provider."""

    login_provider: str
    provider_key: str
    provider_display_name: str | None = None


@dataclass(frozen=True)
class IdentityError:
    code: str
    description: str


@dataclass(frozen=True)
class IdentityResult:
    """Outcome of a create/update/delete call."""

    succeeded: bool
    errors: tuple[IdentityError, ...] = field(default_factory=tuple)

    @classmethod
    def success(cls) -> "IdentityResult":
        return _SUCCESS

    @classmethod
    def failed(cls, *errors: IdentityError) -> "IdentityResult":
        return cls(succeeded=False, errors=tuple(errors))


_SUCCESS = IdentityResult(succeeded=True)
