"""Domain helpers for identity results, roles and password policy."""
from __future__ import annotations

from dataclasses import dataclass, field

from todo_api.core.config import Settings

ROLE_FREE = "FREE"
ROLE_PRO = "PRO"
DEFAULT_ROLES = (ROLE_PRO, ROLE_FREE)

PURPOSE_EMAIL_CONFIRMATION = "EmailConfirmation"
PURPOSE_RESET_PASSWORD = "ResetPassword"


@dataclass(frozen=True)
class IdentityError:
    code: str
    description: str

    def as_dict(self) -> dict:
        return {"code": self.code, "description": self.description}


@dataclass
class IdentityResult:
    """Outcome of a store operation: success flag plus the reported errors."""

    succeeded: bool
    errors: list[IdentityError] = field(default_factory=list)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: IdentityError) -> "IdentityResult":
        return cls(succeeded=False, errors=list(errors))

    def error_dicts(self) -> list[dict]:
        return [e.as_dict() for e in self.errors]


@dataclass(frozen=True)
class SignInResult:
    succeeded: bool = False
    is_locked_out: bool = False


def normalize(value: str | None) -> str:
    return (value or "").strip().upper()


def invalid_token() -> IdentityError:
    return IdentityError("InvalidToken", "Invalid token.")


def password_mismatch() -> IdentityError:
    return IdentityError("PasswordMismatch", "Incorrect password.")


def duplicate_email(email: str) -> IdentityError:
    return IdentityError("DuplicateEmail", f"Email '{email}' is already taken.")


def duplicate_username(username: str) -> IdentityError:
    return IdentityError("DuplicateUserName", f"User name '{username}' is already taken.")


def invalid_email(email: str) -> IdentityError:
    return IdentityError("InvalidEmail", f"Email '{email}' is invalid.")


def validate_password(password: str | None, settings: Settings) -> list[IdentityError]:
    """Apply the password policy; an empty list means the password is acceptable."""
    value = password or ""
    errors: list[IdentityError] = []
    if len(value) < settings.password_min_length:
        errors.append(
            IdentityError(
                "PasswordTooShort",
                f"Passwords must be at least {settings.password_min_length} characters.",
            )
        )
    if not any(not ch.isalnum() for ch in value):
        errors.append(
            IdentityError("PasswordRequiresNonAlphanumeric", "Passwords must have at least one non alphanumeric character.")
        )
    if not any(ch.isdigit() for ch in value):
        errors.append(IdentityError("PasswordRequiresDigit", "Passwords must have at least one digit ('0'-'9')."))
    if not any(ch.islower() for ch in value):
        errors.append(IdentityError("PasswordRequiresLower", "Passwords must have at least one lowercase ('a'-'z')."))
    if not any(ch.isupper() for ch in value):
        errors.append(IdentityError("PasswordRequiresUpper", "Passwords must have at least one uppercase ('A'-'Z')."))
    return errors
