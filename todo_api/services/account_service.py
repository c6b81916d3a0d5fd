"""
Account and identity use cases: registration, login, email confirmation,
password reset, profile and password changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from todo_api.core.mailer import CONFIRM_EMAIL_SUBJECT, RESET_PASSWORD_SUBJECT, code_email, send_email
from todo_api.db.models import User
from todo_api.domain.identity import ROLE_FREE, ROLE_PRO, IdentityResult
from todo_api.repositories.role_store import RoleStore
from todo_api.repositories.user_store import UserStore
from todo_api.services.sign_in import SignInService
from todo_api.services.token_service import issue_token

logger = logging.getLogger(__name__)


class AccountError(Exception):
    """Base class for account-related exceptions."""


class AccountExistsError(AccountError):
    pass


class InvalidCredentialsError(AccountError):
    pass


class LockedOutError(AccountError):
    pass


class UserNotFoundError(AccountError):
    pass


class RoleAssignmentError(AccountError):
    pass


class IdentityOperationError(AccountError):
    """A store operation reported errors; carries the store's error list."""

    def __init__(self, result: IdentityResult):
        super().__init__(", ".join(e.code for e in result.errors))
        self.result = result

    @property
    def errors(self) -> list[dict]:
        return self.result.error_dicts()


@dataclass
class UserInfo:
    role: str
    email: str


@dataclass
class AuthResult:
    token: str
    user_info: UserInfo


@dataclass
class AccountService:
    """Orchestrates the user store, role store, sign-in and email sender."""

    def __post_init__(self):
        self.users = UserStore()
        self.roles = RoleStore()
        self.sign_in = SignInService(self.users)

    # -------------------------------------- helpers --------------------------------------
    def user_info(self, user: User) -> UserInfo:
        role = ROLE_PRO if self.roles.is_in_role(user, ROLE_PRO) else ROLE_FREE
        return UserInfo(role=role, email=user.email)

    def _auth_ok(self, user: User) -> AuthResult:
        return AuthResult(token=issue_token(user), user_info=self.user_info(user))

    def _resolve_role(self, requested: Optional[str]) -> str:
        name = (requested or "").strip()
        if not name:
            return ROLE_FREE
        role = self.roles.find_by_name(name)
        return role.name if role else ROLE_FREE

    def _send_confirmation_email(self, user: User) -> bool:
        code = self.users.generate_email_confirmation_token(user)
        html, text = code_email("Please confirm your account with this code", code)
        return send_email(CONFIRM_EMAIL_SUBJECT, user.email, html, text)

    def _require_user(self, user: Optional[User]) -> User:
        if user is None:
            raise UserNotFoundError("User not found.")
        return user

    def list_usernames(self) -> list[str]:
        return self.users.list_usernames()

    # -------------------------------------- registration --------------------------------------
    def register(self, email: str, password: str, role: Optional[str] = None) -> AuthResult:
        if self.users.find_by_email(email):
            raise AccountExistsError("Email Already Exists")
        result, user = self.users.create(email, password)
        if not result.succeeded:
            # a concurrent registration can win the insert after the lookup above
            if any(e.code == "DuplicateEmail" for e in result.errors):
                raise AccountExistsError("Email Already Exists")
            raise IdentityOperationError(result)
        role_name = self._resolve_role(role)
        if not self.roles.add_user_to_role(user, role_name).succeeded:
            raise RoleAssignmentError("Role Assignment Failed.")
        logger.info("Registered user %s with role %s", user.id, role_name)
        self._send_confirmation_email(user)
        self.sign_in.sign_in(user)
        return self._auth_ok(user)

    # -------------------------------------- login --------------------------------------
    def login(self, email: str, password: str) -> AuthResult:
        result = self.sign_in.password_sign_in(email, password, lockout_on_failure=True)
        if result.succeeded:
            return self._auth_ok(self._require_user(self.users.find_by_email(email)))
        if result.is_locked_out:
            raise LockedOutError("User is locked out due to too many failed attempts.")
        raise InvalidCredentialsError("Incorrect username or password.")

    # -------------------------------------- confirmation / reset --------------------------------------
    def confirm_email(self, email: str, code: str) -> None:
        user = self._require_user(self.users.find_by_email(email))
        result = self.users.confirm_email(user, code)
        if not result.succeeded:
            raise IdentityOperationError(result)

    def forgot_password(self, email: str) -> bool:
        user = self._require_user(self.users.find_by_email(email))
        code = self.users.generate_password_reset_token(user)
        html, text = code_email("Please reset your password by using this code", code)
        return send_email(RESET_PASSWORD_SUBJECT, user.email, html, text)

    def reset_password(self, email: str, code: str, password: str) -> None:
        user = self._require_user(self.users.find_by_email(email))
        result = self.users.reset_password(user, code, password)
        if not result.succeeded:
            raise IdentityOperationError(result)

    # -------------------------------------- profile --------------------------------------
    def get_user_info(self, user_id: str) -> UserInfo:
        return self.user_info(self._require_user(self.users.find_by_id(user_id)))

    def update_profile(self, user_id: str, email: str) -> bool:
        """Returns True when the email (and username) changed."""
        user = self._require_user(self.users.find_by_id(user_id))
        if (email or "").strip() == user.email:
            return False
        result = self.users.update_email(user, email)
        if not result.succeeded:
            raise IdentityOperationError(result)
        logger.info("User %s changed email", user.id)
        return True

    def change_password(self, user_id: str, old_password: str, new_password: str) -> None:
        user = self._require_user(self.users.find_by_id(user_id))
        result = self.users.change_password(user, old_password, new_password)
        if not result.succeeded:
            raise IdentityOperationError(result)
