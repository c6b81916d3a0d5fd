"""Credential checks with failed-attempt lockout."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from todo_api.core.security import needs_rehash
from todo_api.db.models import User
from todo_api.domain.identity import SignInResult
from todo_api.repositories.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass
class SignInService:
    users: UserStore = field(default_factory=UserStore)

    def password_sign_in(self, email: str, password: str, *, lockout_on_failure: bool = True) -> SignInResult:
        user = self.users.find_by_email(email)
        if user is None:
            return SignInResult()
        if self.users.is_locked_out(user):
            logger.warning("Sign-in rejected for locked out user %s", user.id)
            return SignInResult(is_locked_out=True)
        if self.users.check_password(user, password):
            self.users.reset_access_failed_count(user)
            if needs_rehash(user.password_hash):
                self.users.update_password_hash(user, password, rotate_stamp=False)
            self.sign_in(user)
            return SignInResult(succeeded=True)
        if lockout_on_failure and self.users.access_failed(user):
            logger.warning("User %s locked out after repeated failed sign-ins", user.id)
            return SignInResult(is_locked_out=True)
        logger.info("Failed sign-in for user %s", user.id)
        return SignInResult()

    def sign_in(self, user: User) -> None:
        # The bearer token returned to the client is the only session marker.
        logger.info("User %s signed in", user.id)
