"""User persistence and identity operations backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError

from todo_api.core.config import get_settings
from todo_api.core.security import hash_password, new_one_time_code, new_security_stamp, verify_password
from todo_api.db.models import User, UserToken
from todo_api.db.session import get_session
from todo_api.domain.identity import (
    PURPOSE_EMAIL_CONFIRMATION,
    PURPOSE_RESET_PASSWORD,
    IdentityResult,
    duplicate_email,
    duplicate_username,
    invalid_email,
    invalid_token,
    normalize,
    password_mismatch,
    validate_password,
)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None:
        return None
    return value.astimezone(timezone.utc) if value.tzinfo else value.replace(tzinfo=timezone.utc)


class UserStore:
    """CRUD and credential operations on user records."""

    @property
    def settings(self):
        return get_settings()

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    # -------------------------- lookups --------------------------
    def list_usernames(self) -> list[str]:
        with get_session() as session:
            return list(session.execute(select(User.username).order_by(User.username)).scalars().all())

    def find_by_email(self, email: str) -> Optional[User]:
        key = normalize(email)
        if not key:
            return None
        with get_session() as session:
            stmt = select(User).where(User.normalized_email == key)
            return session.execute(stmt).scalar_one_or_none()

    def find_by_id(self, user_id: str) -> Optional[User]:
        if not user_id:
            return None
        with get_session() as session:
            return session.get(User, user_id)

    def find_by_username(self, username: str) -> Optional[User]:
        key = normalize(username)
        if not key:
            return None
        with get_session() as session:
            stmt = select(User).where(User.normalized_username == key)
            return session.execute(stmt).scalar_one_or_none()

    # -------------------------- creation --------------------------
    def create(self, email: str, password: str) -> tuple[IdentityResult, Optional[User]]:
        """Create a user whose username equals the email."""
        raw_email = (email or "").strip()
        errors = []
        if not self._is_valid_email(raw_email):
            errors.append(invalid_email(raw_email))
        elif self.find_by_email(raw_email):
            errors.append(duplicate_email(raw_email))
        if raw_email and self.find_by_username(raw_email):
            errors.append(duplicate_username(raw_email))
        errors.extend(validate_password(password, self.settings))
        if errors:
            return IdentityResult.failed(*errors), None

        now = self._now()
        user = User(
            email=raw_email,
            normalized_email=normalize(raw_email),
            username=raw_email,
            normalized_username=normalize(raw_email),
            password_hash=hash_password(password),
            email_confirmed=False,
            security_stamp=new_security_stamp(),
            access_failed_count=0,
            created_at=now,
            updated_at=now,
        )
        with get_session() as session:
            session.add(user)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return IdentityResult.failed(duplicate_email(raw_email)), None
            session.refresh(user)
            return IdentityResult.success(), user

    def _is_valid_email(self, email: str) -> bool:
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            return False
        return True

    # -------------------------- passwords --------------------------
    def check_password(self, user: User, password: str) -> bool:
        return verify_password(password, user.password_hash)

    def update_password_hash(self, user: User, password: str, *, rotate_stamp: bool = True) -> None:
        values = {"password_hash": hash_password(password), "updated_at": self._now()}
        if rotate_stamp:
            values["security_stamp"] = new_security_stamp()
        with get_session() as session:
            session.execute(update(User).where(User.id == user.id).values(**values))
            session.commit()
        user.password_hash = values["password_hash"]
        if rotate_stamp:
            user.security_stamp = values["security_stamp"]

    def change_password(self, user: User, old_password: str, new_password: str) -> IdentityResult:
        if not self.check_password(user, old_password):
            return IdentityResult.failed(password_mismatch())
        errors = validate_password(new_password, self.settings)
        if errors:
            return IdentityResult.failed(*errors)
        self.update_password_hash(user, new_password)
        return IdentityResult.success()

    # -------------------------- one-time codes --------------------------
    def _generate_token(self, user: User, purpose: str) -> str:
        code = new_one_time_code()
        entity = UserToken(
            code=code,
            user_id=user.id,
            purpose=purpose,
            security_stamp=user.security_stamp,
            created_at=self._now(),
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
        return code

    def _verify_token(self, user: User, purpose: str, code: str) -> bool:
        code_value = (code or "").strip()
        if not code_value:
            return False
        with get_session() as session:
            entity = session.get(UserToken, code_value)
            current = session.get(User, user.id)
        if not entity or not current:
            return False
        if entity.user_id != user.id or entity.purpose != purpose:
            return False
        if entity.security_stamp != current.security_stamp:
            return False
        ttl = self.settings.identity_token_ttl_seconds
        if ttl > 0 and as_utc(entity.created_at) + timedelta(seconds=ttl) < self._now():
            return False
        return True

    def _consume_tokens(self, user_id: str, purpose: str) -> None:
        with get_session() as session:
            session.execute(delete(UserToken).where(UserToken.user_id == user_id, UserToken.purpose == purpose))
            session.commit()

    def generate_email_confirmation_token(self, user: User) -> str:
        return self._generate_token(user, PURPOSE_EMAIL_CONFIRMATION)

    def generate_password_reset_token(self, user: User) -> str:
        return self._generate_token(user, PURPOSE_RESET_PASSWORD)

    def confirm_email(self, user: User, code: str) -> IdentityResult:
        if not self._verify_token(user, PURPOSE_EMAIL_CONFIRMATION, code):
            return IdentityResult.failed(invalid_token())
        with get_session() as session:
            stmt = update(User).where(User.id == user.id).values(email_confirmed=True, updated_at=self._now())
            session.execute(stmt)
            session.commit()
        user.email_confirmed = True
        self._consume_tokens(user.id, PURPOSE_EMAIL_CONFIRMATION)
        return IdentityResult.success()

    def reset_password(self, user: User, code: str, new_password: str) -> IdentityResult:
        if not self._verify_token(user, PURPOSE_RESET_PASSWORD, code):
            return IdentityResult.failed(invalid_token())
        errors = validate_password(new_password, self.settings)
        if errors:
            return IdentityResult.failed(*errors)
        self.update_password_hash(user, new_password)
        self._consume_tokens(user.id, PURPOSE_RESET_PASSWORD)
        return IdentityResult.success()

    # -------------------------- email / username --------------------------
    def set_email(self, user: User, email: str) -> IdentityResult:
        """Change the email only; clears the confirmed flag."""
        raw = (email or "").strip()
        if not self._is_valid_email(raw):
            return IdentityResult.failed(invalid_email(raw))
        existing = self.find_by_email(raw)
        if existing and existing.id != user.id:
            return IdentityResult.failed(duplicate_email(raw))
        values = {
            "email": raw,
            "normalized_email": normalize(raw),
            "email_confirmed": False,
            "security_stamp": new_security_stamp(),
            "updated_at": self._now(),
        }
        return self._apply(user, values, duplicate_email(raw))

    def set_username(self, user: User, username: str) -> IdentityResult:
        raw = (username or "").strip()
        existing = self.find_by_username(raw)
        if existing and existing.id != user.id:
            return IdentityResult.failed(duplicate_username(raw))
        values = {
            "username": raw,
            "normalized_username": normalize(raw),
            "security_stamp": new_security_stamp(),
            "updated_at": self._now(),
        }
        return self._apply(user, values, duplicate_username(raw))

    def update_email(self, user: User, email: str) -> IdentityResult:
        """Change email and username together in one transaction."""
        raw = (email or "").strip()
        if not self._is_valid_email(raw):
            return IdentityResult.failed(invalid_email(raw))
        errors = []
        existing = self.find_by_email(raw)
        if existing and existing.id != user.id:
            errors.append(duplicate_email(raw))
        existing_name = self.find_by_username(raw)
        if existing_name and existing_name.id != user.id:
            errors.append(duplicate_username(raw))
        if errors:
            return IdentityResult.failed(*errors)
        values = {
            "email": raw,
            "normalized_email": normalize(raw),
            "username": raw,
            "normalized_username": normalize(raw),
            "email_confirmed": False,
            "security_stamp": new_security_stamp(),
            "updated_at": self._now(),
        }
        return self._apply(user, values, duplicate_email(raw))

    def _apply(self, user: User, values: dict, conflict) -> IdentityResult:
        with get_session() as session:
            try:
                session.execute(update(User).where(User.id == user.id).values(**values))
                session.commit()
            except IntegrityError:
                session.rollback()
                return IdentityResult.failed(conflict)
        for key, value in values.items():
            setattr(user, key, value)
        return IdentityResult.success()

    # -------------------------- lockout --------------------------
    def is_locked_out(self, user: User) -> bool:
        end = as_utc(user.lockout_end)
        return bool(end and end > self._now())

    def access_failed(self, user: User) -> bool:
        """Record a failed attempt; returns True when this attempt triggers a lockout.

        The counter is incremented inside the database so concurrent failures
        are all counted.
        """
        threshold = self.settings.lockout_max_failed_attempts
        lockout_end = None
        with get_session() as session:
            session.execute(
                update(User)
                .where(User.id == user.id)
                .values(access_failed_count=User.access_failed_count + 1)
            )
            count = session.execute(
                select(User.access_failed_count).where(User.id == user.id)
            ).scalar_one()
            locked = count >= threshold
            if locked:
                lockout_end = self._now() + timedelta(seconds=self.settings.lockout_seconds)
                count = 0
                session.execute(
                    update(User)
                    .where(User.id == user.id)
                    .values(access_failed_count=count, lockout_end=lockout_end)
                )
            session.commit()
        user.access_failed_count = count
        if locked:
            user.lockout_end = lockout_end
        return locked

    def reset_access_failed_count(self, user: User) -> None:
        if not user.access_failed_count and user.lockout_end is None:
            return
        with get_session() as session:
            stmt = update(User).where(User.id == user.id).values(access_failed_count=0, lockout_end=None)
            session.execute(stmt)
            session.commit()
        user.access_failed_count = 0
        user.lockout_end = None
