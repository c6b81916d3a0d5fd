"""
Store-level tests for users, roles, one-time codes and sign-in lockout.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

from sqlalchemy import update

from conftest import STRONG_PASSWORD
from todo_api.core.config import get_settings
from todo_api.db.models import User, UserToken
from todo_api.db.session import get_session
from todo_api.domain.identity import validate_password
from todo_api.repositories.role_store import RoleStore
from todo_api.repositories.user_store import UserStore
from todo_api.services.sign_in import SignInService


def _create(email: str = "user@example.com"):
    result, user = UserStore().create(email, STRONG_PASSWORD)
    assert result.succeeded, result.error_dicts()
    return user


def test_password_policy_reports_every_missing_class(db_env):
    codes = [e.code for e in validate_password("aaaa", get_settings())]
    assert codes == [
        "PasswordTooShort",
        "PasswordRequiresNonAlphanumeric",
        "PasswordRequiresDigit",
        "PasswordRequiresUpper",
    ]
    assert validate_password(STRONG_PASSWORD, get_settings()) == []


def test_create_sets_username_to_email_and_hashes_password(db_env):
    user = _create("Quinn@Example.com")

    assert user.username == "Quinn@Example.com"
    assert user.password_hash != STRONG_PASSWORD
    assert UserStore().find_by_email("quinn@example.com").id == user.id
    assert UserStore().check_password(user, STRONG_PASSWORD)


def test_create_duplicate_email_fails(db_env):
    _create("dup@example.com")
    result, user = UserStore().create("dup@example.com", STRONG_PASSWORD)

    assert user is None
    assert not result.succeeded
    assert "DuplicateEmail" in {e.code for e in result.errors}


def test_roles_seeded_and_membership(db_env):
    roles = RoleStore()
    assert roles.role_exists("FREE")
    assert roles.role_exists("pro")

    roles.ensure_roles(["FREE", "PRO"])
    user = _create()
    assert roles.add_user_to_role(user, "PRO").succeeded
    assert not roles.add_user_to_role(user, "PRO").succeeded
    assert not roles.add_user_to_role(user, "ADMIN").succeeded
    assert roles.is_in_role(user, "PRO")
    assert roles.roles_for_user(user) == ["PRO"]

    assert roles.remove_user_from_role(user, "PRO").succeeded
    assert not roles.is_in_role(user, "PRO")


def test_create_role_twice_reports_duplicate(db_env):
    roles = RoleStore()
    assert roles.create_role("TEAM").succeeded
    result = roles.create_role("team")
    assert result.errors[0].code == "DuplicateRoleName"


def test_confirmation_code_is_invalidated_by_email_change(db_env):
    store = UserStore()
    user = _create("rita@example.com")
    code = store.generate_email_confirmation_token(user)

    assert store.update_email(user, "rita2@example.com").succeeded
    result = store.confirm_email(user, code)

    assert not result.succeeded
    assert result.errors[0].code == "InvalidToken"


def test_expired_reset_code_is_rejected(db_env):
    store = UserStore()
    user = _create("sam@example.com")
    code = store.generate_password_reset_token(user)
    old = datetime.now(timezone.utc) - timedelta(days=2)
    with get_session() as session:
        session.execute(update(UserToken).where(UserToken.code == code).values(created_at=old))
        session.commit()

    result = store.reset_password(user, code, "N3w-Secret")

    assert result.errors[0].code == "InvalidToken"


def test_codes_are_purpose_bound(db_env):
    store = UserStore()
    user = _create("tess@example.com")
    reset_code = store.generate_password_reset_token(user)

    assert not store.confirm_email(user, reset_code).succeeded


def test_set_email_and_set_username_are_separate_steps(db_env):
    store = UserStore()
    user = _create("uma@example.com")

    assert store.set_email(user, "uma2@example.com").succeeded
    reloaded = store.find_by_id(user.id)
    assert reloaded.email == "uma2@example.com"
    assert reloaded.username == "uma@example.com"

    assert store.set_username(user, "uma2@example.com").succeeded
    assert store.find_by_id(user.id).username == "uma2@example.com"


def test_update_email_rejects_invalid_address(db_env):
    store = UserStore()
    user = _create("vic@example.com")

    result = store.update_email(user, "not an email")

    assert result.errors[0].code == "InvalidEmail"
    assert store.find_by_id(user.id).email == "vic@example.com"


def test_sign_in_lockout_and_reset_on_success(db_env):
    store = UserStore()
    user = _create("walt@example.com")
    sign_in = SignInService(store)

    assert not sign_in.password_sign_in("walt@example.com", "Wrong1!x").succeeded
    assert store.find_by_id(user.id).access_failed_count == 1
    assert sign_in.password_sign_in("walt@example.com", STRONG_PASSWORD).succeeded
    assert store.find_by_id(user.id).access_failed_count == 0

    results = [sign_in.password_sign_in("walt@example.com", "Wrong1!x") for _ in range(3)]
    assert [r.is_locked_out for r in results] == [False, False, True]
    assert sign_in.password_sign_in("walt@example.com", STRONG_PASSWORD).is_locked_out


def test_sign_in_unknown_user_fails_without_lockout(db_env):
    result = SignInService().password_sign_in("ghost@example.com", STRONG_PASSWORD)
    assert not result.succeeded
    assert not result.is_locked_out


def test_lockout_expires(db_env):
    store = UserStore()
    user = _create("xena@example.com")
    sign_in = SignInService(store)
    for _ in range(3):
        sign_in.password_sign_in("xena@example.com", "Wrong1!x")
    assert store.is_locked_out(store.find_by_id(user.id))

    past = datetime.now(timezone.utc) - timedelta(seconds=1)
    with get_session() as session:
        session.execute(update(User).where(User.id == user.id).values(lockout_end=past))
        session.commit()

    assert sign_in.password_sign_in("xena@example.com", STRONG_PASSWORD).succeeded


def _fail_concurrently(email: str, attempts: int) -> list:
    def _attempt(_):
        return SignInService(UserStore()).password_sign_in(email, "Wrong1!x")

    with ThreadPoolExecutor(max_workers=attempts) as pool:
        return list(pool.map(_attempt, range(attempts)))


def test_concurrent_failures_are_all_counted(db_env, monkeypatch):
    monkeypatch.setenv("LOCKOUT_MAX_FAILED_ATTEMPTS", "100")
    get_settings.cache_clear()
    user = _create("yuri@example.com")

    results = _fail_concurrently("yuri@example.com", 8)

    assert not any(r.succeeded or r.is_locked_out for r in results)
    assert UserStore().find_by_id(user.id).access_failed_count == 8


def test_concurrent_failures_still_trigger_lockout(db_env):
    store = UserStore()
    user = _create("zoe@example.com")

    _fail_concurrently("zoe@example.com", 8)

    assert store.is_locked_out(store.find_by_id(user.id))
    assert SignInService(store).password_sign_in("zoe@example.com", STRONG_PASSWORD).is_locked_out
