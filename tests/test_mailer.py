from __future__ import annotations

import smtplib

from todo_api.core import mailer
from todo_api.core.config import get_settings


class _RecordingSMTP:
    sent: list = []

    def __init__(self, host, port, context=None):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def login(self, user, password):
        pass

    def sendmail(self, sender, recipients, message):
        self.sent.append((sender, recipients, message))


def _configure_smtp(monkeypatch):
    monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
    monkeypatch.setenv("SMTP_PORT", "465")
    monkeypatch.setenv("SMTP_USER", "mailer")
    monkeypatch.setenv("SMTP_PASSWORD", "secret")
    monkeypatch.setenv("SMTP_FROM", "noreply@example.com")
    get_settings.cache_clear()


def test_code_email_ends_text_body_with_code():
    html, text = mailer.code_email("Please confirm your account with this code", "abc<123>")

    assert text == "Please confirm your account with this code: abc<123>"
    assert "abc&lt;123&gt;" in html


def test_send_email_without_smtp_settings_is_dropped(monkeypatch):
    for name in ("SMTP_HOST", "SMTP_USER", "SMTP_PASSWORD", "SMTP_FROM"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    try:
        assert mailer.send_email("Reset Password", "user@example.com", "<p>x</p>", "x") is False
    finally:
        get_settings.cache_clear()


def test_send_email_delivers_over_smtp_ssl(monkeypatch):
    _configure_smtp(monkeypatch)
    _RecordingSMTP.sent = []
    monkeypatch.setattr(mailer.smtplib, "SMTP_SSL", _RecordingSMTP)
    try:
        html, text = mailer.code_email("Please reset your password by using this code", "xyz")
        assert mailer.send_email(mailer.RESET_PASSWORD_SUBJECT, "user@example.com", html, text)
    finally:
        get_settings.cache_clear()

    ((sender, recipients, message),) = _RecordingSMTP.sent
    assert sender == "noreply@example.com"
    assert recipients == ["user@example.com"]
    assert "Subject: Reset Password" in message


def test_send_email_reports_delivery_failure(monkeypatch):
    _configure_smtp(monkeypatch)

    def _refuse(*args, **kwargs):
        raise smtplib.SMTPConnectError(421, "try later")

    monkeypatch.setattr(mailer.smtplib, "SMTP_SSL", _refuse)
    try:
        assert mailer.send_email("Confirm your email", "user@example.com", "<p>x</p>") is False
    finally:
        get_settings.cache_clear()
