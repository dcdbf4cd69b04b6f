"""Admin auth gate.

One shared admin password lives in ``site_config`` under ``admin_password``
(falling back to a fixed default). A successful login yields a signed session
token that embeds its creation time and expires after ``ADMIN_SESSION_HOURS``.
Nothing is kept server-side; expiry is checked on every request.

The password is stored and compared in plain text. Hashing it, or moving to
per-admin accounts, only needs to touch this module.
"""
import hmac
import logging
from datetime import datetime, timedelta, timezone
from functools import wraps

from flask import current_app, request
from itsdangerous import BadData, URLSafeTimedSerializer

from models import db
from services import site_config
from services.errors import AuthenticationError, InvalidCredentialsError, ValidationError

logger = logging.getLogger(__name__)

SESSION_COOKIE = "admin_session"
SESSION_SALT = "admin-session"
DEFAULT_SESSION_HOURS = 24


def _serializer():
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=SESSION_SALT)


def session_lifetime():
    return timedelta(hours=current_app.config.get("ADMIN_SESSION_HOURS", DEFAULT_SESSION_HOURS))


def effective_password():
    return site_config.resolve("admin_password")


def check_password(candidate):
    if not isinstance(candidate, str):
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), effective_password().encode("utf-8"))


def issue_session():
    return _serializer().dumps({"role": "admin"})


def read_session(token):
    """Return the session's creation time, or None if the token is not ours."""
    if not token:
        return None
    try:
        payload, issued_at = _serializer().loads(token, return_timestamp=True)
    except BadData:
        return None
    if not isinstance(payload, dict) or payload.get("role") != "admin":
        return None
    return issued_at


def verify_session(token, now=None):
    issued_at = read_session(token)
    if issued_at is None:
        return False
    now = now or datetime.now(timezone.utc)
    return now - issued_at <= session_lifetime()


def login(password):
    """Exchange the admin password for a session token."""
    if not check_password(password):
        # same failure whether the password was never set or is simply wrong
        raise AuthenticationError("Incorrect password")
    return issue_session()


def change_password(old_password, new_password):
    if not check_password(old_password):
        raise InvalidCredentialsError()
    if not isinstance(new_password, str) or not new_password.strip():
        raise ValidationError("New password is required")
    site_config.upsert("admin_password", new_password)
    db.session.commit()
    logger.info("Admin password changed")


def token_from_request():
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):].strip()
    return request.cookies.get(SESSION_COOKIE)


def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not verify_session(token_from_request()):
            raise AuthenticationError()
        return fn(*args, **kwargs)
    return wrapper
