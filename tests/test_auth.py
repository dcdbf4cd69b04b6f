import time
from datetime import datetime, timedelta, timezone

import pytest
from itsdangerous import TimestampSigner, URLSafeTimedSerializer

from models import db, SiteConfig
from services import auth

DEFAULT_PASSWORD = "admin123"


def test_login_sets_session_cookie_and_returns_token(client):
    response = client.post("/api/auth/login", json={"password": DEFAULT_PASSWORD})
    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert auth.verify_session(body["token"])

    cookie = response.headers.get("Set-Cookie")
    assert cookie.startswith(f"{auth.SESSION_COOKIE}=")
    assert "HttpOnly" in cookie


def test_wrong_password_is_rejected(client):
    response = client.post("/api/auth/login", json={"password": "nope"})
    assert response.status_code == 401
    body = response.get_json()
    assert body["success"] is False
    assert body["error"] == "Incorrect password"
    assert "Set-Cookie" not in response.headers


@pytest.mark.parametrize("payload", [{}, {"password": None}, {"password": 123}])
def test_login_without_a_string_password_fails(client, payload):
    assert client.post("/api/auth/login", json=payload).status_code == 401


def test_login_with_malformed_body(client):
    response = client.post("/api/auth/login", data="not json", content_type="application/json")
    assert response.status_code == 400


def test_stored_password_replaces_default(client):
    db.session.add(SiteConfig(key="admin_password", value="stored-secret"))
    db.session.commit()
    assert client.post("/api/auth/login", json={"password": DEFAULT_PASSWORD}).status_code == 401
    assert client.post("/api/auth/login", json={"password": "stored-secret"}).status_code == 200


def test_blank_stored_password_falls_back_to_default(client):
    db.session.add(SiteConfig(key="admin_password", value="  "))
    db.session.commit()
    assert client.post("/api/auth/login", json={"password": DEFAULT_PASSWORD}).status_code == 200


## SESSION LIFETIME ##

def test_session_valid_within_24_hours(app):
    token = auth.issue_session()
    now = datetime.now(timezone.utc)
    assert auth.verify_session(token, now=now)
    assert auth.verify_session(token, now=now + timedelta(hours=23, minutes=59))


def test_session_expires_after_24_hours(app):
    token = auth.issue_session()
    later = datetime.now(timezone.utc) + timedelta(hours=24, minutes=1)
    assert not auth.verify_session(token, now=later)


def test_session_lifetime_is_configurable(app):
    app.config["ADMIN_SESSION_HOURS"] = 1
    try:
        token = auth.issue_session()
        later = datetime.now(timezone.utc) + timedelta(hours=2)
        assert not auth.verify_session(token, now=later)
    finally:
        app.config["ADMIN_SESSION_HOURS"] = auth.DEFAULT_SESSION_HOURS


@pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c"])
def test_unreadable_tokens_are_rejected(app, token):
    assert not auth.verify_session(token)


def test_token_signed_with_another_key_is_rejected(app):
    forged = URLSafeTimedSerializer("someone-else", salt=auth.SESSION_SALT).dumps({"role": "admin"})
    assert not auth.verify_session(forged)


def test_token_with_another_payload_is_rejected(app):
    other = URLSafeTimedSerializer(app.config["SECRET_KEY"], salt=auth.SESSION_SALT).dumps({"role": "guest"})
    assert not auth.verify_session(other)


def test_expired_cookie_is_refused_by_the_api(client, monkeypatch):
    issued = int(time.time()) - 25 * 3600
    monkeypatch.setattr(TimestampSigner, "get_timestamp", lambda self: issued)
    stale = auth.issue_session()
    monkeypatch.undo()

    response = client.post(
        "/api/categories",
        json={"name": "Late"},
        headers={"Authorization": f"Bearer {stale}"},
    )
    assert response.status_code == 401
    assert response.get_json()["success"] is False


## ADMIN GATE ##

@pytest.mark.parametrize("method, path", [
    ("post", "/api/categories"),
    ("put", "/api/categories"),
    ("put", "/api/categories/reorder"),
    ("delete", "/api/categories?id=1"),
    ("post", "/api/links"),
    ("put", "/api/links"),
    ("put", "/api/links/reorder"),
    ("delete", "/api/links?id=1"),
    ("post", "/api/gallery"),
    ("put", "/api/gallery"),
    ("delete", "/api/gallery?id=1"),
    ("post", "/api/about"),
    ("put", "/api/about"),
    ("post", "/api/hero"),
    ("put", "/api/hero"),
    ("put", "/api/hero/reorder"),
    ("delete", "/api/hero?id=1"),
    ("get", "/api/config"),
    ("put", "/api/config"),
    ("delete", "/api/config?key=site_name"),
    ("put", "/api/auth/password"),
])
def test_mutations_require_a_session(client, method, path):
    response = getattr(client, method)(path, json={})
    assert response.status_code == 401
    assert response.get_json() == {"success": False, "error": "Unauthorized", "message": "Unauthorized"}


@pytest.mark.parametrize("path", [
    "/api/categories", "/api/links", "/api/links/featured", "/api/gallery",
    "/api/about", "/api/hero", "/api/site", "/api/health",
])
def test_public_reads_are_open(client, path):
    assert client.get(path).status_code == 200


def test_bearer_token_opens_the_gate(client, app):
    token = client.post("/api/auth/login", json={"password": DEFAULT_PASSWORD}).get_json()["token"]
    response = app.test_client().post(
        "/api/categories",
        json={"name": "Via header"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 201


def test_session_status_and_logout(admin_client):
    status = admin_client.get("/api/auth/session").get_json()
    assert status["authenticated"] is True
    assert status["expiresAt"] is not None

    assert admin_client.post("/api/auth/logout").get_json() == {"success": True}
    assert admin_client.get("/api/auth/session").get_json() == {"authenticated": False, "expiresAt": None}
    assert admin_client.post("/api/categories", json={"name": "After logout"}).status_code == 401


## PASSWORD CHANGE ##

def test_change_password_with_wrong_old_password(admin_client):
    response = admin_client.put("/api/auth/password", json={"oldPassword": "wrong", "newPassword": "next"})
    assert response.status_code == 400
    assert response.get_json()["success"] is False
    # the session survives a failed attempt
    assert admin_client.get("/api/auth/session").get_json()["authenticated"] is True


def test_change_password_requires_a_new_password(admin_client):
    response = admin_client.put("/api/auth/password", json={"oldPassword": DEFAULT_PASSWORD, "newPassword": " "})
    assert response.status_code == 400


def test_change_password_takes_effect(admin_client, app):
    response = admin_client.put(
        "/api/auth/password",
        json={"oldPassword": DEFAULT_PASSWORD, "newPassword": "n3w-pass"},
    )
    assert response.status_code == 200
    assert SiteConfig.query.filter_by(key="admin_password").one().value == "n3w-pass"

    fresh = app.test_client()
    assert fresh.post("/api/auth/login", json={"password": DEFAULT_PASSWORD}).status_code == 401
    assert fresh.post("/api/auth/login", json={"password": "n3w-pass"}).status_code == 200
