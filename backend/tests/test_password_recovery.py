import logging
from datetime import timedelta

import pytest
from sqlalchemy import select, update

from forum.core.exceptions import InvalidToken, NotificationError
from forum.core.security import reset_token_digest, utcnow, verify_password
from forum.models.user import User
from forum.services import password_recovery

FORGOT = "/api/v1/users/forgot-password"
RESET = "/api/v1/users/reset-password"
LOGIN = "/api/v1/users/login"


def _user(db, email: str) -> User:
    db.expire_all()
    return db.scalars(select(User).where(User.email == email)).one()


def _issue_token(client, notifier, email: str) -> str:
    resp = client.post(FORGOT, json={"email": email})
    assert resp.status_code == 200
    return notifier.password_resets[-1][1]


class TestForgotPassword:
    def test_unknown_and_known_email_get_same_response(self, client, make_user, notifier):
        alice = make_user()
        unknown = client.post(FORGOT, json={"email": "ghost@example.com"})
        known = client.post(FORGOT, json={"email": alice.email})

        assert unknown.status_code == known.status_code == 200
        assert unknown.json() == known.json()

    def test_unknown_email_stores_and_sends_nothing(self, client, make_user, notifier, db):
        alice = make_user()
        client.post(FORGOT, json={"email": "ghost@example.com"})

        assert notifier.password_resets == []
        assert _user(db, alice.email).reset_token_hash is None

    def test_known_email_stores_digest_with_one_hour_expiry(self, client, make_user, notifier, db):
        alice = make_user()
        before = utcnow()
        token = _issue_token(client, notifier, alice.email)

        user = _user(db, alice.email)
        assert notifier.password_resets == [(alice.email, token)]
        assert user.reset_token_hash == reset_token_digest(token)
        assert user.reset_token_hash != token
        assert before + timedelta(minutes=59) < user.reset_token_expires_at <= utcnow() + timedelta(hours=1)

    def test_new_request_overwrites_previous_token(self, client, make_user, notifier, db):
        alice = make_user()
        first = _issue_token(client, notifier, alice.email)
        second = _issue_token(client, notifier, alice.email)

        assert first != second
        assert _user(db, alice.email).reset_token_hash == reset_token_digest(second)
        assert client.post(RESET, json={"token": first, "newPassword": "brand-new-pass"}).status_code == 400

    def test_notifier_failure_is_server_error_but_token_persists(self, client, make_user, notifier, db, caplog):
        alice = make_user()
        notifier.fail = True

        with caplog.at_level(logging.ERROR, logger="forum.main"):
            resp = client.post(FORGOT, json={"email": alice.email})

        assert resp.status_code == 500
        assert "details" not in resp.json()
        assert _user(db, alice.email).reset_token_hash is not None
        [record] = [r for r in caplog.records if r.name == "forum.main"]
        assert record.exc_info is not None
        assert record.exc_info[0] is NotificationError


class TestResetPassword:
    def test_reset_changes_password_and_clears_token(self, client, make_user, notifier, db):
        alice = make_user()
        token = _issue_token(client, notifier, alice.email)

        resp = client.post(RESET, json={"token": token, "newPassword": "brand-new-pass"})
        assert resp.status_code == 200

        user = _user(db, alice.email)
        assert user.reset_token_hash is None and user.reset_token_expires_at is None
        assert verify_password("brand-new-pass", user.hashed_password)
        assert client.post(LOGIN, json={"email": alice.email, "password": "brand-new-pass"}).status_code == 200
        assert client.post(LOGIN, json={"email": alice.email, "password": alice.password}).status_code == 401

    def test_token_is_single_use(self, client, make_user, notifier):
        alice = make_user()
        token = _issue_token(client, notifier, alice.email)

        assert client.post(RESET, json={"token": token, "newPassword": "brand-new-pass"}).status_code == 200
        replay = client.post(RESET, json={"token": token, "newPassword": "another-pass"})
        assert replay.status_code == 400
        assert replay.json()["detail"] == "Invalid or expired token"

    def test_expired_token_is_rejected(self, client, make_user, notifier, db):
        alice = make_user()
        token = _issue_token(client, notifier, alice.email)
        db.execute(
            update(User).where(User.id == alice.id).values(reset_token_expires_at=utcnow() - timedelta(seconds=1))
        )
        db.commit()

        resp = client.post(RESET, json={"token": token, "newPassword": "brand-new-pass"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid or expired token"

    def test_unknown_and_expired_tokens_share_one_message(self, client):
        resp = client.post(RESET, json={"token": "f" * 64, "newPassword": "brand-new-pass"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid or expired token"

    def test_unknown_token_is_reported_before_weak_password(self, client):
        resp = client.post(RESET, json={"token": "bogus", "newPassword": "short"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid or expired token"

    def test_weak_password_keeps_old_password_and_token(self, client, make_user, notifier, db):
        alice = make_user()
        token = _issue_token(client, notifier, alice.email)

        resp = client.post(RESET, json={"token": token, "newPassword": "short"})
        assert resp.status_code == 400

        user = _user(db, alice.email)
        assert user.reset_token_hash == reset_token_digest(token)
        assert verify_password(alice.password, user.hashed_password)

    def test_failure_during_reset_rolls_back(self, make_user, client, notifier, db, monkeypatch):
        alice = make_user()
        token = _issue_token(client, notifier, alice.email)

        def _boom(_password):
            raise RuntimeError("hashing backend crashed")

        monkeypatch.setattr(password_recovery, "get_password_hash", _boom)
        with pytest.raises(RuntimeError):
            password_recovery.reset_password(db, token, "brand-new-pass")

        user = _user(db, alice.email)
        assert user.reset_token_hash == reset_token_digest(token)
        assert verify_password(alice.password, user.hashed_password)

    def test_service_raises_invalid_token_for_unknown_token(self, db):
        with pytest.raises(InvalidToken):
            password_recovery.reset_password(db, "0" * 64, "brand-new-pass")

    def test_missing_fields_is_bad_request(self, client):
        assert client.post(RESET, json={"token": "abc"}).status_code == 400
