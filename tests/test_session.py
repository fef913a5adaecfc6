"""
tests/test_session.py -- Unit tests for auth/session.py (SessionManager).

Runs the signup / signin / logout state machine against an in-memory
UserStore, without HTTP.

Covers:
  - signup persists an active user with a bcrypt hash and a stored session hash
  - signup echoes the plaintext password by default, the hash when disabled
  - duplicate email in any case -> Conflict
  - signin: unknown email -> NotFound, wrong password -> BadCredential
  - signin replaces the stored session hash
  - logout: missing -> MissingToken, unknown -> InvalidToken, success clears state
"""

from __future__ import annotations

import pytest

from auth.session import SessionManager
from auth.store import UserStore
from core.errors import BadCredential, Conflict, InvalidToken, MissingToken, NotFound


class TestSignUp:
    def test_creates_active_user_with_session(self, sessions: SessionManager, user_store: UserStore) -> None:
        payload, token = sessions.sign_up("A", "a@x.com", "p1")
        stored = user_store.get_by_id(payload["id"])
        assert stored is not None
        assert stored.is_active is True
        assert stored.password_hash != "p1"
        assert sessions.hasher.verify("p1", stored.password_hash)
        assert stored.token_hash == sessions.tokens.hash_token(token)

    def test_payload_echoes_plaintext_password(self, sessions: SessionManager) -> None:
        payload, _ = sessions.sign_up("A", "a@x.com", "p1")
        assert payload["password"] == "p1"
        assert payload["full_name"] == "A"
        assert payload["email"] == "a@x.com"
        assert payload["is_active"] is False

    def test_payload_reports_requested_flag_record_stays_active(
        self, sessions: SessionManager, user_store: UserStore
    ) -> None:
        payload, token = sessions.sign_up("A", "a@x.com", "p1")
        assert payload["is_active"] is False
        assert sessions.tokens.verify(token)["is_active"] is False
        assert user_store.get_by_id(payload["id"]).is_active is True

        payload, token = sessions.sign_up("B", "b@x.com", "p1", is_active=True)
        assert payload["is_active"] is True
        assert sessions.tokens.verify(token)["is_active"] is True

    def test_echo_disabled_returns_hash(self, user_store, hasher, token_service) -> None:
        manager = SessionManager(user_store, hasher, token_service, echo_signup_password=False)
        payload, _ = manager.sign_up("A", "a@x.com", "p1")
        assert payload["password"] != "p1"
        assert hasher.verify("p1", payload["password"])

    def test_token_carries_hash_not_plaintext(self, sessions: SessionManager) -> None:
        _, token = sessions.sign_up("A", "a@x.com", "p1")
        claims = sessions.tokens.verify(token)
        assert claims["password"] != "p1"
        assert claims["password"].startswith("$2")

    def test_email_stored_lowercase(self, sessions: SessionManager, user_store: UserStore) -> None:
        payload, _ = sessions.sign_up("A", "Mixed.Case@X.com", "p1")
        assert user_store.get_by_id(payload["id"]).email == "mixed.case@x.com"

    @pytest.mark.parametrize("email", ["a@x.com", "A@X.COM", "a@X.com"])
    def test_duplicate_email_any_case(self, sessions: SessionManager, email: str) -> None:
        sessions.sign_up("A", "a@x.com", "p1")
        with pytest.raises(Conflict):
            sessions.sign_up("Someone Else", email, "different")


class TestSignIn:
    def test_unknown_email(self, sessions: SessionManager) -> None:
        with pytest.raises(NotFound):
            sessions.sign_in("nobody@x.com", "p1")

    def test_wrong_password(self, sessions: SessionManager) -> None:
        sessions.sign_up("A", "a@x.com", "p1")
        with pytest.raises(BadCredential):
            sessions.sign_in("a@x.com", "wrong")

    def test_issues_new_token_and_replaces_session(self, sessions: SessionManager, user_store: UserStore) -> None:
        _, t1 = sessions.sign_up("A", "a@x.com", "p1")
        payload, t2 = sessions.sign_in("A@x.com", "p1")
        assert t1 != t2
        assert sessions.tokens.verify(t1)["id"] == sessions.tokens.verify(t2)["id"]
        assert user_store.get_by_id(payload["id"]).token_hash == sessions.tokens.hash_token(t2)

    def test_payload_carries_stored_hash(self, sessions: SessionManager, user_store: UserStore) -> None:
        sessions.sign_up("A", "a@x.com", "p1")
        payload, _ = sessions.sign_in("a@x.com", "p1")
        assert payload["password"] == user_store.get_by_id(payload["id"]).password_hash
        assert payload["is_active"] is True

    def test_reactivates_after_logout(self, sessions: SessionManager, user_store: UserStore) -> None:
        payload, token = sessions.sign_up("A", "a@x.com", "p1")
        sessions.log_out(token)
        assert user_store.get_by_id(payload["id"]).is_active is False
        sessions.sign_in("a@x.com", "p1")
        assert user_store.get_by_id(payload["id"]).is_active is True


class TestLogOut:
    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, sessions: SessionManager, token) -> None:
        with pytest.raises(MissingToken):
            sessions.log_out(token)

    def test_unknown_token(self, sessions: SessionManager) -> None:
        with pytest.raises(InvalidToken):
            sessions.log_out("not-a-session")

    def test_clears_session(self, sessions: SessionManager, user_store: UserStore) -> None:
        payload, token = sessions.sign_up("A", "a@x.com", "p1")
        user = sessions.log_out(token)
        assert user.id == payload["id"]
        assert user.is_active is False
        assert user.token_hash is None
        assert user_store.get_by_id(payload["id"]).token_hash is None

    def test_second_logout_with_same_token(self, sessions: SessionManager) -> None:
        _, token = sessions.sign_up("A", "a@x.com", "p1")
        sessions.log_out(token)
        with pytest.raises(InvalidToken):
            sessions.log_out(token)

    def test_superseded_token_cannot_log_out(self, sessions: SessionManager) -> None:
        """Only the newest token is stored; an older one no longer matches."""
        _, t1 = sessions.sign_up("A", "a@x.com", "p1")
        sessions.sign_in("a@x.com", "p1")
        with pytest.raises(InvalidToken):
            sessions.log_out(t1)
