import asyncio

import pytest

from control_panel.core.errors import AuthError, StoreError, ValidationError
from control_panel.schemas.user import SessionStatus
from control_panel.services import session_gate


@pytest.mark.parametrize("email, password", [("", "pw"), ("mod@nolabel.fm", ""), ("   ", "pw"), (None, None)])
def test_empty_credentials_fail_before_any_collaborator(store, auth, email, password):
    with pytest.raises(ValidationError):
        asyncio.run(session_gate.authenticate(auth, store, email, password))

    assert auth.sign_in_calls == []
    assert store.calls == []


def test_moderator_is_authorized(store, auth):
    outcome = asyncio.run(session_gate.authenticate(auth, store, " mod@nolabel.fm ", "correct horse"))

    assert outcome.status == SessionStatus.AUTHORIZED
    assert outcome.artist_name == "Moderator One"
    assert auth.sign_in_calls == ["mod@nolabel.fm"]

    session = outcome.to_session()
    assert session.user_id == "mod-1"
    assert session.artist_name == "Moderator One"


def test_wrong_password_is_an_auth_error_with_provider_message(store, auth):
    outcome = asyncio.run(session_gate.authenticate(auth, store, "mod@nolabel.fm", "wrong"))

    assert outcome.status == SessionStatus.AUTH_ERROR
    assert outcome.message == "Invalid login credentials"
    assert outcome.user is None
    assert store.calls == []


def test_artist_missing_from_allowlist_is_denied(store, auth):
    outcome = asyncio.run(session_gate.authenticate(auth, store, "artist@nolabel.fm", "battery staple"))

    assert outcome.status == SessionStatus.ACCESS_DENIED
    with pytest.raises(ValueError):
        outcome.to_session()


def test_missing_profile_is_denied(store, auth):
    outcome = asyncio.run(session_gate.authenticate(auth, store, "ghost@nolabel.fm", "no profile"))

    assert outcome.status == SessionStatus.ACCESS_DENIED
    assert ("select", "allowed_moderators") not in store.calls


def test_profile_without_artist_name_is_denied(store, auth):
    store.rows("profiles").append({"id": "ghost-3"})

    outcome = asyncio.run(session_gate.authenticate(auth, store, "ghost@nolabel.fm", "no profile"))

    assert outcome.status == SessionStatus.ACCESS_DENIED


def test_allowlist_lookup_failure_fails_closed(store, auth):
    store.failures[("select", "allowed_moderators")] = StoreError("permission denied for table", code="42501")

    outcome = asyncio.run(session_gate.authenticate(auth, store, "mod@nolabel.fm", "correct horse"))

    assert outcome.status == SessionStatus.ACCESS_DENIED


def test_profile_lookup_failure_fails_closed(store, auth):
    store.failures[("select", "profiles")] = StoreError("timeout")

    outcome = asyncio.run(session_gate.authenticate(auth, store, "mod@nolabel.fm", "correct horse"))

    assert outcome.status == SessionStatus.ACCESS_DENIED


def test_sign_out_delegates_to_provider(store, auth):
    outcome = asyncio.run(session_gate.authenticate(auth, store, "mod@nolabel.fm", "correct horse"))
    session = outcome.to_session()

    asyncio.run(session_gate.sign_out(auth, session))

    assert auth.signed_out == [session]


def test_sign_out_failure_propagates(store, auth):
    session = asyncio.run(session_gate.authenticate(auth, store, "mod@nolabel.fm", "correct horse")).to_session()
    auth.sign_out_error = AuthError("network error")

    with pytest.raises(AuthError):
        asyncio.run(session_gate.sign_out(auth, session))
