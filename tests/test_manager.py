import pytest

from websess.errors import (
    DuplicateUsername,
    HashingFailure,
    InvalidCredentials,
    MissingField,
    NoSuchSession,
    PasswordMismatch,
    UnknownUsername,
)


def test_signup_login_logout_scenario(manager):
    t1 = manager.signup("Ann", "Lee", "ann", "p1", "p1")
    assert manager.resolve_current_user(t1.token).username == "ann"

    manager.logout(t1.token)
    with pytest.raises(NoSuchSession):
        manager.sessions.resolve(t1.token)
    assert manager.resolve_current_user(t1.token) is None

    t2 = manager.login("ann", "p1")
    assert t2.token != t1.token
    assert manager.resolve_current_user(t2.token).first == "Ann"

    with pytest.raises(InvalidCredentials):
        manager.login("ann", "wrong")


def test_issued_session_carries_ttl(manager):
    issued = manager.signup("Ann", "Lee", "ann", "p1", "p1")
    assert issued.ttl_seconds == 600


def test_second_signup_same_username(manager):
    manager.signup("Ann", "Lee", "ann", "p1", "p1")
    with pytest.raises(DuplicateUsername):
        manager.signup("Ann", "Other", "ann", "p3", "p3")


def test_signup_password_mismatch_creates_nothing(manager):
    with pytest.raises(PasswordMismatch):
        manager.signup("Ann", "Lee", "ann", "p1", "p2")
    assert manager.credentials.exists("ann") is False
    assert len(manager.sessions) == 0


@pytest.mark.parametrize("username,password", [("", "p1"), ("  ", "p1"), ("ann", "")])
def test_signup_missing_fields(manager, username, password):
    with pytest.raises(MissingField):
        manager.signup("Ann", "Lee", username, password, password)


def test_signup_hashing_failure_is_recoverable(manager, monkeypatch):
    def boom(plain):
        raise HashingFailure()

    monkeypatch.setattr(manager.credentials._hasher, "hash", boom)
    with pytest.raises(HashingFailure):
        manager.signup("Ann", "Lee", "ann", "p1", "p1")
    assert manager.credentials.exists("ann") is False
    monkeypatch.undo()
    assert manager.signup("Ann", "Lee", "ann", "p1", "p1").token


def test_login_failures_are_indistinguishable(manager):
    manager.signup("Ann", "Lee", "ann", "p1", "p1")
    with pytest.raises(InvalidCredentials) as wrong:
        manager.login("ann", "wrong")
    with pytest.raises(InvalidCredentials) as unknown:
        manager.login("nobody", "p1")
    assert type(wrong.value) is type(unknown.value) is InvalidCredentials
    assert not isinstance(unknown.value, UnknownUsername)
    assert str(wrong.value) == str(unknown.value)


def test_login_issues_independent_sessions(manager):
    manager.signup("Ann", "Lee", "ann", "p1", "p1")
    a = manager.login("ann", "p1")
    b = manager.login("ann", "p1")
    assert a.token != b.token
    assert manager.sessions.count_for("ann") == 3
    manager.logout(a.token)
    assert manager.resolve_current_user(b.token).username == "ann"


def test_logout_without_session_succeeds(manager):
    manager.logout(None)
    manager.logout("")
    manager.logout("never-issued")


def test_resolve_current_user_is_anonymous_for_bad_tokens(manager, clock):
    issued = manager.signup("Ann", "Lee", "ann", "p1", "p1")
    assert manager.resolve_current_user(None) is None
    assert manager.resolve_current_user("garbage") is None
    clock.advance(601)
    assert manager.resolve_current_user(issued.token) is None


def test_session_for_vanished_identity_is_dropped(manager):
    issued = manager.signup("Ann", "Lee", "ann", "p1", "p1")
    manager.credentials.load([])
    assert manager.current_session(issued.token) is None
    assert len(manager.sessions) == 0


def test_sweep_passthrough(manager, clock):
    manager.signup("Ann", "Lee", "ann", "p1", "p1")
    clock.advance(601)
    assert manager.sweep() == 1


def test_token_collision_is_not_a_session_lookup_error(credentials, clock):
    from websess.auth.manager import SessionManager
    from websess.auth.session import SessionStore
    from websess.errors import SessionError, TokenGenerationCollision

    assert not issubclass(TokenGenerationCollision, SessionError)

    mgr = SessionManager(credentials, SessionStore(clock=clock, token_factory=lambda: "same"))
    first = mgr.signup("Ann", "Lee", "ann", "p1", "p1")
    with pytest.raises(TokenGenerationCollision):
        mgr.login("ann", "p1")
    assert mgr.resolve_current_user(first.token).username == "ann"


def test_current_returns_session_and_identity(manager):
    issued = manager.signup("Ann", "Lee", "ann", "p1", "p1")
    sess, ident = manager.current(issued.token)
    assert sess.token == issued.token
    assert ident.username == "ann"
    assert manager.current("garbage") == (None, None)
