from datetime import datetime, timedelta

import pytest
from jose import jwt

from scentvend.config import get_settings
from scentvend.errors import InvalidCredentials, Unauthorized
from scentvend.models.admin_session import AdminSession
from scentvend.services import sessions


def test_login_issues_stored_session(db):
    token, session = sessions.login(db, "admin", "admin")
    claims = jwt.get_unverified_claims(token)
    assert claims["jti"] == session.session_token
    assert claims["sub"] == "admin"
    assert session.expires_at > datetime.utcnow() + timedelta(hours=23)
    assert sessions.validate(db, token).id == session.id


@pytest.mark.parametrize("username,password", [("admin", "wrong"), ("root", "admin"), ("", "")])
def test_bad_credentials(db, username, password):
    with pytest.raises(InvalidCredentials):
        sessions.login(db, username, password)
    assert db.query(AdminSession).count() == 0


def test_logout_invalidates_token(db):
    token, _ = sessions.login(db, "admin", "admin")
    sessions.logout(db, token)
    with pytest.raises(Unauthorized):
        sessions.validate(db, token)


def test_logout_with_garbage_token_is_silent(db):
    sessions.logout(db, "not-a-token")


def test_expired_session_is_deleted_on_use(db):
    token, session = sessions.login(db, "admin", "admin")
    session.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    with pytest.raises(Unauthorized):
        sessions.validate(db, token)
    assert db.query(AdminSession).count() == 0


def test_token_signed_with_other_key_rejected(db):
    _, session = sessions.login(db, "admin", "admin")
    forged = jwt.encode({"jti": session.session_token}, "other-key", algorithm=get_settings().ALGORITHM)
    with pytest.raises(Unauthorized):
        sessions.validate(db, forged)


def test_purge_expired(db):
    sessions.login(db, "admin", "admin")
    db.add(AdminSession(session_token="stale", expires_at=datetime.utcnow() - timedelta(hours=1)))
    db.commit()
    assert sessions.purge_expired(db) == 1
    assert db.query(AdminSession).count() == 1
