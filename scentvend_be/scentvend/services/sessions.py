from datetime import datetime, timedelta, timezone
from typing import Tuple
import hmac
import logging
import uuid

from jose import jwt, JWTError
from sqlalchemy.orm import Session

from scentvend.config import get_settings
from scentvend.errors import InvalidCredentials, Unauthorized
from scentvend.models.admin_session import AdminSession

logger = logging.getLogger(__name__)


def verify_admin_credentials(username: str, password: str) -> bool:
    settings = get_settings()
    # Compare both fields every time so the response does not reveal which one was wrong
    user_ok = hmac.compare_digest((username or "").encode(), settings.ADMIN_USERNAME.encode())
    pass_ok = hmac.compare_digest((password or "").encode(), settings.ADMIN_PASSWORD.encode())
    return user_ok and pass_ok


def _create_session_token(jti: str, expires_at: datetime) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {"sub": settings.ADMIN_USERNAME, "exp": expires_at, "iat": now, "jti": jti}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _token_jti(token: str) -> str:
    settings = get_settings()
    try:
        # Expiry is checked against the session row so expired rows get cleaned up
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM], options={"verify_exp": False}
        )
    except JWTError:
        raise Unauthorized()
    jti = payload.get("jti")
    if not jti:
        raise Unauthorized()
    return jti


def login(db: Session, username: str, password: str) -> Tuple[str, AdminSession]:
    if not verify_admin_credentials(username, password):
        logger.warning("Rejected admin login attempt")
        raise InvalidCredentials()
    settings = get_settings()
    jti = uuid.uuid4().hex
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(hours=settings.ADMIN_SESSION_HOURS)
    session = AdminSession(
        session_token=jti,
        # stored naive UTC, like every other timestamp column
        expires_at=expires_at.replace(tzinfo=None),
        created_at=now.replace(tzinfo=None),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info("Admin session %s opened, expires %s", session.id, session.expires_at.isoformat())
    return _create_session_token(jti, expires_at), session


def validate(db: Session, token: str) -> AdminSession:
    if not token:
        raise Unauthorized("Not authenticated")
    jti = _token_jti(token)
    session = db.query(AdminSession).filter(AdminSession.session_token == jti).first()
    if not session:
        raise Unauthorized()
    if session.expires_at <= datetime.utcnow():
        db.delete(session)
        db.commit()
        raise Unauthorized()
    return session


def logout(db: Session, token: str) -> None:
    try:
        jti = _token_jti(token)
    except Unauthorized:
        # Unknown tokens log out silently to avoid token probing
        return
    db.query(AdminSession).filter(AdminSession.session_token == jti).delete(synchronize_session=False)
    db.commit()


def purge_expired(db: Session) -> int:
    removed = db.query(AdminSession).filter(AdminSession.expires_at <= datetime.utcnow()).delete(
        synchronize_session=False
    )
    db.commit()
    return removed
