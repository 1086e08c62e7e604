from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from scentvend.errors import Unauthorized
from scentvend.models.admin_session import AdminSession
from scentvend.models.base import get_db
from scentvend.services import sessions

http_bearer = HTTPBearer(auto_error=False)


def bearer_token(creds: HTTPAuthorizationCredentials = Depends(http_bearer)) -> str:
    if not creds or not creds.credentials:
        raise Unauthorized("No token provided")
    return creds.credentials


def require_admin(token: str = Depends(bearer_token), db: Session = Depends(get_db)) -> AdminSession:
    return sessions.validate(db, token)
