from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from scentvend.models.base import get_db
from scentvend.schemas.admin import LoginOut, LoginSchema
from scentvend.services import sessions
from scentvend.utils.security import bearer_token, require_admin

router = APIRouter()


@router.post("/login", response_model=LoginOut)
def admin_login(credentials: LoginSchema, db: Session = Depends(get_db)):
    token, session = sessions.login(db, credentials.username, credentials.password)
    return LoginOut(token=token, expiresAt=session.expires_at.isoformat())


@router.post("/logout")
def admin_logout(
    token: str = Depends(bearer_token),
    _session=Depends(require_admin),
    db: Session = Depends(get_db),
):
    sessions.logout(db, token)
    return {"message": "Logged out successfully"}
