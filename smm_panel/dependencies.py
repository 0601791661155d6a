from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from smm_panel.core.database import get_db
from smm_panel.core.security import decode_token
from smm_panel.models import User, UserRole, UserStatus

bearer_scheme = HTTPBearer(auto_error=False)


def _is_active(user: User) -> bool:
    status = user.status.value if hasattr(user.status, "value") else str(user.status or "")
    return status == UserStatus.ACTIVE.value


def _user_from_token(db: Session, token: str) -> Optional[User]:
    try:
        payload = decode_token(token)
    except Exception:
        return None
    if payload.get("type") != "access":
        return None
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
    return db.query(User).filter(User.id == user_id).first()


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if not credentials or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        payload = decode_token(credentials.credentials)
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = _user_from_token(db, credentials.credentials)
    if not user or not _is_active(user):
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    # Public catalog routes: a bad or missing token just means "anonymous".
    if not credentials or not credentials.credentials:
        return None
    user = _user_from_token(db, credentials.credentials)
    if not user or not _is_active(user):
        return None
    return user


def require_roles(*roles: UserRole):
    allowed = {role.value for role in roles}

    def _dependency(user: User = Depends(get_current_user)) -> User:
        role = user.role.value if hasattr(user.role, "value") else str(user.role)
        if role not in allowed:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return _dependency


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


require_client = require_roles(UserRole.CLIENT)
require_staff = require_roles(UserRole.SELLER, UserRole.ADMIN)


def get_api_user(request: Request, db: Session = Depends(get_db)) -> User:
    api_key = request.headers.get("x-api-key") or request.query_params.get("api_key")
    if not api_key:
        raise HTTPException(status_code=401, detail="API key required")
    user = db.query(User).filter(User.api_key == api_key.strip()).first()
    if not user or not _is_active(user):
        raise HTTPException(status_code=401, detail="Invalid API key")
    return user
