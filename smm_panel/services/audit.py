import logging
from typing import Any, Optional

from fastapi import Request
from sqlalchemy.orm import Session

from smm_panel.models import ApiLog, LoginLog

logger = logging.getLogger(__name__)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def log_login(
    db: Session,
    request: Request,
    *,
    user_id: Optional[int],
    email: str,
    status: str,
) -> None:
    try:
        db.add(
            LoginLog(
                user_id=user_id,
                email=email,
                ip_address=client_ip(request)[:64],
                user_agent=(request.headers.get("user-agent") or "")[:512] or None,
                status=status,
            )
        )
        db.commit()
    except Exception as exc:
        # Audit rows must never break authentication.
        db.rollback()
        logger.warning("Login log write failed email=%s status=%s error=%s", email, status, exc)


def log_api_call(
    db: Session,
    request: Request,
    *,
    user_id: Optional[int],
    request_data: Any = None,
    response_data: Any = None,
    status_code: int = 200,
    endpoint: Optional[str] = None,
) -> None:
    try:
        db.add(
            ApiLog(
                user_id=user_id,
                endpoint=(endpoint or request.url.path)[:255],
                method=request.method,
                ip_address=client_ip(request)[:64],
                request_data=request_data,
                response_data=response_data,
                status_code=status_code,
            )
        )
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.warning("API log write failed endpoint=%s error=%s", endpoint or request.url.path, exc)
