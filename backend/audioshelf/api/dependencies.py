"""
API Dependencies

Shared FastAPI dependencies: object storage client and the admin gate.
"""
import hmac
from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException, Request, status

from audioshelf import config
from audioshelf.services.storage_service import ObjectStorage


@lru_cache(maxsize=1)
def get_storage() -> ObjectStorage:
    """Process-wide object storage client."""
    return ObjectStorage()


def password_matches(candidate: Optional[str], password: str) -> bool:
    """Constant-time comparison of a supplied secret against the admin password."""
    if not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), password.encode("utf-8"))


def require_admin(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> None:
    """
    管理端访问控制

    通过条件（任一即可）:
    1. Cookie `admin_auth` 等于 ADMIN_PASSWORD
    2. `Authorization: Bearer <ADMIN_PASSWORD>`

    未配置 ADMIN_PASSWORD 时返回 500。
    """
    password = config.ADMIN_PASSWORD
    if not password:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server configuration error",
        )

    if password_matches(request.cookies.get(config.ADMIN_COOKIE_NAME), password):
        return

    if authorization and authorization.startswith("Bearer "):
        if password_matches(authorization[len("Bearer "):], password):
            return

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
    )
