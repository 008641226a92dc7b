from __future__ import annotations

from collections.abc import Callable, Iterable
import uuid

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from aqui.core.errors import AuthError, NotFoundError
from aqui.db.session import get_session
from aqui.models.user import User, UserRole
from aqui.models.vendor import Vendor
from aqui.services.settings_service import PlatformPolicy, load_policy
from aqui.services.vendor_service import get_vendor_for_user


def get_db() -> Iterable[Session]:
    yield from get_session()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    user_id = request.session.get("user_id")
    if not user_id:
        raise AuthError()
    try:
        user_uuid = uuid.UUID(str(user_id))
    except ValueError:
        request.session.clear()
        raise AuthError() from None
    user = db.get(User, user_uuid)
    if not user or not user.is_active:
        raise AuthError("Inactive user")
    return user


def require_role(role: UserRole) -> Callable:
    def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role != role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied")
        return user

    return dependency


def get_current_vendor(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> Vendor:
    vendor = get_vendor_for_user(db, user.id)
    if vendor is None:
        raise NotFoundError("Vendor profile not found")
    return vendor


def get_platform_policy(db: Session = Depends(get_db)) -> PlatformPolicy:
    """Fresh platform policy per request; override in tests to pin flags."""
    return load_policy(db)
