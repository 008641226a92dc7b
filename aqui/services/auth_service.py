from __future__ import annotations

import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy import func
from sqlalchemy.orm import Session

from aqui.core.errors import ConflictError
from aqui.models.user import User, UserRole
from aqui.schemas.auth import RegisterRequest


logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return (
        db.query(User)
        .filter(func.lower(User.email) == email.strip().lower())
        .one_or_none()
    )


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user against the stored (hashed) password."""
    user = get_user_by_email(db, email)
    if user and user.is_active and verify_password(password, user.password):
        return user
    return None


def register(db: Session, payload: RegisterRequest) -> User:
    email = payload.email.strip().lower()
    if get_user_by_email(db, email):
        raise ConflictError("A user with this email already exists")
    user = User(
        email=email,
        full_name=(payload.full_name or "").strip() or email.split("@")[0],
        password=hash_password(payload.password),
        role=UserRole.CUSTOMER,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def ensure_admin(db: Session, email: str, password: str) -> User:
    email = email.strip().lower()
    user = get_user_by_email(db, email)
    if user is None:
        user = User(email=email, full_name="Administrator", password=hash_password(password), role=UserRole.ADMIN)
        db.add(user)
        logger.info("Created bootstrap admin %s", email)
    elif user.role != UserRole.ADMIN:
        user.role = UserRole.ADMIN
        logger.info("Promoted %s to admin", email)
    user.is_active = True
    db.flush()
    return user
