from __future__ import annotations

from sqlalchemy.orm import Session

from aqui.core.config import settings
from aqui.db.session import SessionLocal
from aqui.services.auth_service import ensure_admin
from aqui.services.settings_service import get_or_create_settings


def seed_defaults(db: Session) -> None:
    get_or_create_settings(db)
    if settings.admin_email and settings.admin_password:
        ensure_admin(db, settings.admin_email, settings.admin_password)
    db.commit()


def seed() -> None:
    with SessionLocal() as db:
        seed_defaults(db)


if __name__ == "__main__":
    seed()
