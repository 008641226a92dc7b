from __future__ import annotations

import secrets

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from aqui.core.config import settings
from aqui.core.constants import CRON_SECRET_HEADER
from aqui.core.deps import get_db
from aqui.schemas.live_session import SweepResult
from aqui.services import sweeper


router = APIRouter(prefix="/jobs", tags=["jobs"])


def require_cron_secret(x_cron_secret: str | None = Header(default=None, alias=CRON_SECRET_HEADER)) -> None:
    expected = settings.cron_secret
    if not expected or not x_cron_secret or not secrets.compare_digest(expected, x_cron_secret):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid cron secret")


@router.post("/auto-end-sessions", response_model=SweepResult, dependencies=[Depends(require_cron_secret)])
def auto_end_sessions(db: Session = Depends(get_db)):
    outcome = sweeper.end_expired_sessions(db)
    return SweepResult(count=outcome.count, session_ids=outcome.session_ids)
