"""
Sweeper tests: timed sessions end with ended_by="timer", repeat runs are
no-ops, and a failing batch update degrades to per-row updates.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

from aqui.core.errors import NotFoundError
from aqui.models.live_session import VendorLiveSession
from aqui.schemas.live_session import StartSessionRequest
from aqui.services.live_session_service import end_live_session, get_active_session, start_live_session
from aqui.services.settings_service import PlatformPolicy
from aqui.services.sweeper import end_expired_sessions
from aqui.services.visibility import as_utc

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _go_live(db, vendor, duration=None, now=T0) -> VendorLiveSession:
    payload = StartSessionRequest(latitude=19.43, longitude=-99.13, duration_minutes=duration)
    return start_live_session(db, vendor, payload, PlatformPolicy(), now=now)


def test_nothing_to_sweep(db):
    outcome = end_expired_sessions(db, now=T0)
    assert outcome.count == 0
    assert outcome.session_ids == []


def test_timed_session_is_ended_by_timer(db, make_vendor):
    vendor = make_vendor()
    session = _go_live(db, vendor, duration=30)

    assert end_expired_sessions(db, now=T0 + timedelta(minutes=29)).count == 0

    sweep_at = T0 + timedelta(minutes=31)
    outcome = end_expired_sessions(db, now=sweep_at)
    assert outcome.count == 1
    assert outcome.session_ids == [session.id]

    db.expire_all()
    ended = db.get(VendorLiveSession, session.id)
    assert ended.is_active is False
    assert ended.ended_by == "timer"
    assert as_utc(ended.end_time) == sweep_at
    assert get_active_session(db, vendor.id) is None


def test_sweep_is_idempotent(db, make_vendor):
    _go_live(db, make_vendor(), duration=30)
    assert end_expired_sessions(db, now=T0 + timedelta(minutes=31)).count == 1
    assert end_expired_sessions(db, now=T0 + timedelta(minutes=32)).count == 0


def test_vendor_end_after_sweep_reports_not_found(db, make_vendor):
    vendor = make_vendor()
    _go_live(db, vendor, duration=30)
    end_expired_sessions(db, now=T0 + timedelta(minutes=31))
    db.expire_all()
    with pytest.raises(NotFoundError):
        end_live_session(db, vendor, now=T0 + timedelta(minutes=40))


def test_untimed_and_unexpired_sessions_survive(db, make_vendor):
    untimed = _go_live(db, make_vendor(), duration=None)
    long_timer = _go_live(db, make_vendor(business_name="Churros"), duration=240)
    expired = _go_live(db, make_vendor(business_name="Tamales"), duration=15)

    outcome = end_expired_sessions(db, now=T0 + timedelta(hours=2))
    assert outcome.session_ids == [expired.id]

    db.expire_all()
    assert db.get(VendorLiveSession, untimed.id).is_active is True
    assert db.get(VendorLiveSession, long_timer.id).is_active is True


def test_session_ended_by_vendor_is_not_touched(db, make_vendor):
    vendor = make_vendor()
    session = _go_live(db, vendor, duration=30)
    end_live_session(db, vendor, now=T0 + timedelta(minutes=10))

    assert end_expired_sessions(db, now=T0 + timedelta(minutes=31)).count == 0
    db.expire_all()
    assert db.get(VendorLiveSession, session.id).ended_by == "vendor"


def test_batch_failure_falls_back_to_single_rows(db, make_vendor, monkeypatch):
    first = _go_live(db, make_vendor(), duration=10)
    second = _go_live(db, make_vendor(business_name="Churros"), duration=10)

    real_commit = db.commit
    calls = {"n": 0}

    def flaky_commit():
        calls["n"] += 1
        if calls["n"] == 1:
            raise SQLAlchemyError("batch update failed")
        real_commit()

    monkeypatch.setattr(db, "commit", flaky_commit)
    outcome = end_expired_sessions(db, now=T0 + timedelta(minutes=11))

    assert sorted(outcome.session_ids) == sorted([first.id, second.id])
    assert outcome.failed_ids == []
    assert outcome.count == 2


def test_failed_rows_are_reported(db, make_vendor, monkeypatch):
    session = _go_live(db, make_vendor(), duration=10)

    def broken_commit():
        raise SQLAlchemyError("database unavailable")

    monkeypatch.setattr(db, "commit", broken_commit)
    outcome = end_expired_sessions(db, now=T0 + timedelta(minutes=11))

    assert outcome.count == 0
    assert outcome.failed_ids == [session.id]
    monkeypatch.undo()
    db.expire_all()
    assert db.get(VendorLiveSession, session.id).is_active is True
