from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from aqui.core.errors import ConflictError, NotFoundError, PolicyError, ValidationError
from aqui.models.live_session import VendorLiveSession
from aqui.schemas.live_session import StartSessionRequest
from aqui.services.live_session_service import (
    check_vendor_can_go_live,
    end_live_session,
    force_end_live_session,
    get_active_session,
    start_live_session,
)
from aqui.services.settings_service import PlatformPolicy
from aqui.services.visibility import as_utc

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
POLICY = PlatformPolicy()


def _payload(**overrides) -> StartSessionRequest:
    values = {"latitude": 19.43, "longitude": -99.13, "address": "Calle 5"}
    values.update(overrides)
    return StartSessionRequest(**values)


def _active_count(db, vendor) -> int:
    return (
        db.query(VendorLiveSession)
        .filter(VendorLiveSession.vendor_id == vendor.id)
        .filter(VendorLiveSession.is_active.is_(True))
        .count()
    )


@pytest.mark.parametrize(
    "status, policy, allowed",
    [
        ("approved", PlatformPolicy(), True),
        ("active", PlatformPolicy(), True),
        (" Approved ", PlatformPolicy(), True),
        ("pending", PlatformPolicy(), False),
        ("rejected", PlatformPolicy(), False),
        ("suspended", PlatformPolicy(), False),
        (None, PlatformPolicy(), False),
        ("pending", PlatformPolicy(allow_auto_vendor_approval=True), True),
        ("rejected", PlatformPolicy(allow_auto_vendor_approval=True), False),
        ("rejected", PlatformPolicy(require_vendor_approval=False), True),
    ],
)
def test_go_live_policy(status, policy, allowed):
    assert check_vendor_can_go_live(status, policy).allowed is allowed


def test_refusal_reason_names_status():
    decision = check_vendor_can_go_live("pending", POLICY)
    assert 'status is "pending"' in decision.reason


def test_start_creates_active_session(db, make_vendor):
    vendor = make_vendor()
    session = start_live_session(db, vendor, _payload(duration_minutes=90, estimated_customers=12), POLICY, now=T0)

    assert session.is_active is True
    assert session.ended_by is None
    assert session.end_time is None
    assert as_utc(session.start_time) == T0
    assert as_utc(session.auto_end_time) == T0 + timedelta(minutes=90)
    assert session.was_scheduled_duration == 90
    assert session.estimated_customers == 12
    assert session.address == "Calle 5"


def test_start_without_duration_has_no_timer(db, make_vendor):
    vendor = make_vendor()
    session = start_live_session(db, vendor, _payload(), POLICY, now=T0)
    assert session.auto_end_time is None
    assert session.was_scheduled_duration is None


def test_second_start_replaces_active_session(db, make_vendor):
    vendor = make_vendor()
    first = start_live_session(db, vendor, _payload(), POLICY, now=T0)
    second = start_live_session(db, vendor, _payload(latitude=20.0), POLICY, now=T0 + timedelta(minutes=5))

    db.expire_all()
    assert _active_count(db, vendor) == 1
    previous = db.get(VendorLiveSession, first.id)
    assert previous.is_active is False
    assert previous.ended_by == "vendor"
    assert as_utc(previous.end_time) == T0 + timedelta(minutes=5)
    assert get_active_session(db, vendor.id).id == second.id


def test_sessions_of_other_vendors_are_untouched(db, make_vendor):
    first_vendor = make_vendor()
    second_vendor = make_vendor(business_name="Elotes Doña Mary")
    start_live_session(db, first_vendor, _payload(), POLICY, now=T0)
    start_live_session(db, second_vendor, _payload(), POLICY, now=T0)

    assert _active_count(db, first_vendor) == 1
    assert _active_count(db, second_vendor) == 1


def test_pending_vendor_is_refused(db, make_vendor):
    vendor = make_vendor(status="pending")
    with pytest.raises(PolicyError):
        start_live_session(db, vendor, _payload(), POLICY, now=T0)
    assert _active_count(db, vendor) == 0


def test_pending_vendor_allowed_with_auto_approval(db, make_vendor):
    vendor = make_vendor(status="pending")
    session = start_live_session(db, vendor, _payload(), PlatformPolicy(allow_auto_vendor_approval=True), now=T0)
    assert session.is_active is True


@pytest.mark.parametrize(
    "overrides",
    [
        {"latitude": None},
        {"longitude": None},
        {"latitude": 91},
        {"longitude": -180.5},
        {"duration_minutes": 0},
        {"duration_minutes": 1441},
        {"estimated_customers": -1},
    ],
)
def test_invalid_payload_is_rejected(db, make_vendor, overrides):
    vendor = make_vendor()
    with pytest.raises(ValidationError):
        start_live_session(db, vendor, _payload(**overrides), POLICY, now=T0)
    assert _active_count(db, vendor) == 0


def test_validation_runs_before_policy(db, make_vendor):
    vendor = make_vendor(status="pending")
    with pytest.raises(ValidationError):
        start_live_session(db, vendor, _payload(latitude=None), POLICY, now=T0)


def test_end_session(db, make_vendor):
    vendor = make_vendor()
    start_live_session(db, vendor, _payload(), POLICY, now=T0)
    ended = end_live_session(db, vendor, now=T0 + timedelta(hours=1))

    assert ended.is_active is False
    assert ended.ended_by == "vendor"
    assert as_utc(ended.end_time) == T0 + timedelta(hours=1)
    assert get_active_session(db, vendor.id) is None


def test_end_twice_reports_not_found(db, make_vendor):
    vendor = make_vendor()
    start_live_session(db, vendor, _payload(), POLICY, now=T0)
    end_live_session(db, vendor, now=T0 + timedelta(minutes=1))
    with pytest.raises(NotFoundError):
        end_live_session(db, vendor, now=T0 + timedelta(minutes=2))


def test_force_end_marks_admin(db, make_vendor):
    vendor = make_vendor()
    start_live_session(db, vendor, _payload(), POLICY, now=T0)
    ended = force_end_live_session(db, vendor.id, now=T0 + timedelta(minutes=3))
    assert ended.ended_by == "admin"
    assert ended.is_active is False


def test_force_end_unknown_vendor(db):
    with pytest.raises(NotFoundError):
        force_end_live_session(db, uuid.uuid4())


def test_database_rejects_two_active_sessions(db, make_vendor):
    vendor = make_vendor()
    for _ in range(2):
        db.add(VendorLiveSession(vendor_id=vendor.id, latitude=1.0, longitude=1.0, start_time=T0, is_active=True))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_database_allows_many_ended_sessions(db, make_vendor):
    vendor = make_vendor()
    for offset in range(3):
        db.add(
            VendorLiveSession(
                vendor_id=vendor.id,
                start_time=T0 + timedelta(hours=offset),
                end_time=T0 + timedelta(hours=offset, minutes=30),
                is_active=False,
                ended_by="vendor",
            )
        )
    db.commit()
    assert db.query(VendorLiveSession).count() == 3


def test_commit_conflict_becomes_conflict_error(db, make_vendor, monkeypatch):
    vendor = make_vendor()
    first = start_live_session(db, vendor, _payload(), POLICY, now=T0)

    def racing_commit():
        raise IntegrityError("INSERT INTO vendor_live_sessions", {}, Exception("duplicate key"))

    monkeypatch.setattr(db, "commit", racing_commit)
    with pytest.raises(ConflictError):
        start_live_session(db, vendor, _payload(latitude=20.0), POLICY, now=T0 + timedelta(minutes=5))
    monkeypatch.undo()

    db.expire_all()
    assert _active_count(db, vendor) == 1
    assert get_active_session(db, vendor.id).id == first.id
    assert db.query(VendorLiveSession).count() == 1
