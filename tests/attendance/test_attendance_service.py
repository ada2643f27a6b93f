from __future__ import annotations

from datetime import timedelta
from math import degrees

import pytest

from src.gameplan.gameplan.core.exceptions import (
    AlreadyMarkedTodayError,
    AuthorizationError,
    LocationPermissionDeniedError,
    LocationUnavailableError,
    NotFoundError,
    OutOfRangeError,
)
from src.gameplan.gameplan.core.enums import PermissionStatus
from src.gameplan.gameplan.geo.distance import EARTH_RADIUS_M
from src.gameplan.gameplan.geo.model import DEFAULT_FENCE, GeofenceConfig
from src.gameplan.gameplan.geo.provider import ReportedLocationProvider


def _at(meters_north: float, fence: GeofenceConfig = DEFAULT_FENCE) -> ReportedLocationProvider:
    return ReportedLocationProvider(
        latitude=fence.latitude + degrees(meters_north / EARTH_RADIUS_M),
        longitude=fence.longitude,
    )


def test_mark_in_range_writes_local_and_remote(container, student_ctx, documents, local_store_for, fixed_now):
    result = container.attendance_service.mark_attendance(student_ctx, _at(50), now=fixed_now)

    assert result.synced is True
    assert result.record.date_key == "2025-01-01"
    assert local_store_for("s1").load_attendance()["2025-01-01"].marked is True

    remote = documents.get_document("students", "s1")
    assert remote["attendance"]["2025-01-01"]["marked"] is True
    assert remote["attendance"]["2025-01-01"]["timestamp"] == fixed_now.isoformat()


def test_marking_twice_same_day_keeps_one_record(container, student_ctx, local_store_for, fixed_now):
    container.attendance_service.mark_attendance(student_ctx, _at(50), now=fixed_now)

    with pytest.raises(AlreadyMarkedTodayError):
        container.attendance_service.mark_attendance(student_ctx, _at(50), now=fixed_now + timedelta(hours=2))

    records = local_store_for("s1").load_attendance()
    assert list(records) == ["2025-01-01"]
    assert records["2025-01-01"].timestamp == fixed_now.isoformat()


def test_next_day_can_be_marked_again(container, student_ctx, local_store_for, fixed_now):
    container.attendance_service.mark_attendance(student_ctx, _at(50), now=fixed_now)
    container.attendance_service.mark_attendance(student_ctx, _at(50), now=fixed_now + timedelta(days=1))

    assert sorted(local_store_for("s1").load_attendance()) == ["2025-01-01", "2025-01-02"]


def test_out_of_range_is_rejected_without_state_change(container, student_ctx, local_store_for, documents, fixed_now):
    with pytest.raises(OutOfRangeError) as exc:
        container.attendance_service.mark_attendance(student_ctx, _at(1500), now=fixed_now)

    assert exc.value.distance_meters == pytest.approx(1500, abs=1)
    assert local_store_for("s1").load_attendance() == {}
    assert "attendance" not in documents.get_document("students", "s1")


def test_permission_denied_and_unavailable_are_distinct(container, student_ctx, fixed_now):
    denied = ReportedLocationProvider(
        latitude=DEFAULT_FENCE.latitude, longitude=DEFAULT_FENCE.longitude, permission=PermissionStatus.DENIED
    )
    with pytest.raises(LocationPermissionDeniedError):
        container.attendance_service.mark_attendance(student_ctx, denied, now=fixed_now)

    with pytest.raises(LocationUnavailableError):
        container.attendance_service.mark_attendance(student_ctx, ReportedLocationProvider(), now=fixed_now)


def test_remote_failure_keeps_local_record(container, student_ctx, offline_backend, local_store_for, fixed_now):
    result = container.attendance_service.mark_attendance(student_ctx, _at(10), now=fixed_now)

    assert result.synced is False
    assert result.notice
    assert "2025-01-01" in local_store_for("s1").load_attendance()


def test_trainer_location_drives_the_fence(container, student_ctx, trainer_ctx, fixed_now):
    moved = container.profile_service.update_trainer_location(trainer_ctx, latitude=59.3293, longitude=18.0686, radius_meters=300)

    assert container.attendance_service.resolve_fence(student_ctx) == moved
    with pytest.raises(OutOfRangeError):
        container.attendance_service.mark_attendance(student_ctx, _at(10), now=fixed_now)

    result = container.attendance_service.mark_attendance(student_ctx, _at(100, moved), now=fixed_now)
    assert result.record.marked


def test_trainer_cannot_mark_attendance(container, trainer_ctx, fixed_now):
    with pytest.raises(AuthorizationError):
        container.attendance_service.mark_attendance(trainer_ctx, _at(10), now=fixed_now)


def test_calendar_views(container, student_ctx, trainer_ctx, fixed_now):
    container.attendance_service.mark_attendance(student_ctx, _at(10), now=fixed_now)

    local = container.attendance_service.get_calendar(student_ctx)
    remote = container.attendance_service.fetch_remote_calendar(trainer_ctx, "s1")

    expected = {"2025-01-01": {"marked": True, "selected": True, "selectedColor": "#DA0037"}}
    assert local == expected
    assert remote == expected


def test_remote_calendar_of_unknown_student(container, trainer_ctx):
    with pytest.raises(NotFoundError):
        container.attendance_service.fetch_remote_calendar(trainer_ctx, "missing")


def test_summary_counts_marked_days(container, student_ctx, fixed_now):
    for day in range(8):
        container.attendance_service.mark_attendance(student_ctx, _at(10), now=fixed_now + timedelta(days=day))

    summary = container.attendance_service.get_summary(student_ctx, total_classes=10)

    assert summary.attended_classes == 8
    assert summary.has_attended_enough
    assert summary.eligible_for_certification
