from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import date_key, now_utc
from ..core.enums import FenceStatus, Role
from ..core.exceptions import (
    AlreadyMarkedTodayError,
    AuthorizationError,
    BackendUnreachableError,
    LocationPermissionDeniedError,
    LocationUnavailableError,
    NotFoundError,
    OutOfRangeError,
    PermissionDeniedError,
)
from ..geo.fence import check_fence
from ..geo.model import DEFAULT_FENCE, GeofenceConfig
from ..geo.provider import LocationProvider
from ..logging_config import get_logger
from ..progress.store import LocalStoreFactory
from ..users.model import SessionContext, StudentProfile
from ..users.repository import StudentRepository, TrainerRepository
from .eligibility import summarize_attendance
from .mapper import to_calendar_display
from .model import AttendanceRecord, AttendanceSummary, MarkResult

logger = get_logger(__name__)

SYNC_NOTICE = "Attendance saved on this device only; your trainer will see it once the server is reachable."


class AttendanceService:
    def __init__(
        self,
        students: StudentRepository,
        trainers: TrainerRepository,
        local_store_for: LocalStoreFactory,
        *,
        default_fence: GeofenceConfig = DEFAULT_FENCE,
    ):
        self._students = students
        self._trainers = trainers
        self._local_store_for = local_store_for
        self._default_fence = default_fence

    def resolve_fence(self, ctx: SessionContext) -> GeofenceConfig:
        """Fence of the student's trainer, or the default until one is set."""
        profile = ctx.profile
        if not isinstance(profile, StudentProfile) or not profile.trainer_id:
            return self._default_fence

        try:
            trainer = self._trainers.get_by_uid(profile.trainer_id)
        except (BackendUnreachableError, PermissionDeniedError) as e:
            logger.warning("Trainer location lookup failed, using default fence: %s", e)
            return self._default_fence

        if not trainer or not trainer.location:
            return self._default_fence
        return trainer.location

    def mark_attendance(
        self,
        ctx: SessionContext,
        provider: LocationProvider,
        *,
        now: Optional[datetime] = None,
        fence: Optional[GeofenceConfig] = None,
    ) -> MarkResult:
        ctx.require_role(Role.STUDENT)
        now = now or now_utc()
        today = date_key(now)

        store = self._local_store_for(ctx.uid)
        records = store.load_attendance()
        existing = records.get(today)
        if existing and existing.marked:
            raise AlreadyMarkedTodayError("Attendance is already marked for today.")

        check = check_fence(provider, fence or self.resolve_fence(ctx))
        if check.status == FenceStatus.PERMISSION_DENIED:
            raise LocationPermissionDeniedError("Location permissions are required to mark attendance.")
        if check.status == FenceStatus.LOCATION_UNAVAILABLE:
            raise LocationUnavailableError("Your location could not be determined. Please try again.")
        if check.status == FenceStatus.OUT_OF_RANGE:
            raise OutOfRangeError(
                "You must be in the target location to mark attendance.",
                distance_meters=check.distance_meters,
            )

        record = AttendanceRecord(date_key=today, marked=True, timestamp=now.isoformat())
        records[today] = record
        store.save_attendance(records)
        logger.info("Attendance marked for %s on %s", ctx.uid, today)

        try:
            self._students.mark_attendance(ctx.uid, record)
        except (BackendUnreachableError, PermissionDeniedError) as e:
            logger.warning("Remote attendance mirror for %s failed: %s", ctx.uid, e)
            return MarkResult(record=record, synced=False, notice=SYNC_NOTICE)

        return MarkResult(record=record, synced=True)

    def get_calendar(self, ctx: SessionContext) -> dict[str, dict]:
        ctx.require_role(Role.STUDENT)
        records = self._local_store_for(ctx.uid).load_attendance()
        return to_calendar_display({day: r.to_document() for day, r in records.items()})

    def fetch_remote_calendar(self, ctx: SessionContext, student_uid: str) -> dict[str, dict]:
        student = self._students.get_by_uid(student_uid)
        if not student:
            raise NotFoundError("Student data not found.")
        self._ensure_can_view(ctx, student)
        return to_calendar_display(student.attendance)

    def get_summary(self, ctx: SessionContext, *, total_classes: float) -> AttendanceSummary:
        ctx.require_role(Role.STUDENT)
        records = self._local_store_for(ctx.uid).load_attendance()
        attended = sum(1 for r in records.values() if r.marked)
        return summarize_attendance(total_classes, attended)

    @staticmethod
    def _ensure_can_view(ctx: SessionContext, student: StudentProfile) -> None:
        if ctx.is_student and ctx.uid == student.uid:
            return
        if ctx.is_trainer and student.trainer_id == getattr(ctx.profile, "trainer_id", None):
            return
        raise AuthorizationError("You can only view your own students")
