from __future__ import annotations

import secrets
from dataclasses import dataclass, replace
from typing import Optional

from ..attendance.eligibility import summarize_attendance
from ..backend.repository import AuthBackend
from ..common.validators import require_fields, require_float, require_int, require_matching, require_min_length, require_non_empty
from ..core.constants import DEFAULT_PROFILE_IMAGE, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import BackendUnreachableError, NotFoundError, PermissionDeniedError, ValidationError
from ..geo.model import DEFAULT_FENCE, GeofenceConfig
from ..logging_config import get_logger
from ..progress.store import LocalStoreFactory, ProgressStore
from .mailer import LogResetMailer, ResetMailer
from .model import Profile, SessionContext, StudentProfile, TrainerProfile
from .repository import StudentRepository, TrainerRepository

logger = get_logger(__name__)

PROFILE_SYNC_NOTICE = "Profile saved on this device only; it will sync once the server is reachable."

STUDENT_SIGNUP_FIELDS = (
    "fullName",
    "age",
    "sport",
    "gender",
    "email",
    "password",
    "confirmPassword",
    "trainerID",
    "studentID",
)

TRAINER_EDITABLE_FIELDS = {"name": "name", "sport": "sport"}

# Document key -> StudentProfile attribute
STUDENT_PROFILE_FIELDS = {
    "name": "name",
    "age": "age",
    "gender": "gender",
    "email": "email",
    "address": "address",
    "trainerID": "trainer_id",
    "trainerName": "trainer_name",
    "sport": "sport",
    "emergencyContact": "emergency_contact",
}

# trainerName follows trainerID and is not edited directly.
STUDENT_EDITABLE_FIELDS = frozenset(STUDENT_PROFILE_FIELDS) - {"trainerName"}


@dataclass(frozen=True)
class ProfileUpdate:
    profile: StudentProfile
    synced: bool
    notice: Optional[str] = None


class AuthService:
    """Use case: sign in and rebuild the session context."""

    def __init__(
        self,
        auth: AuthBackend,
        trainers: TrainerRepository,
        students: StudentRepository,
        local_store_for: LocalStoreFactory,
        *,
        reset_mailer: Optional[ResetMailer] = None,
    ):
        self._auth = auth
        self._trainers = trainers
        self._students = students
        self._local_store_for = local_store_for
        self._reset_mailer = reset_mailer or LogResetMailer()

    def login(self, email: str, password: str) -> SessionContext:
        email = require_non_empty(email, "Email")
        password = require_non_empty(password, "Password")

        user = self._auth.authenticate(email, password)
        logger.info("User %s signed in", user.uid)
        ctx = self._context_for(user.uid, user.email)
        cache_profile(self._local_store_for(ctx.uid), ctx.profile)
        return ctx

    def load_context(self, uid: str, role: Role) -> SessionContext:
        """Context for a signed-in user.

        Falls back to the profile cached on this device when the backend
        cannot be reached, so local-first workflows keep working offline.
        """
        try:
            return self._remote_context(uid, role)
        except BackendUnreachableError:
            profile = self._cached_profile(uid, role)
            if profile is None:
                raise
            logger.warning("Backend unreachable, using cached profile for %s", uid)
            return SessionContext(uid=uid, role=role, email=profile.email, profile=profile)

    def request_password_reset(self, email: str) -> None:
        email = require_non_empty(email, "Email")
        token = self._auth.create_password_reset(email)
        self._reset_mailer.send_reset(email.strip().lower(), token)
        logger.info("Password reset requested")

    def reset_password(self, token: str, *, password: str, confirm_password: str) -> None:
        token = require_non_empty(token, "Reset token")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        require_matching(password, confirm_password, "Passwords do not match.")

        user = self._auth.reset_password(token, password)
        logger.info("Password reset for %s", user.uid)

    def _remote_context(self, uid: str, role: Role) -> SessionContext:
        if role == Role.TRAINER:
            trainer = self._trainers.get_by_uid(uid)
            if not trainer:
                raise NotFoundError("Trainer not found.")
            return SessionContext(uid=uid, role=Role.TRAINER, email=trainer.email, profile=trainer)

        student = self._students.get_by_uid(uid)
        if not student:
            raise NotFoundError("Student data not found.")
        return SessionContext(uid=uid, role=Role.STUDENT, email=student.email, profile=student)

    def _cached_profile(self, uid: str, role: Role) -> Optional[Profile]:
        store = self._local_store_for(uid)
        if role == Role.TRAINER:
            data = store.load_trainer_data()
            return TrainerProfile.from_document(uid, data) if data else None
        data = store.load_student_data()
        return StudentProfile.from_document(uid, data) if data else None

    def _context_for(self, uid: str, email: str) -> SessionContext:
        trainer = self._trainers.get_by_uid(uid)
        if trainer:
            return SessionContext(uid=uid, role=Role.TRAINER, email=email, profile=trainer)

        student = self._students.get_by_uid(uid)
        if student:
            return SessionContext(uid=uid, role=Role.STUDENT, email=email, profile=student)

        raise NotFoundError("Account data not found. Please sign up again.")


class SignUpService:
    """Use case: create trainer and student accounts."""

    def __init__(
        self,
        auth: AuthBackend,
        trainers: TrainerRepository,
        students: StudentRepository,
        *,
        default_fence: GeofenceConfig = DEFAULT_FENCE,
    ):
        self._auth = auth
        self._trainers = trainers
        self._students = students
        self._default_fence = default_fence

    @staticmethod
    def generate_student_id() -> str:
        """Random 6-digit student id."""
        return str(100000 + secrets.randbelow(900000))

    def sign_up_trainer(
        self,
        *,
        name: str,
        email: str,
        password: str,
        confirm_password: str,
        sport: str = "",
    ) -> TrainerProfile:
        name = require_non_empty(name, "Name")
        email = require_non_empty(email, "Email")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        require_matching(password, confirm_password, "Passwords do not match.")

        user = self._auth.create_user(email, password)
        trainer = TrainerProfile(
            uid=user.uid,
            name=name,
            email=user.email,
            trainer_id=user.uid,
            sport=(sport or "").strip(),
            location=self._default_fence,
        )
        self._trainers.save(trainer)
        logger.info("Trainer %s signed up", trainer.uid)
        return trainer

    def sign_up_student(self, form: dict) -> StudentProfile:
        require_fields(form, STUDENT_SIGNUP_FIELDS)
        require_min_length(form["password"], "Password", MIN_PASSWORD_LENGTH)
        require_matching(form["password"], form["confirmPassword"], "Passwords do not match.")
        age = require_int(form["age"], "Age")
        if age <= 0:
            raise ValidationError("Age must be a positive number")

        trainer_id = str(form["trainerID"]).strip()
        trainer = self._trainers.get_by_uid(trainer_id)
        if not trainer:
            raise NotFoundError("Trainer ID not found. Ask your trainer for the correct ID.")

        user = self._auth.create_user(str(form["email"]), str(form["password"]))
        student = StudentProfile(
            uid=user.uid,
            name=str(form["fullName"]).strip(),
            email=user.email,
            trainer_id=trainer.trainer_id,
            student_id=str(form["studentID"]).strip(),
            age=age,
            gender=str(form["gender"]).strip(),
            sport=str(form["sport"]).strip(),
            address=str(form.get("address") or "").strip(),
            emergency_contact=str(form.get("emergencyContact") or "").strip(),
            trainer_name=trainer.name,
            image=DEFAULT_PROFILE_IMAGE,
        )
        self._students.save(student)
        logger.info("Student %s signed up with trainer %s", student.uid, trainer.trainer_id)
        return student


def cache_profile(store: ProgressStore, profile: Profile) -> None:
    """Keep the last known profile document on the device."""
    if isinstance(profile, TrainerProfile):
        store.save_trainer_data(profile.to_document())
    else:
        store.save_student_data(profile.to_document())


class ProfileService:
    """Use case: edit trainer/student profiles."""

    def __init__(self, trainers: TrainerRepository, students: StudentRepository, local_store_for: LocalStoreFactory):
        self._trainers = trainers
        self._students = students
        self._local_store_for = local_store_for

    def update_trainer(self, ctx: SessionContext, fields: dict) -> TrainerProfile:
        ctx.require_role(Role.TRAINER)
        unknown = set(fields) - set(TRAINER_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError("Fields cannot be edited: " + ", ".join(sorted(unknown)))
        if "name" in fields:
            fields = {**fields, "name": require_non_empty(fields["name"], "Name")}

        self._trainers.update_fields(ctx.uid, fields)
        trainer = replace(ctx.profile, **{TRAINER_EDITABLE_FIELDS[k]: v for k, v in fields.items()})
        cache_profile(self._local_store_for(ctx.uid), trainer)
        return trainer

    def update_trainer_location(
        self,
        ctx: SessionContext,
        *,
        latitude: object,
        longitude: object,
        radius_meters: object = None,
    ) -> GeofenceConfig:
        ctx.require_role(Role.TRAINER)
        lat = require_float(latitude, "Latitude")
        lon = require_float(longitude, "Longitude")
        radius = DEFAULT_FENCE.radius_meters if radius_meters in (None, "") else require_float(radius_meters, "Radius")
        if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
            raise ValidationError("Coordinates are out of range")
        if radius <= 0:
            raise ValidationError("Radius must be positive")

        fence = GeofenceConfig(latitude=lat, longitude=lon, radius_meters=radius)
        self._trainers.update_fields(ctx.uid, {"location": fence.to_document()})
        cache_profile(self._local_store_for(ctx.uid), replace(ctx.profile, location=fence))
        logger.info("Trainer %s moved fence to (%s, %s) r=%s", ctx.uid, lat, lon, radius)
        return fence

    def update_student(self, ctx: SessionContext, fields: dict) -> ProfileUpdate:
        """Merge ``fields`` into the student's profile.

        A new trainerID must name an existing trainer; trainerName follows it.
        Without a reachable backend such a change cannot be checked and fails.
        """
        ctx.require_role(Role.STUDENT)
        unknown = set(fields) - set(STUDENT_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError("Fields cannot be edited: " + ", ".join(sorted(unknown)))

        current = ctx.profile.to_document()
        merged = {**current, **fields}
        require_fields(merged, ("name", "age", "gender"))
        merged["age"] = require_int(merged["age"], "Age")

        changes = {k: merged[k] for k in fields}
        if "trainerID" in changes:
            changes.update(self._trainer_link(ctx.profile, changes["trainerID"]))
        updated = replace(ctx.profile, **{STUDENT_PROFILE_FIELDS[k]: v for k, v in changes.items()})
        store = self._local_store_for(ctx.uid)

        try:
            self._students.update_fields(ctx.uid, changes)
        except (BackendUnreachableError, PermissionDeniedError) as e:
            logger.warning("Profile update for %s kept locally: %s", ctx.uid, e)
            cache_profile(store, updated)
            return ProfileUpdate(profile=updated, synced=False, notice=PROFILE_SYNC_NOTICE)

        cache_profile(store, updated)
        return ProfileUpdate(profile=updated, synced=True)

    def _trainer_link(self, student: StudentProfile, trainer_id: object) -> dict:
        trainer_id = require_non_empty(str(trainer_id or ""), "Trainer ID")
        if trainer_id == student.trainer_id:
            return {"trainerID": trainer_id}

        trainer = self._trainers.get_by_uid(trainer_id)
        if not trainer:
            raise NotFoundError("Trainer ID not found. Ask your trainer for the correct ID.")
        return {"trainerID": trainer.trainer_id, "trainerName": trainer.name}


class RosterService:
    """Use case: trainer dashboard student list."""

    def __init__(self, students: StudentRepository):
        self._students = students

    def list_students(
        self,
        ctx: SessionContext,
        *,
        search: str = "",
        total_classes: Optional[int] = None,
    ) -> list[dict]:
        ctx.require_role(Role.TRAINER)
        docs = self._students.list_for_trainer(ctx.profile.trainer_id)

        unique: dict[str, dict] = {}
        for doc in docs:
            unique[str(doc["id"])] = doc

        needle = (search or "").strip().lower()
        rows: list[dict] = []
        for doc_id, doc in unique.items():
            if needle and not any(needle in str(doc.get(f) or "").lower() for f in ("name", "studentID")):
                continue

            attendance = doc.get("attendance") or {}
            attended = sum(1 for entry in attendance.values() if (entry or {}).get("marked"))
            row = {
                "id": doc_id,
                "name": doc.get("name") or "",
                "studentID": doc.get("studentID") or "",
                "sport": doc.get("sport") or "",
                "streak": int(doc.get("streak") or 0),
                "attendedClasses": attended,
            }
            if total_classes is not None:
                summary = summarize_attendance(total_classes, attended)
                row["attendanceRate"] = summary.rate
                row["hasAttendedEnough"] = summary.has_attended_enough
                row["eligibleForCertification"] = summary.eligible_for_certification
            rows.append(row)

        rows.sort(key=lambda r: (r["name"].lower(), r["id"]))
        return rows
