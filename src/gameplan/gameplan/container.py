from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .attendance.service import AttendanceService
from .backend.mysql_auth_backend import MySQLAuthBackend
from .backend.mysql_document_store import MySQLDocumentStore
from .backend.repository import AuthBackend, DocumentStore
from .database.connection import DBConfig, DatabaseConnection
from .geo.model import DEFAULT_FENCE, GeofenceConfig
from .progress.service import ProgressService
from .progress.store import LocalStoreFactory, file_store_factory
from .users.document_repositories import DocumentStudentRepository, DocumentTrainerRepository
from .users.mailer import LogResetMailer, ResetMailer, SmtpResetMailer
from .users.service import AuthService, ProfileService, RosterService, SignUpService


@dataclass(frozen=True)
class Container:
    auth_backend: AuthBackend
    documents: DocumentStore
    local_store_for: LocalStoreFactory

    trainers_repo: DocumentTrainerRepository
    students_repo: DocumentStudentRepository

    auth_service: AuthService
    signup_service: SignUpService
    profile_service: ProfileService
    roster_service: RosterService
    attendance_service: AttendanceService
    progress_service: ProgressService


def assemble(
    *,
    auth_backend: AuthBackend,
    documents: DocumentStore,
    local_store_for: LocalStoreFactory,
    default_fence: GeofenceConfig = DEFAULT_FENCE,
    reset_mailer: Optional[ResetMailer] = None,
) -> Container:
    trainers_repo = DocumentTrainerRepository(documents)
    students_repo = DocumentStudentRepository(documents)

    return Container(
        auth_backend=auth_backend,
        documents=documents,
        local_store_for=local_store_for,
        trainers_repo=trainers_repo,
        students_repo=students_repo,
        auth_service=AuthService(auth_backend, trainers_repo, students_repo, local_store_for, reset_mailer=reset_mailer),
        signup_service=SignUpService(auth_backend, trainers_repo, students_repo, default_fence=default_fence),
        profile_service=ProfileService(trainers_repo, students_repo, local_store_for),
        roster_service=RosterService(students_repo),
        attendance_service=AttendanceService(
            students_repo,
            trainers_repo,
            local_store_for,
            default_fence=default_fence,
        ),
        progress_service=ProgressService(students_repo, local_store_for),
    )


def reset_mailer_from(mail: Optional[dict]) -> ResetMailer:
    """SMTP delivery when a host is configured, otherwise the link is logged."""
    mail = mail or {}
    if not mail.get("host"):
        return LogResetMailer(reset_url=mail.get("reset_url") or "http://localhost:5000/reset-password")
    return SmtpResetMailer(
        host=mail["host"],
        port=int(mail.get("port") or 587),
        from_email=mail.get("from_email") or "no-reply@gameplan.local",
        reset_url=mail.get("reset_url") or "http://localhost:5000/reset-password",
        username=mail.get("username") or None,
        password=mail.get("password") or None,
        use_tls=bool(mail.get("use_tls", True)),
    )


def build_container(
    *,
    db_config: dict,
    progress_store_dir: str | Path,
    default_fence: dict | None = None,
    mail: dict | None = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return assemble(
        auth_backend=MySQLAuthBackend(conn),
        documents=MySQLDocumentStore(conn),
        local_store_for=file_store_factory(progress_store_dir),
        default_fence=GeofenceConfig.from_document(default_fence),
        reset_mailer=reset_mailer_from(mail),
    )
