from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..attendance.model import AttendanceRecord
from .model import StudentProfile, TrainerProfile


class TrainerRepository(Protocol):
    """Trainer documents.

    Note (DIP): services depend on this interface, never on the backend directly.
    """

    def get_by_uid(self, uid: str) -> Optional[TrainerProfile]:
        raise NotImplementedError

    def save(self, trainer: TrainerProfile) -> None:
        raise NotImplementedError

    def update_fields(self, uid: str, fields: dict) -> None:
        raise NotImplementedError


class StudentRepository(Protocol):
    def get_by_uid(self, uid: str) -> Optional[StudentProfile]:
        raise NotImplementedError

    def save(self, student: StudentProfile) -> None:
        raise NotImplementedError

    def update_fields(self, uid: str, fields: dict) -> None:
        raise NotImplementedError

    def list_for_trainer(self, trainer_id: str) -> Sequence[dict]:
        raise NotImplementedError

    def mark_attendance(self, uid: str, record: AttendanceRecord) -> None:
        raise NotImplementedError
