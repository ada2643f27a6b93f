from __future__ import annotations

from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..backend.repository import DocumentStore
from ..core.constants import STUDENTS_COLLECTION, TRAINERS_COLLECTION
from .model import StudentProfile, TrainerProfile
from .repository import StudentRepository, TrainerRepository


class DocumentTrainerRepository(TrainerRepository):
    def __init__(self, documents: DocumentStore):
        self._documents = documents

    def get_by_uid(self, uid: str) -> Optional[TrainerProfile]:
        data = self._documents.get_document(TRAINERS_COLLECTION, uid)
        if data is None:
            return None
        return TrainerProfile.from_document(uid, data)

    def save(self, trainer: TrainerProfile) -> None:
        self._documents.set_document(TRAINERS_COLLECTION, trainer.uid, trainer.to_document())

    def update_fields(self, uid: str, fields: dict) -> None:
        self._documents.set_document(TRAINERS_COLLECTION, uid, fields, merge=True)


class DocumentStudentRepository(StudentRepository):
    def __init__(self, documents: DocumentStore):
        self._documents = documents

    def get_by_uid(self, uid: str) -> Optional[StudentProfile]:
        data = self._documents.get_document(STUDENTS_COLLECTION, uid)
        if data is None:
            return None
        return StudentProfile.from_document(uid, data)

    def save(self, student: StudentProfile) -> None:
        self._documents.set_document(STUDENTS_COLLECTION, student.uid, student.to_document())

    def update_fields(self, uid: str, fields: dict) -> None:
        self._documents.set_document(STUDENTS_COLLECTION, uid, fields, merge=True)

    def list_for_trainer(self, trainer_id: str) -> Sequence[dict]:
        return self._documents.query_documents(STUDENTS_COLLECTION, "trainerID", trainer_id)

    def mark_attendance(self, uid: str, record: AttendanceRecord) -> None:
        self._documents.set_document(
            STUDENTS_COLLECTION,
            uid,
            {"attendance": {record.date_key: record.to_document()}},
            merge=True,
        )
