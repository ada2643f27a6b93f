from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from src.gameplan.gameplan.backend.documents import deep_merge
from src.gameplan.gameplan.backend.model import AuthUser
from src.gameplan.gameplan.container import assemble
from src.gameplan.gameplan.core.enums import Role
from src.gameplan.gameplan.core.exceptions import AuthenticationError, BackendUnreachableError, NotFoundError, ValidationError
from src.gameplan.gameplan.geo.model import GeofenceConfig
from src.gameplan.gameplan.progress.store import ProgressStore
from src.gameplan.gameplan.users.model import SessionContext, StudentProfile, TrainerProfile

FENCE = GeofenceConfig(latitude=56.1971946, longitude=15.6188414, radius_meters=1000.0)


class InMemoryDocumentStore:
    def __init__(self):
        self.collections: dict[str, dict[str, dict]] = {}
        self.fail_with: Optional[Exception] = None
        self.fail_reads = False
        self.writes = 0

    def _check_read(self) -> None:
        if self.fail_with and self.fail_reads:
            raise self.fail_with

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        self._check_read()
        doc = self.collections.get(collection, {}).get(doc_id)
        return dict(doc) if doc is not None else None

    def set_document(self, collection: str, doc_id: str, data: dict, *, merge: bool = False) -> None:
        if self.fail_with:
            raise self.fail_with
        docs = self.collections.setdefault(collection, {})
        docs[doc_id] = deep_merge(docs.get(doc_id, {}), data) if merge else dict(data)
        self.writes += 1

    def add_document(self, collection: str, data: dict) -> str:
        doc_id = f"doc{len(self.collections.get(collection, {})) + 1}"
        self.set_document(collection, doc_id, data)
        return doc_id

    def query_documents(self, collection: str, field: str, value: Any):
        self._check_read()
        return [
            {**doc, "id": doc_id}
            for doc_id, doc in self.collections.get(collection, {}).items()
            if doc.get(field) == value
        ]


class InMemoryAuthBackend:
    def __init__(self):
        self.accounts: dict[str, tuple[str, str]] = {}
        self.reset_tokens: dict[str, str] = {}
        self.issued = 0

    def authenticate(self, email: str, password: str) -> AuthUser:
        account = self.accounts.get(email.strip().lower())
        if not account or account[1] != password:
            raise AuthenticationError("Invalid email or password")
        return AuthUser(uid=account[0], email=email.strip().lower())

    def create_user(self, email: str, password: str) -> AuthUser:
        email = email.strip().lower()
        if email in self.accounts:
            raise ValidationError("This email is already in use. Please use a different email.")
        uid = f"uid{len(self.accounts) + 1}"
        self.accounts[email] = (uid, password)
        return AuthUser(uid=uid, email=email)

    def create_password_reset(self, email: str) -> str:
        email = email.strip().lower()
        if email not in self.accounts:
            raise NotFoundError("No account found with this email.")
        self.issued += 1
        token = f"token{self.issued}"
        self.reset_tokens[token] = email
        return token

    def reset_password(self, token: str, new_password: str) -> AuthUser:
        email = self.reset_tokens.pop(token, None)
        if email is None:
            raise ValidationError("This reset link is invalid or has expired.")
        uid = self.accounts[email][0]
        self.accounts[email] = (uid, new_password)
        return AuthUser(uid=uid, email=email)


class RecordingResetMailer:
    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    def send_reset(self, email: str, token: str) -> None:
        self.sent.append((email, token))


class InMemoryKeyValueStore:
    def __init__(self):
        self.data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        assert isinstance(value, str)
        self.data[key] = value


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def documents() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def auth_backend() -> InMemoryAuthBackend:
    return InMemoryAuthBackend()


@pytest.fixture
def kv_stores() -> dict[str, InMemoryKeyValueStore]:
    return {}


@pytest.fixture
def local_store_for(kv_stores):
    def _for(uid: str) -> ProgressStore:
        return ProgressStore(kv_stores.setdefault(uid, InMemoryKeyValueStore()))

    return _for


@pytest.fixture
def reset_mailer() -> RecordingResetMailer:
    return RecordingResetMailer()


@pytest.fixture
def container(auth_backend, documents, local_store_for, reset_mailer):
    return assemble(
        auth_backend=auth_backend,
        documents=documents,
        local_store_for=local_store_for,
        default_fence=FENCE,
        reset_mailer=reset_mailer,
    )


@pytest.fixture
def trainer(documents) -> TrainerProfile:
    profile = TrainerProfile(uid="t1", name="Coach", email="coach@example.com", trainer_id="t1", sport="Football", location=FENCE)
    documents.set_document("trainers", profile.uid, profile.to_document())
    return profile


@pytest.fixture
def student(documents, trainer) -> StudentProfile:
    profile = StudentProfile(
        uid="s1",
        name="Alex",
        email="alex@example.com",
        trainer_id=trainer.trainer_id,
        student_id="123456",
        age=17,
        gender="Female",
        sport="Football",
    )
    documents.set_document("students", profile.uid, profile.to_document())
    return profile


@pytest.fixture
def trainer_ctx(trainer) -> SessionContext:
    return SessionContext(uid=trainer.uid, role=Role.TRAINER, email=trainer.email, profile=trainer)


@pytest.fixture
def student_ctx(student) -> SessionContext:
    return SessionContext(uid=student.uid, role=Role.STUDENT, email=student.email, profile=student)


@pytest.fixture
def offline_backend(documents, student) -> InMemoryDocumentStore:
    """Backend that refuses every write after the fixtures above are in place."""
    documents.fail_with = BackendUnreachableError("The server could not be reached. Please try again later.")
    return documents


@pytest.fixture
def unreachable_backend(documents, student) -> InMemoryDocumentStore:
    """Backend that refuses reads as well as writes."""
    documents.fail_with = BackendUnreachableError("The server could not be reached. Please try again later.")
    documents.fail_reads = True
    return documents
