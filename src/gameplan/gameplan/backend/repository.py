from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import AuthUser


class AuthBackend(Protocol):
    """Hosted authentication service.

    authenticate raises AuthenticationError for bad credentials and
    BackendUnreachableError when the service cannot be reached.
    """

    def authenticate(self, email: str, password: str) -> AuthUser:
        raise NotImplementedError

    def create_user(self, email: str, password: str) -> AuthUser:
        raise NotImplementedError

    def create_password_reset(self, email: str) -> str:
        """One-time reset token for the account; NotFoundError for an unknown email."""
        raise NotImplementedError

    def reset_password(self, token: str, new_password: str) -> AuthUser:
        """Set a new password; ValidationError when the token is unknown, used or expired."""
        raise NotImplementedError


class DocumentStore(Protocol):
    """Hosted document database.

    Writes are last-write-wins: there is no version check between readers
    and writers on different devices.
    """

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        raise NotImplementedError

    def set_document(self, collection: str, doc_id: str, data: dict, *, merge: bool = False) -> None:
        raise NotImplementedError

    def add_document(self, collection: str, data: dict) -> str:
        raise NotImplementedError

    def query_documents(self, collection: str, field: str, value: Any) -> Sequence[dict]:
        """Documents whose top-level ``field`` equals ``value``; each carries its ``id``."""

        raise NotImplementedError
