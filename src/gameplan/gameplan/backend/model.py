from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthUser:
    """Identity returned by the authentication backend."""

    uid: str
    email: str
