from __future__ import annotations

import hashlib
import secrets
import uuid

import mysql.connector
from werkzeug.security import check_password_hash, generate_password_hash

from ..core.constants import PASSWORD_RESET_TTL_MINUTES
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import AuthUser
from .repository import AuthBackend


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _token_hash(token: str) -> str:
    # Only the digest is stored; the token itself travels in the reset link.
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class MySQLAuthBackend(AuthBackend):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def authenticate(self, email: str, password: str) -> AuthUser:
        with db_cursor(self._conn_factory, operation="authenticate") as (_, cur):
            cur.execute(
                "SELECT uid, email, password_hash FROM accounts WHERE email=%s",
                (_normalize_email(email),),
            )
            r = fetchone(cur)

        if not r:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(r["password_hash"], password or "")
        except ValueError:
            # Unknown hash method stored for this account.
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")
        return AuthUser(uid=str(r["uid"]), email=str(r["email"]))

    def create_user(self, email: str, password: str) -> AuthUser:
        email = _normalize_email(email)
        uid = uuid.uuid4().hex[:28]
        try:
            with db_cursor(self._conn_factory, operation="create_user") as (_, cur):
                cur.execute(
                    "INSERT INTO accounts (uid, email, password_hash) VALUES (%s, %s, %s)",
                    (uid, email, generate_password_hash(password)),
                )
        except mysql.connector.errors.IntegrityError:
            raise ValidationError("This email is already in use. Please use a different email.")
        return AuthUser(uid=uid, email=email)

    def create_password_reset(self, email: str) -> str:
        token = secrets.token_urlsafe(32)
        with db_cursor(self._conn_factory, operation="create_password_reset") as (_, cur):
            cur.execute("SELECT uid FROM accounts WHERE email=%s", (_normalize_email(email),))
            r = fetchone(cur)
            if not r:
                raise NotFoundError("No account found with this email.")

            cur.execute(
                """
                INSERT INTO password_resets (token_hash, uid, expires_at)
                VALUES (%s, %s, UTC_TIMESTAMP() + INTERVAL %s MINUTE)
                """,
                (_token_hash(token), r["uid"], PASSWORD_RESET_TTL_MINUTES),
            )
        return token

    def reset_password(self, token: str, new_password: str) -> AuthUser:
        with db_cursor(self._conn_factory, operation="reset_password") as (_, cur):
            cur.execute(
                """
                SELECT r.uid, a.email
                FROM password_resets r
                JOIN accounts a ON a.uid = r.uid
                WHERE r.token_hash=%s AND r.used_at IS NULL AND r.expires_at > UTC_TIMESTAMP()
                FOR UPDATE
                """,
                (_token_hash(token or ""),),
            )
            r = fetchone(cur)
            if not r:
                raise ValidationError("This reset link is invalid or has expired.")

            cur.execute(
                "UPDATE accounts SET password_hash=%s WHERE uid=%s",
                (generate_password_hash(new_password), r["uid"]),
            )
            cur.execute(
                "UPDATE password_resets SET used_at=UTC_TIMESTAMP() WHERE token_hash=%s",
                (_token_hash(token),),
            )
        return AuthUser(uid=str(r["uid"]), email=str(r["email"]))
