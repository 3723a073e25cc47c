"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper.
UserStore is the repository; _row_to_user is the mapper. Route and service
code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Email uniqueness is case-insensitive. The lower-cased address lives in
  email_normalized under a UNIQUE constraint, so "A@b.com" and "a@B.com"
  cannot both be inserted even by two concurrent registrations. The address
  as typed is kept in email and is what tokens carry.

  password_hash / password_salt are raw bytes (BLOB). They are never logged.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, LargeBinary, MetaData, String, Table, create_engine, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.errors import DuplicateEmailError
from auth.models import Credential, Identity, User

logger = logging.getLogger("credcore.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(36), primary_key=True),  # uuid4 string
    Column("display_name", String(255), nullable=False),
    Column("email", String(255), nullable=False),
    Column("email_normalized", String(255), nullable=False, unique=True),
    Column("password_hash", LargeBinary, nullable=False),
    Column("password_salt", LargeBinary, nullable=False),
    Column("created_at", String(32), nullable=False),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during writes."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_email(email: str) -> str:
    return email.lower()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore("sqlite:///credcore.db")
        store.insert(User(identity=..., credential=derive_credential("secret")))
        user = store.find_by_email("A@B.com")
        store.close()
    """

    def __init__(self, db_url: str = "sqlite:///credcore.db") -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite") and ":memory:" not in db_url and "mode=memory" not in db_url:
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def email_exists(self, email: str) -> bool:
        """Return True if any user holds this email, ignoring case."""
        with self.engine.connect() as conn:
            row = conn.execute(
                select(_users.c.id).where(_users.c.email_normalized == normalize_email(email))
            ).fetchone()
        return row is not None

    def find_by_email(self, email: str, case_insensitive: bool = True) -> User | None:
        """Look up a user by email. Returns None if not found."""
        if case_insensitive:
            clause = _users.c.email_normalized == normalize_email(email)
        else:
            clause = _users.c.email == email
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(clause)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def insert(self, user: User) -> None:
        """Persist a new user with its credential.

        Raises DuplicateEmailError if the email (any case) is already taken.
        Nothing is written in that case.
        """
        created_at = user.created_at or _now_iso()
        try:
            with self.engine.connect() as conn:
                conn.execute(
                    _users.insert().values(
                        id=user.id,
                        display_name=user.display_name,
                        email=user.email,
                        email_normalized=normalize_email(user.email),
                        password_hash=user.credential.hash,
                        password_salt=user.credential.salt,
                        created_at=created_at,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise DuplicateEmailError(user.email) from exc
        user.created_at = created_at
        logger.info("Inserted user %s", user.id)

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        identity=Identity(id=row.id, email=row.email, display_name=row.display_name),
        credential=Credential(hash=bytes(row.password_hash), salt=bytes(row.password_salt)),
        created_at=row.created_at,
    )
