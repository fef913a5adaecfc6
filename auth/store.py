"""
auth/store.py -- SQLAlchemy Core persistence layer for user identities.

Pattern: Repository + Data Mapper (same as catalog/store.py).
UserStore is the repository; _row_to_user is the mapper. Route and session
code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(email) is the authoritative guard against duplicate accounts. The
  application-level check in SessionManager.sign_up() has a race window
  between check and insert; the index closes it and the caller maps the
  resulting IntegrityError to a Conflict.

  Emails are lowercased on every write and every probe, so uniqueness and
  lookups are case-insensitive without a COLLATE clause.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine

from auth.models import User
from core.ids import new_id

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(32), primary_key=True),
    Column("full_name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),  # always lowercase
    Column("password_hash", Text, nullable=False),
    Column("is_active", Integer, nullable=False, server_default="0"),
    Column("token_hash", String(64), index=True),  # HMAC-SHA256 hex of the live token
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

# Fields update_user() accepts. Anything else is a programming error.
_MUTABLE_FIELDS = {"full_name", "email", "password_hash", "is_active", "token_hash"}


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore("sqlite:///shopfront.db")
        user_id = store.create_user(User(full_name="A", email="a@x.com", password_hash=h))
        user = store.get_by_email("A@X.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> str:
        """Insert a new user and return its generated id.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        """
        user_id = new_id()
        now = _now_iso()
        with self.engine.connect() as conn:
            conn.execute(
                _users.insert().values(
                    id=user_id,
                    full_name=user.full_name,
                    email=user.email.lower(),
                    password_hash=user.password_hash,
                    is_active=1 if user.is_active else 0,
                    token_hash=user.token_hash,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
        return user_id

    def get_by_id(self, user_id: str) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by email, ignoring case. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email.lower())).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all users, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_users.select().order_by(_users.c.created_at, _users.c.id)).fetchall()
        return [_row_to_user(r) for r in rows]

    def update_user(self, user_id: str, **fields) -> bool:
        """Update mutable fields on an existing user.

        Accepted fields: full_name, email, password_hash, is_active, token_hash.
        Returns True if a row was updated, False if user_id was not found.
        Raises IntegrityError if a new email collides with another account.
        """
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {unknown!r}")
        if "is_active" in fields:
            fields["is_active"] = 1 if fields["is_active"] else 0
        if fields.get("email"):
            fields["email"] = fields["email"].lower()
        fields["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(_users.update().where(_users.c.id == user_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def start_session(self, user_id: str, token_hash: str) -> bool:
        """Record token_hash as the user's live session and mark the user active.

        Replaces any previous session hash -- one live session per user.
        """
        return self.update_user(user_id, token_hash=token_hash, is_active=True)

    def end_session(self, token_hash: str) -> User | None:
        """Clear the session holding token_hash and return the updated user.

        Lookup and clear run in one transaction; the WHERE clause repeats the
        hash so a concurrent re-login between the two statements is not wiped.
        Returns None if no user holds that hash.
        """
        with self.engine.begin() as conn:
            row = conn.execute(_users.select().where(_users.c.token_hash == token_hash)).fetchone()
            if row is None:
                return None
            result = conn.execute(
                _users.update()
                .where((_users.c.id == row.id) & (_users.c.token_hash == token_hash))
                .values(token_hash=None, is_active=0, updated_at=_now_iso())
            )
            if result.rowcount == 0:
                return None
            updated = conn.execute(_users.select().where(_users.c.id == row.id)).fetchone()
        return _row_to_user(updated)

    def delete_user(self, user_id: str) -> bool:
        """Permanently delete a user record. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_users.delete().where(_users.c.id == user_id))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        full_name=row.full_name,
        email=row.email,
        password_hash=row.password_hash,
        is_active=bool(row.is_active),
        token_hash=row.token_hash,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
