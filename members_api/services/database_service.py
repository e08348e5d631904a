"""TinyDB database service"""

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List

from tinydb import TinyDB, Query
from tinydb.table import Document

from members_api.auth.passwords import hash_password, verify_password
from members_api.config import settings

logger = logging.getLogger(__name__)

MEMBER_FIELDS = ("Firstname", "Lastname", "Email", "Active")
FILTER_FIELDS = ("MemberId",) + MEMBER_FIELDS

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


class DuplicateEntryError(Exception):
    """A write would break a unique key"""

    def __init__(self, value: str, key: str):
        self.value = value
        self.key = key
        super().__init__(f"Duplicate entry '{value}' for key '{key}'")


class InvalidFilterError(ValueError):
    """A list filter names an unknown field or carries an unusable value"""


def to_bit(value) -> int:
    """Coerce a client-supplied flag (bool, int or string) to 0/1"""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int) and value in (0, 1):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return 1
    if text in FALSE_VALUES:
        return 0
    raise ValueError(f"Not a boolean value: {value!r}")


def resolve_field(name: str) -> Optional[str]:
    """Map a case-insensitive query parameter name onto a member field"""
    for field in FILTER_FIELDS:
        if field.lower() == name.lower():
            return field
    return None


class DatabaseService:
    """TinyDB database service for users and members

    Every write goes through ``self.lock`` so that uniqueness checks and the
    write that follows them happen as one step.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db: Optional[TinyDB] = None
        self._db_path = Path(db_path or settings.database_path)
        self.lock = threading.Lock()

    def _ensure_db(self):
        """Ensure database exists and is connected"""
        if self.db is None:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self.db = TinyDB(str(self._db_path))
            logger.info(f"Database connected: {self._db_path}")

    def close(self):
        if self.db is not None:
            self.db.close()
            self.db = None

    @property
    def users(self):
        """Users table"""
        self._ensure_db()
        return self.db.table("users")

    @property
    def members(self):
        """Members table"""
        self._ensure_db()
        return self.db.table("members")

    @property
    def sequences(self):
        """Id counters, so deleted ids are never handed out again"""
        self._ensure_db()
        return self.db.table("sequences")

    def _next_id(self, name: str) -> int:
        Sequence = Query()
        row = self.sequences.get(Sequence.name == name)
        value = (row["value"] if row else 0) + 1
        self.sequences.upsert({"name": name, "value": value}, Sequence.name == name)
        return value

    # =========================================================================
    # User Operations
    # =========================================================================

    def get_user_by_id(self, user_id: int) -> Optional[dict]:
        """Get user by ID"""
        User = Query()
        return self.users.get(User.id == int(user_id))

    def get_user_by_username(self, username: str) -> Optional[dict]:
        """Get user by username"""
        User = Query()
        return self.users.get(User.username == username.lower())

    def create_user(self, username: str, password: str) -> dict:
        """Create a new user with a hashed password"""
        with self.lock:
            if self.get_user_by_username(username):
                raise DuplicateEntryError(username, "username")

            user_data = {
                "id": self._next_id("users"),
                "username": username.lower(),
                "password_hash": hash_password(password),
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
            self.users.insert(user_data)

        logger.info(f"User created: {user_data['id']} ({user_data['username']})")
        return user_data

    def set_user_password(self, username: str, password: str) -> Optional[dict]:
        """Replace a user's password"""
        User = Query()
        with self.lock:
            self.users.update(
                {"password_hash": hash_password(password)},
                User.username == username.lower()
            )
        return self.get_user_by_username(username)

    def authenticate(self, username: str, password: str) -> Optional[dict]:
        """Return the user when the credentials match, None otherwise"""
        user = self.get_user_by_username(username)
        if not user:
            return None
        if not verify_password(password, user["password_hash"]):
            return None
        return user

    # =========================================================================
    # Member Operations
    # =========================================================================

    @staticmethod
    def _to_member(doc: dict) -> dict:
        """Public representation of a stored member (Active as a real bool)"""
        return {
            "MemberId": doc["MemberId"],
            "Firstname": doc.get("Firstname"),
            "Lastname": doc.get("Lastname"),
            "Email": doc.get("Email"),
            "Active": bool(doc.get("Active", 0)),
        }

    def _email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        Member = Query()
        wanted = email.lower()
        matches = self.members.search(
            Member.Email.test(lambda v: isinstance(v, str) and v.lower() == wanted)
        )
        return any(m["MemberId"] != exclude_id for m in matches)

    def _build_filter(self, filters: dict):
        Member = Query()
        condition = None

        for name, raw in filters.items():
            field = resolve_field(name)
            if field is None:
                raise InvalidFilterError(f"Unknown field '{name}'")

            if field == "MemberId":
                try:
                    expected = int(raw)
                except ValueError:
                    raise InvalidFilterError(f"Invalid value for MemberId: '{raw}'")
                clause = Member.MemberId == expected
            elif field == "Active":
                try:
                    expected = to_bit(raw)
                except ValueError:
                    raise InvalidFilterError(f"Invalid value for Active: '{raw}'")
                clause = Member.Active == expected
            else:
                wanted = str(raw).lower()
                clause = Member[field].test(
                    lambda v, wanted=wanted: isinstance(v, str) and v.lower() == wanted
                )

            condition = clause if condition is None else (condition & clause)

        return condition

    def list_members(self, filters: Optional[dict] = None) -> List[dict]:
        """List members, optionally filtered by field equality (AND-ed)"""
        condition = self._build_filter(filters or {})
        docs = self.members.all() if condition is None else self.members.search(condition)
        return [self._to_member(d) for d in sorted(docs, key=lambda d: d["MemberId"])]

    def get_member(self, member_id: int) -> Optional[dict]:
        """Get member by ID"""
        doc = self.members.get(doc_id=member_id)
        return self._to_member(doc) if doc else None

    def create_member(self, data: dict) -> dict:
        """Create a new member

        Raises DuplicateEntryError when the email is already in use.
        """
        with self.lock:
            if self._email_taken(data["Email"]):
                raise DuplicateEntryError(data["Email"], "Email")

            member_id = self._next_id("members")
            doc = {
                "MemberId": member_id,
                "Firstname": data["Firstname"],
                "Lastname": data["Lastname"],
                "Email": data["Email"],
                "Active": to_bit(data.get("Active", False)),
            }
            self.members.insert(Document(doc, doc_id=member_id))

        logger.info(f"Member created: {member_id}")
        return self._to_member(doc)

    def update_member(self, member_id: int, updates: dict) -> Optional[dict]:
        """Apply a partial update; returns None when the member does not exist"""
        changes = {k: v for k, v in updates.items() if k in MEMBER_FIELDS}
        if "Active" in changes:
            changes["Active"] = to_bit(changes["Active"])

        with self.lock:
            if not self.members.contains(doc_id=member_id):
                return None
            if "Email" in changes and self._email_taken(changes["Email"], exclude_id=member_id):
                raise DuplicateEntryError(changes["Email"], "Email")
            if changes:
                self.members.update(changes, doc_ids=[member_id])

        logger.info(f"Member updated: {member_id} ({', '.join(changes) or 'no changes'})")
        return self.get_member(member_id)

    def delete_member(self, member_id: int) -> Optional[dict]:
        """Delete a member, returning the record as it was before removal"""
        with self.lock:
            doc = self.members.get(doc_id=member_id)
            if not doc:
                return None
            snapshot = self._to_member(doc)
            self.members.remove(doc_ids=[member_id])

        logger.info(f"Member deleted: {member_id}")
        return snapshot


db_service = DatabaseService()
