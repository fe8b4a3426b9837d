"""
Local Accounts and Session

Registers users, checks credentials locally and keeps the current session.
The expense core never reads this module's state directly: callers ask
`current_user_identity()` and pass the result to ExpenseStore.

NOTE: This is a local convenience check, not security. The credential
digest is unsalted and lives next to the data it guards.
"""

import hashlib
import json
import re
from typing import Optional
from uuid import uuid4

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from finance_tracker.audit import AuditLogger
from finance_tracker.models.account import AccountResult, Session, User
from finance_tracker.models.audit import AuditEvent, AuditEventBuilder
from finance_tracker.services.storage import KeyValueStore, StorageError


USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
MIN_USERNAME_LENGTH = 3
MAX_USERNAME_LENGTH = 20
MIN_PASSWORD_LENGTH = 6

_USER_LIST = TypeAdapter(list[User])


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def validate_username(username: Optional[str]) -> Optional[str]:
    """Return the reason a username is unacceptable, or None if it is fine."""
    if not username or not username.strip():
        return "Username is required"
    if len(username) < MIN_USERNAME_LENGTH:
        return f"Username must be at least {MIN_USERNAME_LENGTH} characters"
    if len(username) > MAX_USERNAME_LENGTH:
        return f"Username must be less than {MAX_USERNAME_LENGTH} characters"
    if not USERNAME_PATTERN.match(username):
        return "Username can only contain letters, numbers, and underscores"
    return None


def validate_password(password: Optional[str]) -> Optional[str]:
    """Return the reason a password is unacceptable, or None if it is fine."""
    if not password:
        return "Password is required"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


class AccountService:
    """
    User registry and session, kept in the same KeyValueStore as the
    expense collections under two fixed keys.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        users_key: str = "financeTracker_users",
        session_key: str = "financeTracker_session",
        max_users: int = 10,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._users_key = users_key
        self._session_key = session_key
        self._max_users = max_users
        self._audit_logger = audit_logger

    def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    # =========================================================================
    # USER REGISTRY
    # =========================================================================

    def list_users(self) -> list[User]:
        """
        All registered users.

        Raises:
            StorageError: If the stored registry is corrupt
        """
        raw = self._storage.get(self._users_key)
        if raw is None or not raw.strip():
            return []
        try:
            return _USER_LIST.validate_python(json.loads(raw))
        except (ValueError, PydanticValidationError) as e:
            raise StorageError(f"Stored users are corrupt: {e}")

    def _save_users(self, users: list[User]) -> None:
        self._storage.set(
            self._users_key,
            json.dumps([u.model_dump(mode="json", by_alias=True) for u in users]),
        )

    def get_user(self, user_id: str) -> Optional[User]:
        for user in self.list_users():
            if user.id == user_id:
                return user
        return None

    def _find_by_username(self, users: list[User], username: str) -> Optional[User]:
        wanted = username.lower()
        for user in users:
            if user.username.lower() == wanted:
                return user
        return None

    def register(self, username: str, password: str) -> AccountResult:
        """Create an account. Usernames are unique regardless of case."""
        username = (username or "").strip()
        try:
            users = self.list_users()

            if len(users) >= self._max_users:
                return AccountResult(
                    success=False,
                    message=f"Maximum of {self._max_users} users reached",
                )

            problem = validate_username(username) or validate_password(password)
            if problem:
                return AccountResult(success=False, message=problem)

            if self._find_by_username(users, username):
                return AccountResult(success=False, message="Username already exists")

            user = User(
                id=uuid4().hex,
                username=username,
                password_hash=hash_password(password),
            )
            users.append(user)
            self._save_users(users)
        except StorageError as e:
            self._audit(AuditEventBuilder.storage_error(None, "register", str(e)))
            return AccountResult(success=False, message=f"Storage error: {e}")

        self._audit(AuditEventBuilder.user_registered(user.id, user.username))
        return AccountResult(success=True, message="Account created successfully!")

    # =========================================================================
    # SESSION
    # =========================================================================

    def login(self, username: str, password: str) -> AccountResult:
        """Check credentials and start a session."""
        username = (username or "").strip()
        problem = validate_username(username) or validate_password(password)
        if problem:
            return AccountResult(success=False, message=problem)

        try:
            user = self._find_by_username(self.list_users(), username)
            if user is None or user.password_hash != hash_password(password):
                self._audit(AuditEventBuilder.login_failed(
                    username, "Invalid username or password"
                ))
                return AccountResult(
                    success=False,
                    message="Invalid username or password",
                )

            session = Session(user_id=user.id, username=user.username)
            self._storage.set(
                self._session_key,
                session.model_dump_json(by_alias=True),
            )
        except StorageError as e:
            self._audit(AuditEventBuilder.storage_error(None, "login", str(e)))
            return AccountResult(success=False, message=f"Storage error: {e}")

        self._audit(AuditEventBuilder.user_logged_in(user.id, user.username))
        return AccountResult(success=True, message="Login successful!", session=session)

    def logout(self) -> None:
        session = self.current_session()
        self._storage.remove(self._session_key)
        self._audit(AuditEventBuilder.user_logged_out(
            session.user_id if session else None
        ))

    def current_session(self) -> Optional[Session]:
        """
        The active session, or None when nobody is logged in.

        Raises:
            StorageError: If the stored session is corrupt
        """
        raw = self._storage.get(self._session_key)
        if raw is None or not raw.strip():
            return None
        try:
            return Session.model_validate_json(raw)
        except PydanticValidationError as e:
            raise StorageError(f"Stored session is corrupt: {e}")

    def current_user_identity(self) -> Optional[str]:
        """The logged-in user's id; this is what ExpenseStore keys data by."""
        session = self.current_session()
        return session.user_id if session else None

    def is_authenticated(self) -> bool:
        return self.current_session() is not None
