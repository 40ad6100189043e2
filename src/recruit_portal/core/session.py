"""Session store holding the authenticated identity and bearer token."""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from recruit_portal.core.models import User
from recruit_portal.utils.logging import get_logger

logger = get_logger(__name__)

USER_KEY = "user"
TOKEN_KEY = "accessToken"


class SessionStorage(ABC):
    """Durable key/value storage for session entries."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...


class MemorySessionStorage(SessionStorage):
    """Storage kept in process memory, for tests and one-shot scripts."""

    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class FileSessionStorage(SessionStorage):
    """
    Storage backed by a single JSON document on disk.

    The document maps entry names to string values. An unreadable document
    is treated as empty and rewritten on the next change.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()
        self.logger = logger.bind(component="session_storage", path=str(self.path))

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self.logger.warning("Session file unreadable, ignoring", error=str(e))
            return {}
        if not isinstance(data, dict):
            self.logger.warning("Session file has unexpected shape, ignoring")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(items, indent=2), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read()
        if key in items:
            del items[key]
            self._write(items)


@dataclass(frozen=True)
class Session:
    """Identity and credential pair."""
    user: User
    token: str


class SessionStore:
    """
    Holds at most one identity + credential pair.

    The store is created explicitly and injected into the components that
    need it. ``init`` restores a persisted pair (or stays logged out) and
    ``teardown`` clears it.
    """

    def __init__(self, storage: SessionStorage):
        self.storage = storage
        self.logger = logger.bind(component="session_store")
        self._session: Optional[Session] = None
        self._initialized = False

    def init(self) -> Optional[Session]:
        """
        Restore a previously persisted session.

        A stored identity that cannot be parsed is discarded and the store
        stays logged out.

        Returns:
            The restored session, or None when logged out
        """
        self._initialized = True
        self._session = None

        raw_user = self.storage.get_item(USER_KEY)
        token = self.storage.get_item(TOKEN_KEY)

        if not raw_user or not token:
            self.logger.debug("No persisted session")
            return None

        try:
            user = User.model_validate(json.loads(raw_user))
        except (ValueError, TypeError, PydanticValidationError) as e:
            self.logger.warning(
                "Discarding corrupted session identity",
                error=str(e),
                error_type=type(e).__name__
            )
            self.storage.remove_item(USER_KEY)
            return None

        self._session = Session(user=user, token=token)
        self.logger.info("Session restored", user_id=user.id, role=user.role.value)
        return self._session

    def login(self, user: User, token: str) -> Session:
        """Replace any current pair and persist the new one."""
        self._session = Session(user=user, token=token)
        self.storage.set_item(USER_KEY, json.dumps(user.model_dump(mode="json")))
        self.storage.set_item(TOKEN_KEY, token)
        self.logger.info("Logged in", user_id=user.id, role=user.role.value)
        return self._session

    def logout(self) -> None:
        """Clear both the in-memory and the durable copies."""
        self._session = None
        self.storage.remove_item(USER_KEY)
        self.storage.remove_item(TOKEN_KEY)
        self.logger.info("Logged out")

    def teardown(self) -> None:
        """End of the store lifecycle."""
        self.logout()
        self._initialized = False

    @property
    def current(self) -> Optional[Session]:
        return self._session

    @property
    def user(self) -> Optional[User]:
        return self._session.user if self._session else None

    @property
    def token(self) -> Optional[str]:
        return self._session.token if self._session else None

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def initialized(self) -> bool:
        return self._initialized
