"""JSON-file backed storage for the user collection."""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from users_api.core.ids import IdAllocator, LengthIdAllocator

logger = logging.getLogger(__name__)

User = Dict[str, Any]


def _id_matches(user: Any, user_id: Any) -> bool:
    # Only numeric ids compare; a string "2" or a boolean never equals 2.
    if not isinstance(user, dict):
        return False
    stored = user.get("id")
    if isinstance(stored, bool) or not isinstance(stored, (int, float)):
        return False
    return stored == user_id


class StorageError(Exception):
    """Base class for failures reading or persisting the collection."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class StorageReadError(StorageError):
    """The backing file is missing, unreadable, or not a JSON array."""


class StorageWriteError(StorageError):
    """The collection could not be written back to disk."""


class UserStore(ABC):
    """
    Abstract access to the user collection.

    Handlers depend on this interface only, so the JSON file can be swapped
    for another backend without touching request handling.
    """

    @abstractmethod
    async def list(self) -> List[User]:
        """Return the full collection in stored order."""

    @abstractmethod
    async def get_by_id(self, user_id: Any) -> Optional[User]:
        """Return the first user whose id equals ``user_id``, or None."""

    @abstractmethod
    async def create(self, attributes: Dict[str, Any]) -> User:
        """Assign an id to ``attributes``, persist the record and return it."""


class JsonFileUserStore(UserStore):
    """
    Stores the collection as a single JSON array in one file.

    Every call re-reads the file; nothing is cached between requests.
    Creates are serialised by a lock owned by the store, which keeps id
    allocation consistent within one process. Separate processes sharing
    the same file are not coordinated.
    """

    def __init__(self, path: str, id_allocator: Optional[IdAllocator] = None):
        """
        Initialize the store.

        Args:
            path: Location of the JSON file holding the collection
            id_allocator: Strategy for new ids (default: collection length + 1)
        """
        self.path = Path(path)
        self.id_allocator = id_allocator or LengthIdAllocator()
        self._create_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Blocking primitives
    # ------------------------------------------------------------------

    def ensure_exists(self) -> bool:
        """
        Create an empty collection file if none exists.

        Returns:
            True if a new file was created
        """
        if self.path.exists():
            return False
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._dump([])
        except OSError as e:
            raise StorageWriteError(f"Cannot create {self.path}: {e}", str(self.path)) from e
        logger.info(f"Created empty user collection at {self.path}")
        return True

    def read_users(self) -> List[User]:
        """
        Load and parse the whole collection.

        Raises:
            StorageReadError: If the file is missing, unreadable, or not a JSON array
        """
        try:
            with open(self.path, encoding="utf-8") as f:
                users = json.load(f)
        except FileNotFoundError as e:
            raise StorageReadError(f"User file not found: {self.path}", str(self.path)) from e
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Cannot read {self.path}: {e}", str(self.path)) from e
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Invalid JSON in {self.path}: {e}", str(self.path)) from e

        if not isinstance(users, list):
            raise StorageReadError(
                f"Expected a JSON array in {self.path}, got {type(users).__name__}",
                str(self.path)
            )
        return users

    def write_users(self, new_user: User) -> None:
        """
        Append ``new_user`` to the stored collection and rewrite the file.

        Raises:
            StorageReadError: If the current collection cannot be loaded
            StorageWriteError: If the updated collection cannot be written
        """
        users = self.read_users()
        users.append(new_user)
        try:
            self._dump(users)
        except (OSError, TypeError, ValueError) as e:
            raise StorageWriteError(f"Cannot write {self.path}: {e}", str(self.path)) from e

    def create_user(self, attributes: Dict[str, Any]) -> User:
        """Blocking read-allocate-write sequence behind ``create``."""
        with self._create_lock:
            users = self.read_users()
            new_id = self.id_allocator.next_id(users)
            new_user = {"id": new_id}
            new_user.update((k, v) for k, v in attributes.items() if k != "id")
            self.write_users(new_user)
        logger.info(f"Created user {new_id} in {self.path}")
        return new_user

    def _dump(self, users: List[User]) -> None:
        # Replace the target in one step so readers never see a partial file.
        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(users, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    # ------------------------------------------------------------------
    # UserStore interface
    # ------------------------------------------------------------------

    async def list(self) -> List[User]:
        return await run_in_threadpool(self.read_users)

    async def get_by_id(self, user_id: Any) -> Optional[User]:
        users = await self.list()
        if user_id is None:
            return None
        return next((u for u in users if _id_matches(u, user_id)), None)

    async def create(self, attributes: Dict[str, Any]) -> User:
        return await run_in_threadpool(self.create_user, attributes)
