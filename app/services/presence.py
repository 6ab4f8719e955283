import logging
import threading
from collections import Counter
from datetime import UTC, datetime

from pydantic import UUID4

from app.repositories.base import UserStore

logger = logging.getLogger(__name__)


class PresenceService:
    """Tracks which users have a live connection to this process.

    A user can hold several connections at once; they go offline when the
    last one closes. Counts are kept in memory, so presence across several
    processes is not coordinated.
    """

    def __init__(self, database, users: UserStore) -> None:
        self.database = database
        self.users = users
        self._connections: Counter[UUID4] = Counter()
        self._lock = threading.Lock()

    def is_connected(self, user_id: UUID4) -> bool:
        with self._lock:
            return self._connections[user_id] > 0

    async def connect(self, user_id: UUID4) -> None:
        with self._lock:
            self._connections[user_id] += 1
            first = self._connections[user_id] == 1
        if first:
            self.database.execute_write(self.users.set_presence, user_id, True, None)
            logger.debug("User %s is online", user_id)

    async def disconnect(self, user_id: UUID4) -> None:
        """Close one connection, marking the user offline if it was the last."""
        with self._lock:
            if self._connections[user_id] == 0:
                return
            self._connections[user_id] -= 1
            last = self._connections[user_id] == 0
            if last:
                del self._connections[user_id]
        if last:
            self.database.execute_write(
                self.users.set_presence, user_id, False, datetime.now(UTC)
            )
            logger.debug("User %s is offline", user_id)
