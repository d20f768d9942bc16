"""Presence tracking for joined Socket.IO connections."""

import threading
import logging
from typing import Dict, List, Optional, Set, Any
from datetime import datetime

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """Maps user ids to the socket sids they currently hold.

    A user is online while at least one sid is registered for them. All
    access goes through ``self.lock`` because Socket.IO handlers may run on
    several threads.
    """

    def __init__(self):
        self._sids_by_user: Dict[str, Set[str]] = {}
        self._user_by_sid: Dict[str, str] = {}
        self._online_since: Dict[str, datetime] = {}

        # Thread safety
        self.lock = threading.Lock()

        # Stats
        self.total_joins = 0
        self.messages_relayed = 0

    def register(self, user_id: str, sid: str) -> bool:
        """Attach a socket to a user.

        Args:
            user_id: Authenticated user id
            sid: Socket.IO session id

        Returns:
            True if this made the user go online (first live socket)
        """
        with self.lock:
            previous = self._user_by_sid.get(sid)
            if previous == user_id:
                return False
            if previous is not None:
                self._detach(previous, sid)

            sids = self._sids_by_user.setdefault(user_id, set())
            came_online = not sids
            sids.add(sid)
            self._user_by_sid[sid] = user_id
            self.total_joins += 1
            if came_online:
                self._online_since[user_id] = datetime.now()
                logger.info(f"User {user_id} is online (sid {sid})")
            return came_online

    def unregister(self, sid: str) -> Optional[str]:
        """Detach a socket.

        Returns:
            The user id if that was the user's last socket, otherwise None
        """
        with self.lock:
            user_id = self._user_by_sid.get(sid)
            if user_id is None:
                return None
            went_offline = self._detach(user_id, sid)
            if went_offline:
                logger.info(f"User {user_id} is offline")
                return user_id
            return None

    def _detach(self, user_id: str, sid: str) -> bool:
        # caller holds the lock
        self._user_by_sid.pop(sid, None)
        sids = self._sids_by_user.get(user_id)
        if sids is None:
            return False
        sids.discard(sid)
        if sids:
            return False
        del self._sids_by_user[user_id]
        self._online_since.pop(user_id, None)
        return True

    def user_for_sid(self, sid: str) -> Optional[str]:
        with self.lock:
            return self._user_by_sid.get(sid)

    def sids_for_user(self, user_id: str) -> Set[str]:
        with self.lock:
            return set(self._sids_by_user.get(user_id, ()))

    def is_online(self, user_id: str) -> bool:
        with self.lock:
            return bool(self._sids_by_user.get(user_id))

    def online_users(self) -> List[str]:
        with self.lock:
            return sorted(self._sids_by_user)

    def record_relay(self) -> None:
        with self.lock:
            self.messages_relayed += 1

    def get_stats(self) -> Dict[str, Any]:
        """Get overall presence statistics."""
        with self.lock:
            return {
                "online_users": len(self._sids_by_user),
                "open_sockets": len(self._user_by_sid),
                "total_joins": self.total_joins,
                "messages_relayed": self.messages_relayed,
            }
