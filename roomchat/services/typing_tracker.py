# roomchat/services/typing_tracker.py

from __future__ import annotations

from typing import Dict, List

# ============================================================================
# TYPING TRACKER
# ============================================================================

class TypingTracker:
    """
    Per-room ordered set of usernames currently composing a message.

    There are no timers here. Clients are expected to send ``stop_typing``
    after a quiet period; a client that never does stays marked as typing
    until it stops, switches room or disconnects.
    """

    def __init__(self) -> None:
        # room -> {username: None}; dict keeps start order
        self.typing: Dict[str, Dict[str, None]] = {}

    def ensure_room(self, room: str) -> None:
        self.typing.setdefault(room, {})

    def start_typing(self, room: str, username: str) -> bool:
        """Mark a user as typing. Returns True if the set changed."""
        users = self.typing.setdefault(room, {})
        if username in users:
            return False
        users[username] = None
        return True

    def stop_typing(self, room: str, username: str) -> bool:
        """Clear a user's typing mark. Returns True if the set changed."""
        users = self.typing.get(room)
        if not users or username not in users:
            return False
        del users[username]
        return True

    def purge(self, room: str, username: str) -> bool:
        """Forced removal on disconnect or room switch."""
        return self.stop_typing(room, username)

    def current(self, room: str) -> List[str]:
        return list(self.typing.get(room, ()))
