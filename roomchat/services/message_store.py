# roomchat/services/message_store.py

from __future__ import annotations

from typing import Dict, List, Optional
import logging

from roomchat.models.models import Message

logger = logging.getLogger(__name__)

# ============================================================================
# MESSAGE STORE
# ============================================================================

class MessageStore:
    """
    Append-only, in-memory message log per room.

    The set of keys in ``logs`` is also the authoritative list of rooms known
    to the hub, in creation order (configured defaults first, then rooms named
    by clients on first use).

    Data Structures:
        logs: Maps room name -> ordered list of Message
              Example: {"general": [Message(...), Message(...)], "random": []}

    Resource model:
        Logs grow without bound for the lifetime of the process. There is no
        eviction and no size cap; sizing the host is an operator concern.
    """

    def __init__(self) -> None:
        self.logs: Dict[str, List[Message]] = {}

    def ensure_room(self, room: str) -> None:
        if room not in self.logs:
            self.logs[room] = []
            logger.info("✓ Created room log '%s'", room)

    def append(self, room: str, message: Message) -> None:
        """Append a message, creating the room's log if it does not exist."""
        self.ensure_room(room)
        self.logs[room].append(message)

    def history(self, room: str) -> List[Message]:
        """Return a copy of the room's messages; empty for unknown rooms."""
        return list(self.logs.get(room, ()))

    def rooms(self) -> List[str]:
        return list(self.logs)

    def count(self, room: Optional[str] = None) -> int:
        if room is not None:
            return len(self.logs.get(room, ()))
        return sum(len(log) for log in self.logs.values())

    def __contains__(self, room: str) -> bool:
        return room in self.logs
