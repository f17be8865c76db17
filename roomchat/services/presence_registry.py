# roomchat/services/presence_registry.py

from __future__ import annotations

from typing import Dict, List, NamedTuple, Optional, Set


class Binding(NamedTuple):
    username: str
    room: str


# ============================================================================
# PRESENCE REGISTRY
# ============================================================================

class PresenceRegistry:
    """
    Bidirectional map between live connections and (username, room).

    Data Structures:
        bindings: Maps connection_id -> Binding, in join order
                  Example: {"a1f3...": Binding("alice", "general")}

        room_members: Maps room -> set of connection_ids bound to it
                      Example: {"general": {"a1f3...", "9bc0..."}}

    Each connection is counted on its own, so a username held by two
    connections in the same room is listed twice by ``users_in_room``.
    """

    def __init__(self) -> None:
        self.bindings: Dict[str, Binding] = {}
        self.room_members: Dict[str, Set[str]] = {}

    def bind(self, connection_id: str, username: str, room: str) -> Optional[Binding]:
        """
        Record or replace the binding of a connection.

        Returns:
            The previous Binding, or None if the connection had not joined.
        """
        previous = self.unbind(connection_id)
        self.bindings[connection_id] = Binding(username, room)
        self.room_members.setdefault(room, set()).add(connection_id)
        return previous

    def unbind(self, connection_id: str) -> Optional[Binding]:
        previous = self.bindings.pop(connection_id, None)
        if previous is not None:
            members = self.room_members.get(previous.room)
            if members is not None:
                members.discard(connection_id)
                if not members:
                    del self.room_members[previous.room]
        return previous

    def binding(self, connection_id: str) -> Optional[Binding]:
        return self.bindings.get(connection_id)

    def connections_in_room(self, room: str) -> List[str]:
        """Connection ids bound to a room, in join order."""
        members = self.room_members.get(room)
        if not members:
            return []
        return [cid for cid in self.bindings if cid in members]

    def users_in_room(self, room: str) -> List[str]:
        return [self.bindings[cid].username for cid in self.connections_in_room(room)]

    def rooms_with_members(self) -> List[str]:
        return list(self.room_members)

    def __len__(self) -> int:
        return len(self.bindings)

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self.bindings
