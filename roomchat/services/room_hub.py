# roomchat/services/room_hub.py

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Protocol
import logging

from pydantic import BaseModel

from roomchat.models.events import (
    AvailableRooms,
    InboundEvent,
    InitialMessages,
    JoinRoom,
    NewMessageInRoom,
    OnlineUsersUpdate,
    ReceiveMessage,
    SendMessage,
    StopTyping,
    Typing,
    UserJoinedNotification,
    UserLeftNotification,
    UserTypingUpdate,
)
from roomchat.models.models import HubSnapshot, Message, RoomSummary
from roomchat.services.message_store import MessageStore
from roomchat.services.presence_registry import Binding, PresenceRegistry
from roomchat.services.typing_tracker import TypingTracker

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    ANONYMOUS = "anonymous"
    JOINED = "joined"
    CLOSED = "closed"


class Gateway(Protocol):
    """Transport side of the hub: queues one outbound event for one connection."""

    def deliver(self, connection_id: str, event: BaseModel) -> None: ...


# ============================================================================
# ROOM HUB
# ============================================================================

class RoomHub:
    """
    Coordinates room membership, message history and typing state.

    The hub is the only writer of the presence registry, the message store
    and the typing tracker it is constructed with, and the only emitter of
    outbound events. Every operation is synchronous: all state changes and
    all ``gateway.deliver`` calls for one inbound event complete before the
    next event is handled, which is what keeps the join/leave/notify
    sequences consistent on a single event loop without locks.

    Connection lifecycle:
        connect()           -> anonymous
        join_room()         -> joined(room)   (re-entrant, switches rooms)
        disconnect()        -> closed         (terminal)

    Events from closed or unknown connections are dropped. Message and
    typing events must come from a joined connection and match its binding;
    anything else is dropped without telling the sender.
    """

    def __init__(
        self,
        presence: PresenceRegistry,
        messages: MessageStore,
        typing: TypingTracker,
        gateway: Gateway,
        default_rooms: Iterable[str] = (),
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.presence = presence
        self.messages = messages
        self.typing_tracker = typing
        self.gateway = gateway
        self.clock = clock

        # Ordered set of open connection ids (anonymous or joined)
        self.live: Dict[str, None] = {}

        self._handlers: Dict[type, Callable] = {
            JoinRoom: lambda cid, e: self.join_room(cid, e.username, e.room),
            SendMessage: lambda cid, e: self.send_message(cid, e.username, e.message, e.room),
            Typing: lambda cid, e: self.typing(cid, e.username, e.room),
            StopTyping: lambda cid, e: self.stop_typing(cid, e.username, e.room),
        }

        for room in default_rooms:
            self.ensure_room(room)

    # ------------------------------------------------------------------
    # Rooms
    # ------------------------------------------------------------------

    def ensure_room(self, room: str) -> None:
        self.messages.ensure_room(room)
        self.typing_tracker.ensure_room(room)

    def available_rooms(self) -> List[str]:
        return self.messages.rooms()

    def history(self, room: str) -> List[Message]:
        return self.messages.history(room)

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def connect(self, connection_id: str) -> None:
        """Register a new transport session and send it the room list."""
        if connection_id in self.live:
            logger.warning("Ignoring duplicate connect for %s", connection_id)
            return
        self.live[connection_id] = None
        logger.info("✓ Connection %s opened. Total: %d", connection_id, len(self.live))
        self._send(connection_id, AvailableRooms(rooms=self.available_rooms()))

    def disconnect(self, connection_id: str) -> None:
        """
        Tear down a connection.

        Cleanup:
            1. Remove its binding from the presence registry
            2. Purge its typing mark in the room it was bound to
            3. Notify that room (left notification, presence, typing)
            4. Forget the connection id

        Nothing about the connection is kept afterwards; the transport never
        reuses an id, so any later event from it is simply unknown.
        """
        if connection_id not in self.live:
            return
        del self.live[connection_id]

        binding = self.presence.unbind(connection_id)
        if binding is not None:
            self._announce_leave(binding)
        logger.info(
            "✗ Connection %s closed (user: %s). Total: %d",
            connection_id,
            binding.username if binding else "N/A",
            len(self.live),
        )

    def state_of(self, connection_id: str) -> ConnectionState:
        """Any id that is not live (disconnected or never seen) reads as closed."""
        if connection_id not in self.live:
            return ConnectionState.CLOSED
        if connection_id in self.presence:
            return ConnectionState.JOINED
        return ConnectionState.ANONYMOUS

    # ------------------------------------------------------------------
    # Inbound dispatch
    # ------------------------------------------------------------------

    def handle(self, connection_id: str, event: InboundEvent) -> None:
        """
        Apply one decoded inbound event.

        Never raises: a failure while applying one event is logged and the
        hub keeps serving every other connection and room.
        """
        if connection_id not in self.live:
            logger.debug("Dropped %s from closed/unknown connection %s", type(event).__name__, connection_id)
            return

        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning("No handler for event %r", event)
            return

        try:
            handler(connection_id, event)
        except Exception as e:
            logger.exception("Error handling %s from %s: %s", type(event).__name__, connection_id, e)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def join_room(self, connection_id: str, username: str, room: str) -> None:
        """
        Bind a connection to (username, room).

        Process:
            1. If switching away from another room, leave it and notify it
            2. Ensure the target room exists
            3. Bind the connection (replacing any prior binding)
            4. Send the room's full history to the joiner
            5. Send the updated presence list to the whole room
            6. On a genuine room change, tell the others someone joined

        Re-joining the current room is a refresh: steps 4-5 run again but
        no join/leave notifications are sent.
        """
        if connection_id not in self.live:
            return

        previous = self.presence.binding(connection_id)
        room_changed = previous is None or previous.room != room

        if previous is not None and room_changed:
            self.presence.unbind(connection_id)
            logger.info("← %s left '%s'", previous.username, previous.room)
            self._announce_leave(previous)
        elif previous is not None and previous.username != username:
            # Same room under a new name: drop the old name's typing mark
            if not self._held_elsewhere(previous, exclude=connection_id):
                if self.typing_tracker.purge(room, previous.username):
                    self._broadcast_typing(room, exclude=connection_id)

        self.ensure_room(room)
        self.presence.bind(connection_id, username, room)
        logger.info("→ %s joined '%s' (%d members)", username, room, len(self.presence.connections_in_room(room)))

        self._send(connection_id, InitialMessages(room=room, messages=self.messages.history(room)))
        self._broadcast_presence(room)

        if room_changed:
            self._broadcast(
                room,
                UserJoinedNotification(username=username, room=room),
                exclude=connection_id,
            )

    def send_message(self, connection_id: str, username: str, body: str, room: str) -> None:
        """
        Append a message to a room and fan it out.

        Every connection in the room (sender included) gets the full message.
        Every other live connection, whatever room it is in, gets a
        ``new_message_in_room`` signal carrying only the room name.
        """
        if not body or not body.strip():
            logger.debug("Ignored blank message from %s", connection_id)
            return
        if not self._is_bound_to(connection_id, username, room):
            return

        message = Message(
            username=username,
            message=body,
            room=room,
            timestamp=self.clock().strftime("%H:%M"),
            connection_id=connection_id,
        )
        self.messages.append(room, message)
        logger.info("✉ Message from %s in '%s' (%d chars)", username, room, len(body))

        self._broadcast(room, ReceiveMessage.of(message))

        signal = NewMessageInRoom(room=room)
        for cid in list(self.live):
            if cid != connection_id:
                self._send(cid, signal)

    def typing(self, connection_id: str, username: str, room: str) -> None:
        if not self._is_bound_to(connection_id, username, room):
            return
        self.typing_tracker.start_typing(room, username)
        self._broadcast_typing(room, exclude=connection_id)

    def stop_typing(self, connection_id: str, username: str, room: str) -> None:
        if not self._is_bound_to(connection_id, username, room):
            return
        self.typing_tracker.stop_typing(room, username)
        self._broadcast_typing(room, exclude=connection_id)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def room_summary(self, room: str) -> Optional[RoomSummary]:
        if room not in self.messages:
            return None
        return RoomSummary(
            name=room,
            members=self.presence.users_in_room(room),
            typing=self.typing_tracker.current(room),
            message_count=self.messages.count(room),
        )

    def snapshot(self) -> HubSnapshot:
        """Consistent point-in-time view for health, metrics and REST readers."""
        return HubSnapshot(
            connections=len(self.live),
            joined_connections=len(self.presence),
            total_messages=self.messages.count(),
            rooms=[self.room_summary(room) for room in self.messages.rooms()],
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_bound_to(self, connection_id: str, username: str, room: str) -> bool:
        if connection_id not in self.live:
            return False
        binding = self.presence.binding(connection_id)
        if binding is None:
            logger.debug("Dropped event from unbound connection %s", connection_id)
            return False
        if binding != Binding(username, room):
            logger.warning(
                "Dropped event for %s/%s from %s bound to %s/%s",
                username, room, connection_id, binding.username, binding.room,
            )
            return False
        return True

    def _held_elsewhere(self, binding: Binding, exclude: Optional[str] = None) -> bool:
        """True if another connection is still bound to the same (username, room)."""
        return any(
            cid != exclude and self.presence.binding(cid) == binding
            for cid in self.presence.connections_in_room(binding.room)
        )

    def _announce_leave(self, binding: Binding) -> None:
        """Notify a room that a (now unbound) connection has left it."""
        room = binding.room
        purged = False
        if not self._held_elsewhere(binding):
            purged = self.typing_tracker.purge(room, binding.username)
        self._broadcast(room, UserLeftNotification(username=binding.username, room=room))
        self._broadcast_presence(room)
        if purged:
            self._broadcast_typing(room)

    def _broadcast_presence(self, room: str) -> None:
        self._broadcast(room, OnlineUsersUpdate(room=room, users=self.presence.users_in_room(room)))

    def _broadcast_typing(self, room: str, exclude: Optional[str] = None) -> None:
        self._broadcast(
            room,
            UserTypingUpdate(room=room, users=self.typing_tracker.current(room)),
            exclude=exclude,
        )

    def _broadcast(self, room: str, event: BaseModel, exclude: Optional[str] = None) -> None:
        for cid in self.presence.connections_in_room(room):
            if cid != exclude:
                self._send(cid, event)

    def _send(self, connection_id: str, event: BaseModel) -> None:
        try:
            self.gateway.deliver(connection_id, event)
        except Exception as e:
            logger.error("Delivery of %s to %s failed: %s", type(event).__name__, connection_id, e)
