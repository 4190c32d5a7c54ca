import threading
from typing import Dict, List, Optional, Tuple

from snakeladder.errors import DuplicateRoom, RoomNotFound
from snakeladder.models import Player, generate_room_code
from .session import GameRoom


class RoomRegistry:
    """Live rooms for one application plus the connection -> seat bindings.

    A connection is bound to at most one room. Handlers consult the binding
    instead of the transport's room membership to find where an action goes.
    """

    def __init__(self, min_players: int = 2, rng=None):
        self.min_players = min_players
        self.rng = rng
        self._lock = threading.RLock()
        self._rooms: Dict[str, GameRoom] = {}
        self._bindings: Dict[str, Tuple[str, str]] = {}

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, room_id):
        return room_id in self._rooms

    # ---- Rooms ----

    def create(self, room_id: Optional[str], creator_conn: str, creator_name: str) -> GameRoom:
        with self._lock:
            if not room_id:
                room_id = generate_room_code(self._rooms)
            if room_id in self._rooms:
                raise DuplicateRoom()
            room = GameRoom(room_id, min_players=self.min_players, rng=self.rng)
            room.add_player(creator_conn, creator_name)
            self._rooms[room_id] = room
            self._bindings[creator_conn] = (room_id, creator_conn)
            return room

    def get(self, room_id: str) -> Optional[GameRoom]:
        with self._lock:
            return self._rooms.get(room_id)

    def require(self, room_id: str) -> GameRoom:
        room = self.get(room_id)
        if room is None:
            raise RoomNotFound()
        return room

    def remove(self, room_id: str) -> Optional[GameRoom]:
        with self._lock:
            room = self._rooms.pop(room_id, None)
            for conn_id, (bound_room, _) in list(self._bindings.items()):
                if bound_room == room_id:
                    del self._bindings[conn_id]
            return room

    def remove_if_empty(self, room: GameRoom) -> bool:
        with self._lock:
            if room.is_empty() and self._rooms.get(room.id) is room:
                self.remove(room.id)
                return True
            return False

    def rooms(self) -> List[GameRoom]:
        with self._lock:
            return list(self._rooms.values())

    # ---- Connection bindings ----

    def bind(self, conn_id: str, room_id: str, player_id: str) -> None:
        with self._lock:
            self._bindings[conn_id] = (room_id, player_id)

    def unbind(self, conn_id: str) -> Optional[Tuple[str, str]]:
        with self._lock:
            return self._bindings.pop(conn_id, None)

    def lookup(self, conn_id: str) -> Optional[Tuple[str, str]]:
        with self._lock:
            return self._bindings.get(conn_id)

    def connections_for(self, room_id: str, player_id: str) -> List[str]:
        with self._lock:
            return [c for c, binding in self._bindings.items() if binding == (room_id, player_id)]

    def find_by_token(self, room_id: str, token) -> Tuple[GameRoom, Player]:
        """Return the room and the seat holding ``token``."""
        room = self.require(room_id)
        with room.lock:
            return room, room.find_by_token(token)
