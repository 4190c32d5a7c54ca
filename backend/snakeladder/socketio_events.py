import functools
import time
from typing import Optional, Tuple

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from snakeladder import get_registry, socketio
from snakeladder.errors import (
    DuplicateRoom,
    GameError,
    InvalidRequest,
    NotInGame,
    RoomNotFound,
)

MAX_NAME_LENGTH = 32


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _registry():
    return get_registry(current_app)


def _namespace() -> str:
    return current_app.config.get('SOCKETIO_NAMESPACE', '/')


def _player_name(data) -> str:
    name = str(data.get('playerName') or '').strip()
    if not name:
        raise InvalidRequest('playerName is required')
    return name[:MAX_NAME_LENGTH]


def _room_id(data, required=True) -> Optional[str]:
    # Older clients send gameId
    room_id = str(data.get('roomId') or data.get('gameId') or '').strip()
    if not room_id and required:
        raise InvalidRequest('roomId is required')
    return room_id or None


def _current_seat(sid: str):
    binding = _registry().lookup(sid)
    if not binding:
        raise NotInGame()
    room = _registry().get(binding[0])
    if room is None:
        raise NotInGame()
    return room, binding[1]


def _broadcast_state(room) -> None:
    socketio.emit('gameState', room.to_dict(), to=room.id, namespace=_namespace())


def _guarded(handler):
    """Report rejections to the sender and keep unexpected failures inside one action."""
    @functools.wraps(handler)
    def wrapper(*args):
        try:
            return handler(*args)
        except GameError as exc:
            current_app.logger.info(f"[rejected] sid={_get_sid()} action={handler.__name__} code={exc.code}")
            emit('gameError', exc.to_dict())
        except Exception:
            current_app.logger.exception(f"[action-failed] sid={_get_sid()} action={handler.__name__}")
            emit('error', {'message': 'Internal server error'})
    return wrapper


# ---- Seat lifecycle helpers ----

def _remove_seat(room_id: str, player_id: str, verb: str = 'left') -> None:
    """Drop a player from a room, destroying the room when it empties."""
    registry = _registry()
    room = registry.get(room_id)
    if room is None:
        return
    with room.lock:
        if not room.has_player(player_id):
            return
        player = room.remove_player(player_id)
        for conn_id in registry.connections_for(room_id, player_id):
            registry.unbind(conn_id)
        current_app.logger.info(f"[player-remove] room={room_id} player={player.name} id={player.id} how={verb!r}")
        if registry.remove_if_empty(room):
            current_app.logger.info(f"[room-deleted] room={room_id} no players left")
            return
        socketio.emit('playerLeft', {
            'message': f'{player.name} {verb} the game',
            'players': [p.to_dict() for p in room.players],
            'gameState': room.to_dict(),
        }, to=room_id, namespace=_namespace())
        _broadcast_state(room)


def _leave_previous(previous: Optional[Tuple[str, str]], new_room_id: str) -> None:
    if previous and previous[0] != new_room_id:
        leave_room(previous[0])
        _remove_seat(previous[0], previous[1])


def _schedule_removal(room, player, delay_sec: int) -> None:
    deadline = time.time() + delay_sec
    player.mark_disconnected(deadline)
    app = current_app._get_current_object()
    room_id, player_id = room.id, player.id

    def _runner():
        sleep_for = max(0.0, deadline - time.time())
        if sleep_for:
            socketio.sleep(sleep_for)
        with app.app_context():
            current = get_registry(app).get(room_id)
            if current is None:
                return
            with current.lock:
                seat = current.get_player(player_id)
                if not seat or seat.connected or seat.disconnect_deadline != deadline:
                    return
                _remove_seat(room_id, player_id, verb='disconnected from')

    socketio.start_background_task(_runner)


# ---- Handlers ----

def handle_connect(auth=None):
    emit('connected', {'message': 'Connected', 'sid': _get_sid()})


def handle_disconnect(reason=None):
    sid = _get_sid()
    try:
        binding = _registry().unbind(sid)
        if not binding:
            return
        room_id, player_id = binding
        grace = int(current_app.config.get('RECONNECT_GRACE_SEC', 0))
        if grace <= 0:
            _remove_seat(room_id, player_id, verb='disconnected from')
            return
        room = _registry().get(room_id)
        if room is None:
            return
        with room.lock:
            player = room.get_player(player_id)
            if not player:
                return
            _schedule_removal(room, player, grace)
            current_app.logger.info(f"[player-away] room={room_id} player={player.name} grace={grace}s")
            _broadcast_state(room)
    except Exception:
        current_app.logger.exception(f"[disconnect-failed] sid={sid}")


def _open_room(room_id, sid, name, previous):
    room = _registry().create(room_id, sid, name)
    with room.lock:
        player = room.get_player(sid)
        join_room(room.id)
        started = room.maybe_start()
        current_app.logger.info(f"[room-create] room={room.id} player={name} sid={sid}")
        emit('gameCreated', {
            'roomId': room.id,
            'playerId': player.id,
            'reconnectToken': player.reconnect_token,
            'message': 'Game created successfully!',
        })
        if started:
            socketio.emit('gameStarted', [p.to_dict() for p in room.players], to=room.id, namespace=_namespace())
        _broadcast_state(room)
    _leave_previous(previous, room.id)
    return room


@_guarded
def handle_create_game(data=None):
    data = data or {}
    name = _player_name(data)
    room_id = _room_id(data, required=False)
    sid = _get_sid()
    _open_room(room_id, sid, name, _registry().lookup(sid))


@_guarded
def handle_join_game(data=None):
    data = data or {}
    name = _player_name(data)
    room_id = _room_id(data)
    sid = _get_sid()
    registry = _registry()
    previous = registry.lookup(sid)

    room = registry.get(room_id)
    if room is not None and _join_existing(room, sid, name, previous):
        return
    # Missing, or deleted before we got its lock
    if not current_app.config.get('JOIN_CREATES_MISSING_ROOM', True):
        raise RoomNotFound()
    try:
        _open_room(room_id, sid, name, previous)
    except DuplicateRoom:
        # Another connection opened it first
        if not _join_existing(registry.require(room_id), sid, name, previous):
            raise RoomNotFound()


def _join_existing(room, sid, name, previous) -> bool:
    """Seat the connection in a live room. Returns False if the room was already destroyed."""
    registry = _registry()
    with room.lock:
        if registry.get(room.id) is not room:
            return False
        if previous and previous[0] == room.id and room.has_player(previous[1]):
            player = room.get_player(previous[1])
        else:
            player = room.add_player(sid, name)
        registry.bind(sid, room.id, player.id)
        join_room(room.id)
        was_started = room.started
        started_now = room.maybe_start()
        current_app.logger.info(
            f"[player-join] room={room.id} player={player.name} sid={sid} count={len(room.players)} status={room.status}"
        )

        emit('joinedGame', {
            'roomId': room.id,
            'playerId': player.id,
            'reconnectToken': player.reconnect_token,
        })
        players = [p.to_dict() for p in room.players]
        socketio.emit('playerJoined', {
            'message': f'{player.name} joined the game',
            'playerCount': len(room.players),
            'players': players,
            'gameState': room.to_dict(),
        }, to=room.id, namespace=_namespace())
        if started_now:
            socketio.emit('gameStarted', players, to=room.id, namespace=_namespace())
        elif was_started:
            emit('gameStarted', players)
        _broadcast_state(room)

    _leave_previous(previous, room.id)
    return True


@_guarded
def handle_rejoin_game(data=None):
    data = data or {}
    room_id = _room_id(data)
    token = data.get('reconnectToken')
    if not token:
        raise InvalidRequest('reconnectToken is required')
    sid = _get_sid()
    registry = _registry()
    previous = registry.lookup(sid)
    room, _ = registry.find_by_token(room_id, token)

    with room.lock:
        if registry.get(room.id) is not room:
            raise RoomNotFound()
        player = room.rebind(token)
        for conn_id in registry.connections_for(room.id, player.id):
            registry.unbind(conn_id)
        registry.bind(sid, room.id, player.id)
        join_room(room.id)
        current_app.logger.info(f"[player-rejoin] room={room.id} player={player.name} sid={sid}")
        emit('rejoinedGame', {'roomId': room.id, 'playerId': player.id})
        _broadcast_state(room)

    _leave_previous(previous, room.id)


@_guarded
def handle_roll_dice(data=None):
    room, player_id = _current_seat(_get_sid())
    with room.lock:
        value = room.roll_dice(player_id)
        current_app.logger.info(f"[dice] room={room.id} player={player_id} value={value}")
        emit('diceRolled', {'value': value, 'playerId': player_id})
        _broadcast_state(room)


@_guarded
def handle_make_move(data=None):
    room, player_id = _current_seat(_get_sid())
    with room.lock:
        result = room.move(player_id)
        current_app.logger.info(
            f"[move] room={room.id} player={player_id} from={result.from_position} to={result.new_position} via={result.via}"
        )
        socketio.emit('playerMoved', result.to_dict(), to=room.id, namespace=_namespace())
        _broadcast_state(room)
        if result.won:
            current_app.logger.info(f"[game-won] room={room.id} winner={room.winner.name}")
            socketio.emit('gameWon', {'winner': room.winner.to_dict()}, to=room.id, namespace=_namespace())


@_guarded
def handle_leave_game(data=None):
    data = data or {}
    sid = _get_sid()
    registry = _registry()
    binding = registry.lookup(sid)
    room_id = _room_id(data, required=False) or (binding[0] if binding else None)
    if not binding or binding[0] != room_id:
        raise NotInGame()
    registry.unbind(sid)
    leave_room(room_id)
    emit('leftGame', {'roomId': room_id})
    _remove_seat(room_id, binding[1])


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the configured namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('createGame', handle_create_game, namespace=namespace)
    socketio.on_event('joinGame', handle_join_game, namespace=namespace)
    socketio.on_event('rejoinGame', handle_rejoin_game, namespace=namespace)
    socketio.on_event('rollDice', handle_roll_dice, namespace=namespace)
    socketio.on_event('makeMove', handle_make_move, namespace=namespace)
    socketio.on_event('leaveGame', handle_leave_game, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
