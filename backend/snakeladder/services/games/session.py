import random
import threading
from typing import Dict, List, Optional

from snakeladder.errors import (
    DiceAlreadyRolled,
    GameClosed,
    GameNotActive,
    InvalidReconnectToken,
    NoDicePending,
    NotEnoughPlayers,
    NotInGame,
    NotYourTurn,
    RoomFull,
)
from snakeladder.models import Player
from .board import BOARD_SIZE, START_SQUARE, resolve_landing

MAX_PLAYERS = 4
DICE_FACES = 6
EXTRA_TURN_ROLL = 6

LOBBY = 'lobby'
IN_PROGRESS = 'in_progress'
FINISHED = 'finished'


class MoveResult:
    def __init__(self, player_id, from_position, landed_on, new_position, dice_value, via, won):
        self.player_id = player_id
        self.from_position = from_position
        self.landed_on = landed_on
        self.new_position = new_position
        self.dice_value = dice_value
        self.via = via
        self.won = won

    def to_dict(self):
        return {
            'playerId': self.player_id,
            'from': self.from_position,
            'landedOn': self.landed_on,
            'newPosition': self.new_position,
            'diceValue': self.dice_value,
            'via': self.via,
        }


class GameRoom:
    """Authoritative state for one Snakes & Ladders game.

    The room moves lobby -> in_progress -> finished. Every operation checks
    its preconditions before touching state, so a raised ``GameError`` leaves
    the room exactly as it was. Callers hold ``lock`` around each operation.
    """

    def __init__(self, room_id: str, min_players: int = 2, rng=None):
        self.id = room_id
        self.min_players = max(1, int(min_players))
        self.rng = rng or random.SystemRandom()
        self.lock = threading.RLock()
        self.players: List[Player] = []
        self.turn_index = 0
        self.positions: Dict[str, int] = {}
        self.dice_value: Optional[int] = None
        self.started = False
        self.ended = False
        self.winner: Optional[Player] = None

    @property
    def status(self) -> str:
        if self.ended:
            return FINISHED
        if self.started:
            return IN_PROGRESS
        return LOBBY

    @property
    def current_player(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.turn_index]

    def is_empty(self) -> bool:
        return not self.players

    def get_player(self, player_id) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def has_player(self, player_id) -> bool:
        return self.get_player(player_id) is not None

    # ---- Roster ----

    def add_player(self, player_id, name: str) -> Player:
        if self.ended:
            raise GameClosed()
        existing = self.get_player(player_id)
        if existing:
            return existing
        if len(self.players) >= MAX_PLAYERS:
            raise RoomFull()
        player = Player(player_id, name, is_creator=not self.players)
        self.players.append(player)
        self.positions[player.id] = START_SQUARE
        return player

    def remove_player(self, player_id) -> Player:
        player = self.get_player(player_id)
        if not player:
            raise NotInGame()
        before = self.current_player
        index = self.players.index(player)
        self.players.pop(index)
        # The winner keeps the final square in finished rooms
        if not (self.ended and player is self.winner):
            self.positions.pop(player.id, None)
        if index == self.turn_index or self.turn_index >= len(self.players):
            self.turn_index = 0
        # A pending roll belongs to whoever made it, never to a new turn holder
        if self.current_player is not before:
            self.dice_value = None
        return player

    def find_by_token(self, token) -> Player:
        for p in self.players:
            if p.check_token(token):
                return p
        raise InvalidReconnectToken()

    def rebind(self, token) -> Player:
        player = self.find_by_token(token)
        player.mark_reconnected()
        return player

    # ---- Lifecycle ----

    def start(self) -> None:
        if self.started:
            return
        if len(self.players) < self.min_players:
            raise NotEnoughPlayers(f'Need at least {self.min_players} players to start')
        self.started = True

    def maybe_start(self) -> bool:
        """Start the room once enough players have joined. Returns True on transition."""
        if self.started or len(self.players) < self.min_players:
            return False
        self.start()
        return True

    # ---- Turn actions ----

    def _check_turn(self, player_id) -> Player:
        if self.status != IN_PROGRESS:
            raise GameNotActive()
        player = self.get_player(player_id)
        if not player:
            raise NotInGame()
        if self.current_player.id != player.id:
            raise NotYourTurn()
        return player

    def roll_dice(self, player_id) -> int:
        self._check_turn(player_id)
        if self.dice_value is not None:
            raise DiceAlreadyRolled()
        self.dice_value = self.rng.randint(1, DICE_FACES)
        return self.dice_value

    def move(self, player_id) -> MoveResult:
        player = self._check_turn(player_id)
        if self.dice_value is None:
            raise NoDicePending()
        roll = self.dice_value
        start = self.positions[player.id]
        landed_on, target, via = resolve_landing(start, roll)
        self.positions[player.id] = target

        if target == BOARD_SIZE:
            self.ended = True
            self.winner = player
            return MoveResult(player.id, start, landed_on, target, roll, via, True)

        self.dice_value = None
        if roll != EXTRA_TURN_ROLL:
            self.turn_index = (self.turn_index + 1) % len(self.players)
        return MoveResult(player.id, start, landed_on, target, roll, via, False)

    # ---- Projection ----

    def to_dict(self) -> dict:
        return {
            'roomId': self.id,
            'players': [p.to_dict() for p in self.players],
            'currentPlayerIndex': self.turn_index,
            'positions': dict(self.positions),
            'diceValue': self.dice_value,
            'started': self.started,
            'ended': self.ended,
            'winner': self.winner.to_dict() if self.winner else None,
            'status': self.status,
        }
