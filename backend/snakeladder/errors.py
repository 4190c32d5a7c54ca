"""Rejections raised by room operations.

Every error here is a local validation failure on a single action. The room
is left untouched when one is raised, and the socket layer reports it to the
originating connection only.
"""


class GameError(Exception):
    code = 'game_error'
    message = 'Game error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {'message': self.message, 'code': self.code}


class InvalidRequest(GameError):
    code = 'invalid_request'
    message = 'Invalid request'


class RoomNotFound(GameError):
    code = 'room_not_found'
    message = 'Game not found'


class DuplicateRoom(GameError):
    code = 'duplicate_room'
    message = 'A game with this id already exists'


class RoomFull(GameError):
    code = 'room_full'
    message = 'Game is full'


class GameClosed(GameError):
    code = 'game_closed'
    message = 'Game has ended'


class NotEnoughPlayers(GameError):
    code = 'not_enough_players'
    message = 'Not enough players to start'


class GameNotActive(GameError):
    code = 'game_not_active'
    message = 'Game not in progress'


class NotYourTurn(GameError):
    code = 'not_your_turn'
    message = 'Not your turn'


class DiceAlreadyRolled(GameError):
    code = 'dice_already_rolled'
    message = 'Dice already rolled, make your move'


class NoDicePending(GameError):
    code = 'no_dice_pending'
    message = 'Roll the dice before moving'


class NotInGame(GameError):
    code = 'not_in_game'
    message = 'Not in a valid game'


class InvalidReconnectToken(GameError):
    code = 'invalid_reconnect_token'
    message = 'Reconnect token is not valid for this game'
