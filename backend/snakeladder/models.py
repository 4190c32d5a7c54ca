import secrets
import string
import random


class Player:
    """A seat in a room.

    ``id`` is the connection id the player first joined with. It keeps
    identifying the player after a token rejoin from another connection.
    """

    def __init__(self, id, name, is_creator=False):
        self.id = id
        self.name = name
        self.is_creator = is_creator
        self.reconnect_token = secrets.token_urlsafe(16)
        self.connected = True
        # Removal deadline while waiting for a token rejoin
        self.disconnect_deadline = None

    def check_token(self, token):
        return bool(token) and secrets.compare_digest(self.reconnect_token, str(token))

    def mark_disconnected(self, deadline):
        self.connected = False
        self.disconnect_deadline = deadline

    def mark_reconnected(self):
        self.connected = True
        self.disconnect_deadline = None

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'isCreator': self.is_creator,
            'connected': self.connected,
        }

    def __repr__(self):
        return f"<Player {self.name} ({self.id})>"


def generate_room_code(taken, length=6):
    """Generate a short room code not present in ``taken``."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in taken:
            return code
