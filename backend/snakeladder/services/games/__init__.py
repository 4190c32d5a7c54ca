"""Game domain services: board rules, room state machine and room registry.

This package contains the pure game logic imported by socket handlers and
HTTP routes, keeping transport concerns separated from core game mechanics.
"""

from .registry import RoomRegistry
from .session import GameRoom, MoveResult

__all__ = ['RoomRegistry', 'GameRoom', 'MoveResult']
