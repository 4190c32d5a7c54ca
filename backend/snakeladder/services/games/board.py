from typing import Dict, Optional, Tuple

BOARD_SIZE = 100
START_SQUARE = 1

SNAKES: Dict[int, int] = {
    16: 5, 25: 7, 35: 14, 46: 27, 54: 34, 58: 40,
    59: 21, 67: 47, 72: 52, 80: 61, 85: 65, 92: 71,
}

LADDERS: Dict[int, int] = {
    8: 30, 18: 39, 23: 43, 28: 49, 36: 57, 42: 62,
    53: 73, 64: 84, 76: 96, 87: 98, 90: 99,
}


def resolve_landing(position: int, roll: int) -> Tuple[int, int, Optional[str]]:
    """Advance ``position`` by ``roll`` and apply at most one snake or ladder.

    Returns ``(landed_on, final_square, via)`` where ``via`` is ``'snake'``,
    ``'ladder'`` or None. Movement stops at the last square; the destination
    of a snake or ladder is never resolved again.
    """
    landed_on = min(position + roll, BOARD_SIZE)
    if landed_on in SNAKES:
        return landed_on, SNAKES[landed_on], 'snake'
    if landed_on in LADDERS:
        return landed_on, LADDERS[landed_on], 'ladder'
    return landed_on, landed_on, None


def board_layout() -> dict:
    return {
        'size': BOARD_SIZE,
        'snakes': {str(k): v for k, v in sorted(SNAKES.items())},
        'ladders': {str(k): v for k, v in sorted(LADDERS.items())},
    }
