import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Players needed before a room leaves the lobby
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    # Seconds a disconnected player is kept for a token rejoin. 0 removes immediately.
    RECONNECT_GRACE_SEC = int(os.environ.get('RECONNECT_GRACE_SEC', '0'))
    # joinGame on an unknown room id creates a fresh room instead of failing
    JOIN_CREATES_MISSING_ROOM = os.environ.get('JOIN_CREATES_MISSING_ROOM', '1').lower() not in ('0', 'false', 'no')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
