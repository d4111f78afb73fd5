PLAYER_NAME_MAX_LENGTH = 64
PLAYER_HANDLE_MAX_LENGTH = 32
PLAYER_HANDLE_PREFIX = "@"
PLAYER_HANDLE_MIN_LENGTH = 2
