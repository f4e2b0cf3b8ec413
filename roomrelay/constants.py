COMMAND_CREATE = "create"
COMMAND_JOIN = "join"
ROOM_COMMANDS = {COMMAND_CREATE, COMMAND_JOIN}

# Bodies of the server-synthesized room notifications.
JOINED_BODY = "joined"
LEFT_BODY = "left"

# Application close codes (4000-4999 are free for private use).
CLOSE_BAD_PARAMETERS = 4000
CLOSE_ROOM_NOT_FOUND = 4002
CLOSE_REPLACED = 4003
CLOSE_SEND_FAILED = 1011

REPLACED_REASON = "replaced by a newer connection"
SEND_FAILED_REASON = "send failed"

__all__ = [
    "COMMAND_CREATE",
    "COMMAND_JOIN",
    "ROOM_COMMANDS",
    "JOINED_BODY",
    "LEFT_BODY",
    "CLOSE_BAD_PARAMETERS",
    "CLOSE_ROOM_NOT_FOUND",
    "CLOSE_REPLACED",
    "CLOSE_SEND_FAILED",
    "REPLACED_REASON",
    "SEND_FAILED_REASON",
]
