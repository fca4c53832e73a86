from __future__ import annotations

from enum import Enum
from typing import Set


class MessageType(str, Enum):
    """Socket mode envelope types this client understands."""

    HELLO = "hello"                      # Sent once the socket is ready
    DISCONNECT = "disconnect"            # Server is about to drop the socket
    SLASH_COMMANDS = "slash_commands"    # A user invoked one of our commands

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Check if string is a valid message type."""
        try:
            cls(value)
            return True
        except ValueError:
            return False


class DisconnectReason(str, Enum):
    """Reasons Slack gives in a ``disconnect`` envelope."""

    LINK_DISABLED = "link_disabled"      # Socket mode was turned off for the app
    WARNING = "warning"                  # Connection will be dropped in ~10s
    REFRESH_REQUESTED = "refresh_requested"


# Disconnect reasons that end the session instead of reconnecting
TERMINAL_DISCONNECT_REASONS: Set[str] = {
    DisconnectReason.LINK_DISABLED.value,
}
