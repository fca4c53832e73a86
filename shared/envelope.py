from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
import json

from shared.MessageTypes import MessageType


class DecodeError(Exception):
    """Raised when an inbound text frame is not a well-formed socket mode envelope."""
    pass


# ========================================
#           INBOUND MESSAGES
# ========================================

@dataclass(frozen=True)
class Hello:
    """Sent by Slack once the socket is ready to deliver events."""
    num_connections: int
    type: MessageType = field(default=MessageType.HELLO, init=False)


@dataclass(frozen=True)
class Disconnect:
    """
    Sent by Slack shortly before it closes the socket.

    Slack also sends a ``debug_info`` object which this client ignores.
    """
    reason: str
    type: MessageType = field(default=MessageType.DISCONNECT, init=False)


@dataclass(frozen=True)
class SlashCommand:
    """
    A ``slash_commands`` envelope:
    {
    "type": "slash_commands",
    "envelope_id": "STRING",
    "accepts_response_payload": BOOL,
    "payload": {"command": "/spin-any", "user_id": "U...", "text": "...", ...}
    }
    """
    envelope_id: str
    command: str
    user_id: str
    text: str = ""
    accepts_response_payload: bool = False
    channel_id: Optional[str] = None
    user_name: Optional[str] = None
    type: MessageType = field(default=MessageType.SLASH_COMMANDS, init=False)


@dataclass(frozen=True)
class Unrecognized:
    """Envelope with a discriminant this client does not handle."""
    msg_type: str
    envelope_id: Optional[str] = None


InboundMessage = Union[Hello, Disconnect, SlashCommand, Unrecognized]


def classify(text: str) -> InboundMessage:
    """
    Parse a text frame into an inbound message.

    The ``type`` field selects the shape. Unknown types come back as
    ``Unrecognized`` so new Slack envelope kinds never break the session.

    Raises:
        DecodeError: text is not a JSON object, has no string ``type``, or a
            known type is missing a required field
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise DecodeError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DecodeError("Envelope must be a JSON object")

    msg_type = data.get('type')
    if not isinstance(msg_type, str):
        raise DecodeError("'type' must be a string")

    if not MessageType.is_valid(msg_type):
        envelope_id = data.get('envelope_id')
        return Unrecognized(msg_type=msg_type, envelope_id=envelope_id if isinstance(envelope_id, str) else None)

    return _DECODERS[MessageType(msg_type)](data)


def _decode_hello(data: Dict[str, Any]) -> Hello:
    num_connections = data.get('num_connections')
    # bool is an int subclass
    if not isinstance(num_connections, int) or isinstance(num_connections, bool):
        raise DecodeError("'num_connections' must be an integer")
    return Hello(num_connections=num_connections)


def _decode_disconnect(data: Dict[str, Any]) -> Disconnect:
    reason = data.get('reason')
    if not isinstance(reason, str):
        raise DecodeError("'reason' must be a string")
    return Disconnect(reason=reason)


def _decode_slash_commands(data: Dict[str, Any]) -> SlashCommand:
    envelope_id = data.get('envelope_id')
    if not isinstance(envelope_id, str) or not envelope_id:
        raise DecodeError("'envelope_id' must be a non-empty string")

    payload = data.get('payload')
    if not isinstance(payload, dict):
        raise DecodeError("'payload' must be a dictionary")

    for required in ('command', 'user_id'):
        if not isinstance(payload.get(required), str):
            raise DecodeError(f"'payload.{required}' must be a string")

    text = payload.get('text', "")
    return SlashCommand(
        envelope_id=envelope_id,
        command=payload['command'],
        user_id=payload['user_id'],
        text=text if isinstance(text, str) else "",
        accepts_response_payload=bool(data.get('accepts_response_payload', False)),
        channel_id=payload.get('channel_id'),
        user_name=payload.get('user_name'),
    )


_DECODERS = {
    MessageType.HELLO: _decode_hello,
    MessageType.DISCONNECT: _decode_disconnect,
    MessageType.SLASH_COMMANDS: _decode_slash_commands,
}


# ========================================
#           OUTBOUND MESSAGES
# ========================================

@dataclass(frozen=True)
class Acknowledge:
    """Bare acknowledgement; serialised without a ``payload`` key."""
    envelope_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {'envelope_id': self.envelope_id}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(',', ':'), ensure_ascii=False)


@dataclass(frozen=True)
class CommandResponse:
    """Acknowledgement carrying a message to post, per https://api.slack.com/messaging/composing"""
    envelope_id: str
    blocks: List[Dict[str, Any]]
    response_type: str = "in_channel"

    @property
    def payload(self) -> Dict[str, Any]:
        return {'response_type': self.response_type, 'blocks': self.blocks}

    def to_dict(self) -> Dict[str, Any]:
        return {'envelope_id': self.envelope_id, 'payload': self.payload}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(',', ':'), ensure_ascii=False)


OutboundMessage = Union[Acknowledge, CommandResponse]


def section_block(text: str) -> Dict[str, Any]:
    """Build a ``section`` block holding mrkdwn text."""
    return {'type': 'section', 'text': {'type': 'mrkdwn', 'text': text}}
