from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import websockets

from shared.log import get_logger

logger = get_logger(__name__)


class TransportError(Exception):
    """Raised when the socket cannot be opened, read from or written to."""
    pass


class FrameKind(str, Enum):
    TEXT = "text"
    PING = "ping"
    PONG = "pong"
    OTHER = "other"


@dataclass(frozen=True)
class Frame:
    kind: FrameKind
    data: Union[str, bytes, None] = None

    @classmethod
    def text(cls, data: str) -> Frame:
        return cls(FrameKind.TEXT, data)

    @classmethod
    def ping(cls, data: bytes = b"") -> Frame:
        return cls(FrameKind.PING, data)

    @classmethod
    def pong(cls, data: bytes = b"") -> Frame:
        return cls(FrameKind.PONG, data)


@dataclass(frozen=True)
class Connection:
    """A live socket and the URL it was opened with. Replaced, never mutated."""
    websocket: websockets.ClientConnection
    url: str


class WebSocketTransport:
    """
    Frame-level access to a socket mode WebSocket.

    ``websockets`` answers protocol pings on its own before handing over the
    next message, so ``receive`` only ever yields TEXT or OTHER frames here.
    """

    def __init__(self, ping_interval: Optional[float] = 15, ping_timeout: Optional[float] = 45) -> None:
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout

    async def connect(self, url: str) -> Connection:
        """Open a WebSocket to the socket mode URL"""
        try:
            websocket = await websockets.connect(url, ping_interval=self.ping_interval, ping_timeout=self.ping_timeout)
        except (OSError, websockets.exceptions.WebSocketException) as e:
            raise TransportError(f"Failed to connect to websocket: {e}") from e
        logger.info("Websocket connection established", extra={"connection_url": url})
        return Connection(websocket=websocket, url=url)

    async def receive(self, connection: Connection) -> Frame:
        try:
            raw = await connection.websocket.recv()
        except websockets.exceptions.ConnectionClosed as e:
            raise TransportError(f"Websocket closed while reading: {e}") from e
        except (OSError, websockets.exceptions.WebSocketException) as e:
            raise TransportError(f"Failed to read from websocket: {e}") from e
        if isinstance(raw, str):
            return Frame.text(raw)
        return Frame(FrameKind.OTHER, raw)

    async def send(self, connection: Connection, frame: Frame) -> None:
        try:
            if frame.kind is FrameKind.TEXT:
                await connection.websocket.send(frame.data)
            elif frame.kind is FrameKind.PING:
                await connection.websocket.ping(frame.data or b"")
            elif frame.kind is FrameKind.PONG:
                await connection.websocket.pong(frame.data or b"")
            else:
                raise TransportError(f"Cannot send frame of kind {frame.kind.value}")
        except websockets.exceptions.ConnectionClosed as e:
            raise TransportError(f"Websocket closed while sending {frame.kind.value}: {e}") from e
        except (OSError, websockets.exceptions.WebSocketException) as e:
            raise TransportError(f"Failed to send {frame.kind.value}: {e}") from e

    async def close(self, connection: Connection) -> None:
        """Close the WebSocket connection"""
        try:
            await connection.websocket.close(code=1000)
        except Exception as e:
            logger.error(f"Error closing connection: {e}")
