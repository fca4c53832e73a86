from __future__ import annotations
from enum import Enum
from typing import Optional, Protocol

from client.ws_client import Connection, Frame, FrameKind
from roulette.commands import SpinCommandHandler
from shared.MessageTypes import TERMINAL_DISCONNECT_REASONS
from shared.envelope import DecodeError, Disconnect, Hello, SlashCommand, Unrecognized, classify
from shared.log import log_envelope, get_logger

logger = get_logger(__name__)


class Resolver(Protocol):
    async def resolve(self) -> str: ...


class Transport(Protocol):
    async def connect(self, url: str) -> Connection: ...
    async def receive(self, connection: Connection) -> Frame: ...
    async def send(self, connection: Connection, frame: Frame) -> None: ...
    async def close(self, connection: Connection) -> None: ...


class SessionState(str, Enum):
    RESOLVING = "resolving"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    TERMINATED = "terminated"


class SocketModeSession:
    """
    Drives one socket mode session from endpoint lookup to shutdown.

    Frames are handled one at a time in arrival order by a single task, which
    is also the only writer of the usage table. A ``disconnect`` envelope
    closes the socket and opens a new one, unless Slack disabled the link, in
    which case ``run`` returns. Every other failure propagates.
    """

    def __init__(self, resolver: Resolver, transport: Transport, handler: SpinCommandHandler) -> None:
        self.resolver = resolver
        self.transport = transport
        self.handler = handler
        self.state = SessionState.RESOLVING
        self.connection: Optional[Connection] = None
        self.reconnect_count = 0

    async def _open_connection(self) -> Connection:
        url = await self.resolver.resolve()
        return await self.transport.connect(url)

    async def run(self) -> None:
        self.state = SessionState.RESOLVING
        self.connection = await self._open_connection()
        self.state = SessionState.CONNECTED

        while self.state is SessionState.CONNECTED:
            frame = await self.transport.receive(self.connection)
            await self.process_frame(frame)

        logger.info("Socket mode session terminated")

    async def process_frame(self, frame: Frame) -> None:
        assert self.connection is not None

        if frame.kind is FrameKind.PING:
            logger.debug("Received ping from Slack websocket")
            await self.transport.send(self.connection, Frame.pong(frame.data if isinstance(frame.data, bytes) else b""))
            return
        if frame.kind is not FrameKind.TEXT:
            logger.warning("Received non-Text %s frame from Slack websocket", frame.kind.value)
            return

        try:
            message = classify(frame.data)
        except DecodeError as e:
            logger.warning("Failed to parse message from Slack: %s from JSON %s", e, frame.data)
            return

        if isinstance(message, Hello):
            logger.info("Received hello message from Slack (%d connection(s))", message.num_connections)
        elif isinstance(message, Disconnect):
            await self.handle_disconnect(message)
        elif isinstance(message, SlashCommand):
            await self.handle_slash_command(message)
        elif isinstance(message, Unrecognized):
            log_envelope(logger, "warning", "Dropping unsupported message", message=message)

    async def handle_disconnect(self, message: Disconnect) -> None:
        log_envelope(logger, "info", f"Received disconnect message: {message.reason}", message=message)

        # Always close right away, then decide whether to come back
        old_connection, self.connection = self.connection, None
        await self.transport.close(old_connection)

        if message.reason in TERMINAL_DISCONNECT_REASONS:
            logger.info("Link disabled, stopping bot")
            self.state = SessionState.TERMINATED
            return

        logger.info("Reconnecting to Slack websocket")
        self.state = SessionState.RECONNECTING
        self.connection = await self._open_connection()
        self.reconnect_count += 1
        self.state = SessionState.CONNECTED

    async def handle_slash_command(self, message: SlashCommand) -> None:
        log_envelope(logger, "info", f"Received slash command: {message.command} {message.text}".rstrip(), message=message)
        response = self.handler.handle(message)
        if response is None:
            return
        payload = response.to_json()
        log_envelope(logger, "debug", f"Sending response to Slack: {payload}", message=response)
        await self.transport.send(self.connection, Frame.text(payload))
