#!/usr/bin/env python3
"""
Liveness endpoint.

Every TCP connection gets a fixed ``200 OK`` and is closed. Nothing here
touches the socket mode session.
"""

from __future__ import annotations
import asyncio
from contextlib import suppress
from typing import Optional

from shared.log import get_logger

logger = get_logger(__name__)

HEALTHCHECK_RESPONSE = b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\n\r\nHealthcheck OK"


class HealthcheckServer:

    def __init__(self, host: str = "127.0.0.1", port: int = 3000, request_timeout: float = 1.0):
        self.host = host
        self.request_timeout = request_timeout
        self._requested_port = port
        self._server: Optional[asyncio.AbstractServer] = None

    @property
    def port(self) -> int:
        """Bound port once started (useful with port 0), else the requested one."""
        if self._server is not None and self._server.sockets:
            return self._server.sockets[0].getsockname()[1]
        return self._requested_port

    async def start(self) -> None:
        logger.info(f"Starting HTTP healthcheck server on {self.host}:{self._requested_port}")
        self._server = await asyncio.start_server(self.handle_connection, self.host, self._requested_port)
        logger.info(f"Healthcheck listening on http://{self.host}:{self.port}")

    async def serve_forever(self) -> None:
        if self._server is None:
            await self.start()
        assert self._server is not None
        async with self._server:
            await self._server.serve_forever()

    async def close(self) -> None:
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None

    async def handle_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        if peer:
            logger.info(f"Handling connection from {peer[0]}:{peer[1]}")
        else:
            logger.info("Handling connection from unknown peer")
        try:
            # Drain the request head so closing does not reset the socket
            with suppress(asyncio.TimeoutError, asyncio.IncompleteReadError, asyncio.LimitOverrunError):
                await asyncio.wait_for(reader.readuntil(b"\r\n\r\n"), timeout=self.request_timeout)
            writer.write(HEALTHCHECK_RESPONSE)
            await writer.drain()
        except ConnectionError as e:
            logger.warning(f"Healthcheck client went away: {e}")
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass
