"""
Telnet Server
=============

Accepts viewer connections and runs their input loops.

For each connection:
    - registers a ClientSession
    - sends IAC DO NAWS, then clear screen / home / hide cursor
    - reads input until EOF, error or a quit key
    - deregisters the session

Frames are written by the Broadcaster, not here.
"""

import asyncio
import logging
import socket
from typing import Iterable, Optional

from telecine.models.session import RenderMode
from telecine.session.client import ClientSession
from telecine.session.registry import SessionRegistry


logger = logging.getLogger(__name__)


def format_peer(peername) -> str:
    """host:port for a peername tuple, '?' for missing parts."""
    if isinstance(peername, tuple) and len(peername) >= 2:
        host, port = peername[0], peername[1]
    else:
        host, port = None, None
    return f"{host or '?'}:{port or '?'}"


class TelnetServer:
    """
    asyncio TCP server for telnet viewers.
    
    Attributes:
        registry: Where sessions are registered
        host: Bind host
        port: Bind port (0 picks a free port)
        
    Example:
        server = TelnetServer(registry, host="0.0.0.0", port=2323)
        await server.start()
        ...
        await server.stop()
    """
    
    def __init__(
        self,
        registry: SessionRegistry,
        host: str = "0.0.0.0",
        port: int = 2323,
        default_mode: RenderMode = RenderMode.TRUECOLOR,
        quit_keys: Iterable[str] = ("q", "Q"),
        mode_keys: Iterable[str] = ("m", "M"),
        read_size: int = 4096,
    ) -> None:
        self.registry = registry
        self.host = host
        self.port = port
        self.default_mode = default_mode
        self.quit_keys = tuple(quit_keys)
        self.mode_keys = tuple(mode_keys)
        self.read_size = read_size
        
        self._server: Optional[asyncio.AbstractServer] = None
    
    @property
    def bound_port(self) -> Optional[int]:
        """Actual listening port once started."""
        if self._server is None or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()[1]
    
    async def start(self) -> None:
        """Start listening."""
        if self._server is not None:
            logger.warning("Telnet server already running")
            return
        
        self._server = await asyncio.start_server(
            self._handle_connection,
            host=self.host,
            port=self.port,
            reuse_address=True,
        )
        logger.info(f"Telnet server listening on {self.host}:{self.bound_port}")
        logger.info(f"Connect with: telnet <SERVER_IP> {self.bound_port}")
    
    async def stop(self, timeout: float = 2.0) -> None:
        """Stop accepting and drop every remaining connection."""
        if self._server is None:
            return
        
        self._server.close()
        for session in self.registry.snapshot():
            session.abort()
        try:
            await asyncio.wait_for(self._server.wait_closed(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Timed out waiting for connections to close")
        self._server = None
    
    def create_session(self, session_id: str, writer) -> ClientSession:
        return ClientSession(
            session_id,
            writer,
            mode=self.default_mode,
            quit_keys=self.quit_keys,
            mode_keys=self.mode_keys,
        )
    
    async def _handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        """Serve one viewer until it leaves."""
        session = self.create_session(
            format_peer(writer.get_extra_info("peername")), writer
        )
        
        sock = writer.get_extra_info("socket")
        if sock is not None:
            try:
                sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            except OSError as e:
                logger.debug(f"TCP_NODELAY not set for {session.id}: {e}")
        
        self.registry.add(session)
        logger.info(f"Client connected: {session.id}")
        
        try:
            session.send_handshake()
            await self.serve_session(session, reader)
        except (ConnectionError, OSError) as e:
            logger.warning(f"Client socket error {session.id}: {e}")
        finally:
            self.registry.remove(session)
            session.close()
            logger.info(f"Client disconnected: {session.id}")
    
    async def serve_session(
        self,
        session: ClientSession,
        reader: asyncio.StreamReader,
    ) -> None:
        """Read client input until EOF or a quit key."""
        while True:
            data = await reader.read(self.read_size)
            if not data:
                return
            
            result = session.feed(data)
            if result.mode_changed:
                logger.info(f"Client {session.id} mode changed to {session.mode.value}")
            if result.resized:
                logger.debug(f"Client {session.id} resized to {session.cols}x{session.rows}")
            if result.quit:
                session.close(restore_cursor=True)
                return
