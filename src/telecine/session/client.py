"""
Client Session
==============

Per-connection state for one telnet viewer.

A session is an explicit record held in the SessionRegistry and carried
alongside its writer; nothing is attached to the socket itself.

Lifecycle:
    created on accept → geometry unknown (nothing rendered)
    → first NAWS report → rendered every frame
    → quit key, socket close/error, or eviction → closed
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from telecine.models.session import RenderMode
from telecine.session.telnet import (
    CLEAR_SCREEN,
    CURSOR_HOME,
    DO_NAWS,
    HIDE_CURSOR,
    SHOW_CURSOR,
    TelnetParser,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionInput:
    """What one chunk of client input changed."""
    
    resized: bool = False
    mode_changed: bool = False
    quit: bool = False


class ClientSession:
    """
    One connected viewer.
    
    Attributes:
        id: Peer address as host:port
        cols: Terminal columns, None until negotiated
        rows: Terminal rows, None until negotiated
        mode: Current render mode
        
    The writer is an asyncio.StreamWriter (or anything with write(),
    close(), is_closing() and a transport exposing
    get_write_buffer_size() and abort()).
    """
    
    def __init__(
        self,
        session_id: str,
        writer: Any,
        mode: RenderMode = RenderMode.TRUECOLOR,
        quit_keys: Iterable[str] = ("q", "Q"),
        mode_keys: Iterable[str] = ("m", "M"),
    ) -> None:
        self.id = session_id
        self.mode = mode
        self.cols: Optional[int] = None
        self.rows: Optional[int] = None
        
        self._writer = writer
        self._parser = TelnetParser()
        self._quit_keys = tuple(quit_keys)
        self._mode_keys = tuple(mode_keys)
    
    def __repr__(self) -> str:
        return (
            f"ClientSession(id={self.id}, "
            f"size={self.cols}x{self.rows}, mode={self.mode.value})"
        )
    
    @property
    def negotiated(self) -> bool:
        """Whether a usable terminal size is known."""
        return bool(self.cols) and bool(self.rows)
    
    @property
    def closed(self) -> bool:
        return self._writer.is_closing()
    
    @property
    def buffered_bytes(self) -> int:
        """Bytes written but not yet flushed to the socket."""
        return self._writer.transport.get_write_buffer_size()
    
    def send_handshake(self) -> None:
        """Request window size, then clear the screen and hide the cursor."""
        self._writer.write(DO_NAWS)
        self._writer.write(CLEAR_SCREEN + CURSOR_HOME + HIDE_CURSOR)
    
    def feed(self, data: bytes) -> SessionInput:
        """
        Apply one chunk of client input.
        
        Window-size reports update cols/rows. The remaining text is then
        checked for mode and quit keys independently; both may fire from
        the same chunk. Keys match anywhere in the chunk, pasted text
        included.
        """
        parsed = self._parser.feed(data)
        
        resized = False
        if parsed.window_size is not None:
            cols, rows = parsed.window_size
            resized = (cols, rows) != (self.cols, self.rows)
            self.cols, self.rows = cols, rows
        
        mode_changed = False
        if any(key in parsed.text for key in self._mode_keys):
            self.mode = self.mode.toggled()
            mode_changed = True
        
        quit = any(key in parsed.text for key in self._quit_keys)
        
        return SessionInput(resized=resized, mode_changed=mode_changed, quit=quit)
    
    def write(self, payload: bytes) -> None:
        self._writer.write(payload)
    
    def restore_cursor(self) -> None:
        """Show the cursor again and move past the last frame line."""
        if not self.closed:
            self._writer.write(SHOW_CURSOR + b"\n")
    
    def close(self, restore_cursor: bool = False) -> None:
        """Flush pending output and close."""
        if self.closed:
            return
        if restore_cursor:
            self.restore_cursor()
        self._writer.close()
    
    def abort(self) -> None:
        """Close immediately, discarding pending output."""
        transport = self._writer.transport
        if transport is not None:
            transport.abort()
        else:
            self._writer.close()
