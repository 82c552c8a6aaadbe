"""
Telnet Input Parsing
====================

Separates in-band telnet negotiation from keystrokes.

Clients interleave window-size reports with typed characters:

    IAC SB NAWS <w_hi> <w_lo> <h_hi> <h_lo> IAC SE

The parser is a byte-level state machine that keeps its state between
chunks, so a report split across two reads is still recognised. Every
negotiation byte is removed from the text handed to key detection.

Design Rules:
    - Malformed or unknown sequences are dropped, never raised
    - Only a complete NAWS report with non-zero width and height
      produces a window size
    - A 255 size byte is accepted both escaped (IAC IAC) and raw
    - Subnegotiations are capped in length so a stray IAC SB cannot
      swallow keystrokes forever
"""

from dataclasses import dataclass
from typing import Optional, Tuple


IAC = 255
DONT = 254
DO = 253
WONT = 252
WILL = 251
SB = 250
SE = 240
NAWS = 31

# Server -> client
DO_NAWS = bytes([IAC, DO, NAWS])
CLEAR_SCREEN = b"\x1b[2J"
CURSOR_HOME = b"\x1b[H"
HIDE_CURSOR = b"\x1b[?25l"
SHOW_CURSOR = b"\x1b[?25h"

MAX_SUBNEGOTIATION = 64

_DATA = 0
_COMMAND = 1
_OPTION = 2
_SUB = 3
_SUB_IAC = 4


@dataclass(frozen=True, slots=True)
class TelnetInput:
    """
    Result of parsing one chunk of client input.
    
    Attributes:
        text: Keystrokes with all negotiation bytes removed
        window_size: Last valid (cols, rows) reported in the chunk, if any
    """
    
    text: str
    window_size: Optional[Tuple[int, int]] = None


def parse_naws(payload: bytes) -> Optional[Tuple[int, int]]:
    """
    Decode a NAWS subnegotiation payload (option byte included).
    
    Returns:
        (cols, rows), or None if the payload is not a usable NAWS report
    """
    if len(payload) != 5 or payload[0] != NAWS:
        return None
    cols = int.from_bytes(payload[1:3], "big")
    rows = int.from_bytes(payload[3:5], "big")
    if cols <= 0 or rows <= 0:
        return None
    return cols, rows


class TelnetParser:
    """
    Stateful telnet input parser for one connection.
    
    Example:
        parser = TelnetParser()
        result = parser.feed(data)
        if result.window_size:
            cols, rows = result.window_size
    """
    
    def __init__(self) -> None:
        self._state = _DATA
        self._sub = bytearray()
    
    def feed(self, data: bytes) -> TelnetInput:
        """Parse one chunk, carrying partial sequences to the next call."""
        text = bytearray()
        window_size: Optional[Tuple[int, int]] = None
        
        for byte in data:
            state = self._state
            
            if state == _DATA:
                if byte == IAC:
                    self._state = _COMMAND
                else:
                    text.append(byte)
            
            elif state == _COMMAND:
                if byte == SB:
                    self._sub.clear()
                    self._state = _SUB
                elif byte in (WILL, WONT, DO, DONT):
                    self._state = _OPTION
                else:
                    # IAC IAC (escaped 0xFF) and two-byte commands carry no text
                    self._state = _DATA
            
            elif state == _OPTION:
                self._state = _DATA
            
            elif state == _SUB:
                window_size = self._sub_byte(byte) or window_size
            
            elif state == _SUB_IAC:
                if byte == SE:
                    window_size = self._finish_sub() or window_size
                elif byte == IAC:
                    self._sub.append(IAC)
                    self._state = _SUB
                elif self._in_naws_payload():
                    # Unescaped 255 inside the 4 size bytes
                    self._sub.append(IAC)
                    self._state = _SUB
                    window_size = self._sub_byte(byte) or window_size
                else:
                    # Unterminated subnegotiation; discard it
                    self._sub.clear()
                    self._state = _DATA
        
        return TelnetInput(
            text=text.decode("utf-8", errors="ignore"),
            window_size=window_size,
        )
    
    def _sub_byte(self, byte: int) -> Optional[Tuple[int, int]]:
        if byte == IAC:
            self._state = _SUB_IAC
        elif len(self._sub) >= MAX_SUBNEGOTIATION:
            self._sub.clear()
            self._state = _DATA
        elif byte == SE and self._naws_complete():
            # Raw 255 as the last size byte read as IAC IAC; SE still ends it
            return self._finish_sub()
        else:
            self._sub.append(byte)
        return None
    
    def _finish_sub(self) -> Optional[Tuple[int, int]]:
        size = parse_naws(bytes(self._sub))
        self._sub.clear()
        self._state = _DATA
        return size
    
    def _naws_complete(self) -> bool:
        return len(self._sub) == 5 and self._sub[0] == NAWS
    
    def _in_naws_payload(self) -> bool:
        """Whether a NAWS report still has size bytes to come."""
        return len(self._sub) in range(1, 5) and self._sub[0] == NAWS
