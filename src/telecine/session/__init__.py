"""
Session Module
==============

Telnet negotiation parsing and per-client state.

This module provides:
    - TelnetParser: Splits NAWS reports from keystrokes across chunks
    - ClientSession: Geometry, render mode and writer for one viewer
    - SessionRegistry: All connected sessions
"""

from telecine.session.telnet import TelnetInput, TelnetParser, parse_naws
from telecine.session.client import ClientSession, SessionInput
from telecine.session.registry import SessionRegistry


__all__ = [
    "TelnetInput",
    "TelnetParser",
    "parse_naws",
    "ClientSession",
    "SessionInput",
    "SessionRegistry",
]
