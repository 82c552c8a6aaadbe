"""
Server Module
=============

Connection handling and frame fan-out.

This module provides:
    - TelnetServer: Accepts viewers and reads their input
    - Broadcaster: Renders and writes each frame to every viewer
"""

from telecine.server.broadcaster import Broadcaster
from telecine.server.telnet_server import TelnetServer, format_peer


__all__ = [
    "Broadcaster",
    "TelnetServer",
    "format_peer",
]
