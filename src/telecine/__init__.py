"""
Telecine
========

Decodes video files with ffmpeg and streams them, rendered as ANSI text,
to any number of telnet clients at once.

Each client gets output sized to its own terminal (negotiated in-band via
NAWS) and can toggle between a grayscale ASCII ramp and 24-bit colour
blocks with the ``m`` key. Slow clients miss frames instead of slowing
everyone else down.

Components:
    - geometry: Fitting the source frame into a terminal window
    - render: ASCII and truecolor frame renderers
    - stream: Raw frame demuxing, ffmpeg process, playlist, decoder lifecycle
    - session: Telnet negotiation parsing and per-client state
    - server: Connection handling and frame fan-out
    - observability: Counters and optional HTTP status endpoints

Example:
    $ telecine --port 2323 --video ./videos/clip.mp4
    $ telnet localhost 2323
"""

__version__ = "0.1.0"
__author__ = "Telecine Project"

__all__ = [
    "__version__",
]
