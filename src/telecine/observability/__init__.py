"""
Observability Module
====================

Counters and the optional HTTP status endpoint.

Nothing here influences playback or what clients receive.
"""

from telecine.observability.metrics import BroadcastMetrics, DecoderMetrics

__all__ = [
    "BroadcastMetrics",
    "DecoderMetrics",
]
