"""
Runtime Metrics
===============

Plain counters for the broadcast and decode paths.

Counters are mutated from the event loop only, so no locking is needed.
"""


class BroadcastMetrics:
    """Metrics for Broadcaster observability."""
    
    __slots__ = (
        "frames_broadcast",
        "frames_rendered",
        "frames_dropped",
        "frames_awaiting_geometry",
        "sessions_evicted",
        "bytes_written",
    )
    
    def __init__(self) -> None:
        self.frames_broadcast: int = 0
        self.frames_rendered: int = 0
        self.frames_dropped: int = 0
        self.frames_awaiting_geometry: int = 0
        self.sessions_evicted: int = 0
        self.bytes_written: int = 0
    
    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "frames_broadcast": self.frames_broadcast,
            "frames_rendered": self.frames_rendered,
            "frames_dropped": self.frames_dropped,
            "frames_awaiting_geometry": self.frames_awaiting_geometry,
            "sessions_evicted": self.sessions_evicted,
            "bytes_written": self.bytes_written,
        }


class DecoderMetrics:
    """Metrics for DecoderLifecycle observability."""
    
    __slots__ = (
        "decoders_started",
        "items_completed",
        "failures",
        "bytes_read",
        "frames_demuxed",
    )
    
    def __init__(self) -> None:
        self.decoders_started: int = 0
        self.items_completed: int = 0
        self.failures: int = 0
        self.bytes_read: int = 0
        self.frames_demuxed: int = 0
    
    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "decoders_started": self.decoders_started,
            "items_completed": self.items_completed,
            "failures": self.failures,
            "bytes_read": self.bytes_read,
            "frames_demuxed": self.frames_demuxed,
        }
