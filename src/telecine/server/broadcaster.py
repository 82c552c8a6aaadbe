"""
Broadcaster
===========

Fans each decoded frame out to every connected session.

Per-session policy, checked in order:
    1. closed socket            -> skip
    2. geometry not negotiated  -> skip
    3. unsent bytes > threshold -> skip this frame (backpressure drop)
    4. render + write           -> on any error, evict the session

Frames are never queued per client: a slow client simply misses frames
until its socket drains. A failing client never stops the pass for the
others.
"""

import logging

from telecine.models.frame import Frame
from telecine.observability.metrics import BroadcastMetrics
from telecine.render.renderer import FrameRenderer
from telecine.session.registry import SessionRegistry


logger = logging.getLogger(__name__)


class Broadcaster:
    """
    Renders and writes frames for all sessions.
    
    Attributes:
        registry: Connected sessions
        renderer: Shared frame renderer
        drop_threshold_bytes: Backpressure limit per session
        metrics: Operational metrics
        
    Example:
        broadcaster = Broadcaster(registry, renderer, drop_threshold_bytes=1 << 20)
        for frame in demuxer.feed(chunk):
            broadcaster.broadcast(frame)
    """
    
    def __init__(
        self,
        registry: SessionRegistry,
        renderer: FrameRenderer,
        drop_threshold_bytes: int = 1024 * 1024,
    ) -> None:
        if drop_threshold_bytes < 0:
            raise ValueError("drop_threshold_bytes must be >= 0")
        
        self.registry = registry
        self.renderer = renderer
        self.drop_threshold_bytes = drop_threshold_bytes
        self.metrics = BroadcastMetrics()
    
    def broadcast(self, frame: Frame) -> int:
        """
        Send one frame to every eligible session.
        
        Args:
            frame: Frame to render
            
        Returns:
            Number of sessions the frame was written to
        """
        self.metrics.frames_broadcast += 1
        delivered = 0
        
        for session in self.registry.snapshot():
            if session.closed:
                continue
            if not session.negotiated:
                self.metrics.frames_awaiting_geometry += 1
                continue
            
            try:
                if session.buffered_bytes > self.drop_threshold_bytes:
                    self.metrics.frames_dropped += 1
                    continue
                
                payload = self.renderer.render(
                    frame, session.cols, session.rows, session.mode
                )
                session.write(payload)
            except Exception as e:
                self._evict(session, e)
                continue
            
            delivered += 1
            self.metrics.frames_rendered += 1
            self.metrics.bytes_written += len(payload)
        
        return delivered
    
    def _evict(self, session, error: Exception) -> None:
        logger.warning(f"Evicting client {session.id}: {error}")
        self.registry.remove(session)
        self.metrics.sessions_evicted += 1
        try:
            session.abort()
        except Exception as e:
            logger.debug(f"Abort failed for {session.id}: {e}")
