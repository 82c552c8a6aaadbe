"""
Frame Demuxer
=============

Reassembles fixed-size raw frames from an arbitrarily chunked byte stream.

The decoder's stdout delivers bytes in whatever chunk sizes the pipe
happens to produce. This module slices complete frames off the front of a
rolling buffer and keeps the partial tail for the next chunk.

Design Rules:
    - Never yields a short frame
    - Never drops or reorders bytes
    - Carry-over is discarded on reset (new decoder, new frame boundaries)
"""

import logging
from typing import List

from telecine.models.frame import Frame


logger = logging.getLogger(__name__)


class FrameDemuxer:
    """
    Stateful splitter of a raw rgb24 byte stream into frames.
    
    Attributes:
        width: Frame width in pixels
        height: Frame height in pixels
        frame_size: Bytes per frame
        frames_emitted: Frames sliced since the last reset
        
    Example:
        demuxer = FrameDemuxer(width=240, height=135)
        
        for chunk in chunks:
            for frame in demuxer.feed(chunk):
                broadcast(frame)
    """
    
    def __init__(self, width: int, height: int) -> None:
        """
        Initialize demuxer.
        
        Args:
            width: Frame width in pixels. Must be >= 1.
            height: Frame height in pixels. Must be >= 1.
        """
        if width < 1 or height < 1:
            raise ValueError("frame dimensions must be >= 1")
        
        self.width = width
        self.height = height
        self.frame_size = width * height * 3
        self.frames_emitted: int = 0
        self._carry = bytearray()
    
    @property
    def pending(self) -> int:
        """Bytes held over waiting for the rest of a frame."""
        return len(self._carry)
    
    def feed(self, chunk: bytes) -> List[Frame]:
        """
        Append a chunk and slice off every frame now complete.
        
        Frames are sliced eagerly so that the carry-over is already
        consistent before the caller starts handling them.
        
        Args:
            chunk: Next bytes from the decoder, any length
            
        Returns:
            Complete frames in stream order (possibly empty)
        """
        self._carry += chunk
        
        frames: List[Frame] = []
        offset = 0
        while len(self._carry) - offset >= self.frame_size:
            frames.append(Frame(
                index=self.frames_emitted,
                width=self.width,
                height=self.height,
                data=bytes(self._carry[offset:offset + self.frame_size]),
            ))
            offset += self.frame_size
            self.frames_emitted += 1
        
        if offset:
            del self._carry[:offset]
        return frames
    
    def reset(self) -> int:
        """
        Drop any partial frame.
        
        Returns:
            Number of bytes discarded.
        """
        discarded = len(self._carry)
        if discarded:
            logger.debug(f"Discarding {discarded} bytes of partial frame")
        self._carry = bytearray()
        self.frames_emitted = 0
        return discarded
