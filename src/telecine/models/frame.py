"""
Frame Data Model
=================

Internal frame representation for the decode pipeline.

Design Rules:
    - This is the ONLY frame format passed to renderers
    - Holds exactly width * height * 3 bytes (rgb24, row-major, no padding)
    - Immutable; sliced once from the demuxer buffer and never modified
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Frame:
    """
    One decoded video frame.
    
    Attributes:
        index: Position of the frame in the current decoder's output
        width: Base render width in pixels
        height: Base render height in pixels
        data: Raw rgb24 pixels
    """
    
    index: int
    width: int
    height: int
    data: bytes
    
    def __post_init__(self) -> None:
        expected = self.width * self.height * 3
        if len(self.data) != expected:
            raise ValueError(
                f"Frame {self.index} holds {len(self.data)} bytes, "
                f"expected {expected}"
            )
    
    def __repr__(self) -> str:
        """Compact repr that doesn't dump the pixels."""
        return (
            f"Frame(index={self.index}, "
            f"size={self.width}x{self.height})"
        )
