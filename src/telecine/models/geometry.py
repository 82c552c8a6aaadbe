"""
Geometry Models
===============

Placement of a rendered frame inside a client's terminal.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FitRectangle:
    """
    Render rectangle and letterbox padding for one terminal size.
    
    Recomputed for every frame, since a client may resize at any time.
    
    Attributes:
        dest_w: Usable terminal columns
        dest_h: Usable terminal rows (one row short of the window)
        out_w: Rendered image width in cells
        out_h: Rendered image height in cells
        pad_x: Blank columns left of the image
        pad_y: Blank rows above the image
    """
    
    dest_w: int
    dest_h: int
    out_w: int
    out_h: int
    pad_x: int
    pad_y: int
    
    @property
    def pad_right(self) -> int:
        """Blank columns right of the image."""
        return self.dest_w - self.pad_x - self.out_w
    
    @property
    def pad_bottom(self) -> int:
        """Blank rows below the image."""
        return self.dest_h - self.pad_y - self.out_h
