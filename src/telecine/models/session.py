"""
Session Models
==============

Enumerations describing per-client state.
"""

from enum import Enum


class RenderMode(str, Enum):
    """
    Output style for one client.
    
    Attributes:
        ASCII: Grayscale luma mapped onto a character ramp
        TRUECOLOR: Space characters painted with 24-bit background colour
    """
    
    ASCII = "ascii"
    TRUECOLOR = "truecolor"
    
    def toggled(self) -> "RenderMode":
        """The other mode."""
        if self is RenderMode.ASCII:
            return RenderMode.TRUECOLOR
        return RenderMode.ASCII
