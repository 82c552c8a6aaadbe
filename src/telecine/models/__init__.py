"""
Data Models
===========

Core value types shared across telecine.

Models:
    Frame:
        - Frame: One raw rgb24 frame at the base resolution
    
    Geometry:
        - FitRectangle: Where a frame lands inside a terminal window
    
    Session:
        - RenderMode: ASCII or truecolor output
    
    Decoder:
        - DecoderState: Lifecycle states of the external decoder
"""

from telecine.models.frame import Frame
from telecine.models.geometry import FitRectangle
from telecine.models.session import RenderMode
from telecine.models.decoder import DecoderState

__all__ = [
    # Frame
    "Frame",
    # Geometry
    "FitRectangle",
    # Session
    "RenderMode",
    # Decoder
    "DecoderState",
]
