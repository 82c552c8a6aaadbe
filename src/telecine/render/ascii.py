"""
ASCII Renderer
==============

Grayscale rendering onto a character ramp.

Output layout (one line per usable terminal row):
    ESC[H
    pad_y blank lines
    out_h lines of: pad_x spaces, out_w glyphs, right padding
    remaining blank lines

The cursor is homed rather than the screen cleared, so redraws do not
flicker.
"""

import numpy as np

from telecine.models.frame import Frame
from telecine.models.geometry import FitRectangle
from telecine.render.luma import rgb_to_luma
from telecine.render.sampling import sample_pixels


CURSOR_HOME = b"\x1b[H"
NEWLINE = b"\n"


def render_ascii(frame: Frame, fit: FitRectangle, lut: np.ndarray) -> bytes:
    """
    Render a frame as grayscale ASCII art.
    
    Args:
        frame: Source frame
        fit: Placement inside the client's terminal
        lut: 256-entry luma -> character code table
        
    Returns:
        Escape-coded text block
    """
    glyphs = lut[rgb_to_luma(sample_pixels(frame, fit))]
    
    blank = b" " * fit.dest_w + NEWLINE
    left = b" " * fit.pad_x
    right = b" " * fit.pad_right
    
    parts = [CURSOR_HOME, blank * fit.pad_y]
    for row in glyphs:
        parts.append(left + row.tobytes() + right + NEWLINE)
    parts.append(blank * fit.pad_bottom)
    
    return b"".join(parts)
