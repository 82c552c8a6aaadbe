"""
Truecolor Renderer
==================

Renders each output cell as a space with a 24-bit background colour.

A colour escape is only emitted where the colour differs from the cell to
its left, so flat regions cost one byte per cell. Every image line ends
with an attribute reset so the letterbox padding stays uncoloured.
"""

import numpy as np

from telecine.models.frame import Frame
from telecine.models.geometry import FitRectangle
from telecine.render.sampling import sample_pixels


CURSOR_HOME = b"\x1b[H"
RESET = b"\x1b[0m"
NEWLINE = b"\n"


def _color_runs(pixels: np.ndarray) -> np.ndarray:
    """Mask of cells whose colour differs from the previous cell in the row."""
    changed = np.ones(pixels.shape[:2], dtype=bool)
    changed[:, 1:] = np.any(pixels[:, 1:] != pixels[:, :-1], axis=2)
    return changed


def render_truecolor(frame: Frame, fit: FitRectangle) -> bytes:
    """
    Render a frame as truecolor background blocks.
    
    Args:
        frame: Source frame
        fit: Placement inside the client's terminal
        
    Returns:
        Escape-coded text block
    """
    pixels = sample_pixels(frame, fit)
    changed = _color_runs(pixels)
    
    blank = b" " * fit.dest_w + NEWLINE
    left = b" " * fit.pad_x
    right = b" " * fit.pad_right
    
    parts = [CURSOR_HOME, blank * fit.pad_y]
    for row, row_changed in zip(pixels.tolist(), changed):
        starts = np.flatnonzero(row_changed).tolist()
        starts.append(fit.out_w)
        
        line = [left]
        for start, end in zip(starts, starts[1:]):
            r, g, b = row[start]
            line.append(b"\x1b[48;2;%d;%d;%dm" % (r, g, b))
            line.append(b" " * (end - start))
        line.append(RESET)
        line.append(right)
        line.append(NEWLINE)
        parts.append(b"".join(line))
    parts.append(blank * fit.pad_bottom)
    
    return b"".join(parts)
