"""
Terminal Fit
============

Computes the render rectangle for one terminal size.

Terminal cells are taller than they are wide, so the source aspect ratio
is divided by the cell aspect before fitting. One row of the window is
always left unused so that a full-height render never scrolls the
terminal.

Pure functions only: no state, no I/O.
"""

import math

from telecine.models.geometry import FitRectangle


def clamp_int(n: int, lo: int, hi: int) -> int:
    """Clamp n into [lo, hi]."""
    if n < lo:
        return lo
    if n > hi:
        return hi
    return n


def compute_fit(
    cols: int,
    rows: int,
    base_w: int,
    base_h: int,
    char_aspect: float = 2.0,
    max_dimension: int = 10000,
) -> FitRectangle:
    """
    Fit a base_w x base_h frame into a cols x rows terminal.
    
    Uses as much width as possible without exceeding the available
    height, then centres the result. Odd padding leaves the extra blank
    cell on the right/bottom. Degenerates to a 1x1 image for tiny
    terminals.
    
    Args:
        cols: Terminal columns
        rows: Terminal rows
        base_w: Source frame width in pixels
        base_h: Source frame height in pixels
        char_aspect: Cell height / cell width
        max_dimension: Upper clamp for cols and rows
        
    Returns:
        FitRectangle for this terminal
    """
    dest_w = clamp_int(int(cols), 1, max_dimension)
    dest_h = clamp_int(int(rows) - 1, 1, max_dimension)
    
    # displayed aspect = (out_h / out_w) * char_aspect must equal base_h / base_w
    target_h_over_w = (base_h / base_w) / char_aspect
    
    max_w_by_h = math.floor(dest_h / target_h_over_w)
    out_w = clamp_int(min(dest_w, max_w_by_h), 1, dest_w)
    out_h = clamp_int(min(dest_h, math.floor(out_w * target_h_over_w)), 1, dest_h)
    
    return FitRectangle(
        dest_w=dest_w,
        dest_h=dest_h,
        out_w=out_w,
        out_h=out_h,
        pad_x=(dest_w - out_w) // 2,
        pad_y=(dest_h - out_h) // 2,
    )
