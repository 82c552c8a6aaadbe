"""
Nearest-Neighbour Sampling
==========================

Picks one source pixel per output cell, no blending.

Output index o along an axis maps to source index
floor(o * base_len / out_len), independently for x and y.
"""

import numpy as np

from telecine.models.frame import Frame
from telecine.models.geometry import FitRectangle


def sample_indices(out_len: int, base_len: int) -> np.ndarray:
    """Source indices for each of out_len output positions."""
    return (np.arange(out_len, dtype=np.int64) * base_len) // out_len


def sample_pixels(frame: Frame, fit: FitRectangle) -> np.ndarray:
    """
    Sample a frame down (or up) to the fit's output size.
    
    Args:
        frame: Source frame
        fit: Target rectangle
        
    Returns:
        uint8 array of shape (out_h, out_w, 3)
    """
    pixels = np.frombuffer(frame.data, dtype=np.uint8).reshape(
        frame.height, frame.width, 3
    )
    ys = sample_indices(fit.out_h, frame.height)
    xs = sample_indices(fit.out_w, frame.width)
    return pixels[ys[:, None], xs[None, :]]
