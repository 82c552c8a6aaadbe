"""
Luma Conversion
===============

Integer grayscale approximation and the ramp lookup table.

Luma uses fixed-point weights close to Rec. 709
(0.21 R + 0.72 G + 0.07 B):

    luma = (54 * r + 183 * g + 19 * b) >> 8

The weights sum to 256, so the result always stays in 0..255.
"""

import numpy as np


def rgb_to_luma(rgb: np.ndarray) -> np.ndarray:
    """
    Convert an (..., 3) uint8 RGB array to uint8 luma.
    
    Args:
        rgb: Array whose last axis is R, G, B
        
    Returns:
        Array with the last axis removed, dtype=uint8
    """
    wide = rgb.astype(np.uint32)
    luma = (54 * wide[..., 0] + 183 * wide[..., 1] + 19 * wide[..., 2]) >> 8
    return luma.astype(np.uint8)


def build_ramp_lut(ramp: str) -> np.ndarray:
    """
    Precompute the 256-entry luma -> character code table.
    
    Entry v holds ramp[floor(v * (len(ramp) - 1) / 255)], so the table is
    non-decreasing along the ramp for increasing luma.
    
    Args:
        ramp: ASCII characters ordered dark to bright
        
    Returns:
        uint8 array of length 256 holding character codes
    """
    if not ramp:
        raise ValueError("ramp must not be empty")
    
    codes = np.frombuffer(ramp.encode("ascii"), dtype=np.uint8)
    index = (np.arange(256, dtype=np.int64) * (len(codes) - 1)) // 255
    return codes[index]
