"""
Geometry Module
===============

Fitting the fixed-resolution source frame into a terminal window.
"""

from telecine.geometry.fit import compute_fit, clamp_int

__all__ = [
    "compute_fit",
    "clamp_int",
]
