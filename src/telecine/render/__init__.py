"""
Render Module
=============

Turns raw rgb24 frames into escape-coded terminal text.

This module provides:
    - rgb_to_luma / build_ramp_lut: Grayscale conversion helpers
    - render_ascii: Luma mapped onto a character ramp
    - render_truecolor: 24-bit background colour blocks
    - FrameRenderer: Fits and renders a frame for one client

Example:
    from telecine.render import FrameRenderer
    from telecine.models import RenderMode
    
    renderer = FrameRenderer(base_w=240, base_h=135)
    payload = renderer.render(frame, cols=80, rows=24, mode=RenderMode.ASCII)
    writer.write(payload)
"""

from telecine.render.luma import build_ramp_lut, rgb_to_luma
from telecine.render.sampling import sample_pixels
from telecine.render.ascii import render_ascii
from telecine.render.truecolor import render_truecolor
from telecine.render.renderer import FrameRenderer


__all__ = [
    "build_ramp_lut",
    "rgb_to_luma",
    "sample_pixels",
    "render_ascii",
    "render_truecolor",
    "FrameRenderer",
]
