"""
Frame Renderer
==============

Binds the renderers to the configured base resolution.

One FrameRenderer is shared by all clients; it holds no per-client state.
Each call recomputes the fit, because a client may resize between frames.
"""

import logging

from telecine.geometry.fit import compute_fit
from telecine.models.frame import Frame
from telecine.models.geometry import FitRectangle
from telecine.models.session import RenderMode
from telecine.render.ascii import render_ascii
from telecine.render.luma import build_ramp_lut
from telecine.render.truecolor import render_truecolor


logger = logging.getLogger(__name__)


class FrameRenderer:
    """
    Renders frames for arbitrary terminal sizes.
    
    Attributes:
        base_w: Source frame width
        base_h: Source frame height
        ramp: ASCII ramp, dark to bright
        char_aspect: Terminal cell height / width
        
    Example:
        renderer = FrameRenderer(base_w=240, base_h=135)
        text = renderer.render(frame, 80, 24, RenderMode.TRUECOLOR)
    """
    
    def __init__(
        self,
        base_w: int,
        base_h: int,
        ramp: str = " .:-=+*#%@",
        char_aspect: float = 2.0,
        max_dimension: int = 10000,
    ) -> None:
        if base_w < 1 or base_h < 1:
            raise ValueError("base dimensions must be positive")
        if char_aspect <= 0:
            raise ValueError("char_aspect must be positive")
        
        self.base_w = base_w
        self.base_h = base_h
        self.ramp = ramp
        self.char_aspect = char_aspect
        self.max_dimension = max_dimension
        self._lut = build_ramp_lut(ramp)
    
    def fit(self, cols: int, rows: int) -> FitRectangle:
        """Fit the base frame into a cols x rows terminal."""
        return compute_fit(
            cols,
            rows,
            self.base_w,
            self.base_h,
            char_aspect=self.char_aspect,
            max_dimension=self.max_dimension,
        )
    
    def render(self, frame: Frame, cols: int, rows: int, mode: RenderMode) -> bytes:
        """
        Render one frame for one client.
        
        Raises:
            ValueError: If the frame does not match the base resolution
        """
        if frame.width != self.base_w or frame.height != self.base_h:
            raise ValueError(
                f"{frame!r} does not match base size {self.base_w}x{self.base_h}"
            )
        
        fit = self.fit(cols, rows)
        if mode is RenderMode.TRUECOLOR:
            return render_truecolor(frame, fit)
        return render_ascii(frame, fit, self._lut)
