"""
Render Tests
============

Luma conversion, ramp lookup and both renderers.
"""

import numpy as np
import pytest

from telecine.geometry import compute_fit
from telecine.models import RenderMode
from telecine.render import (
    FrameRenderer,
    build_ramp_lut,
    render_ascii,
    render_truecolor,
    rgb_to_luma,
)
from telecine.render.sampling import sample_indices


BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
RED = (255, 0, 0)
BLUE = (0, 0, 255)


class TestLuma:
    """Tests for the integer luma approximation."""
    
    def test_extremes(self):
        rgb = np.array([BLACK, WHITE], dtype=np.uint8)
        assert rgb_to_luma(rgb).tolist() == [0, 255]
    
    def test_channel_weights(self):
        """Green dominates, blue contributes least."""
        rgb = np.array([RED, (0, 255, 0), BLUE], dtype=np.uint8)
        assert rgb_to_luma(rgb).tolist() == [53, 182, 18]
    
    def test_keeps_leading_shape(self):
        rgb = np.zeros((3, 5, 3), dtype=np.uint8)
        assert rgb_to_luma(rgb).shape == (3, 5)


class TestRampLut:
    """Tests for the ramp lookup table."""
    
    def test_endpoints(self):
        lut = build_ramp_lut(" .:-=+*#%@")
        assert len(lut) == 256
        assert chr(lut[0]) == " "
        assert chr(lut[255]) == "@"
    
    def test_non_decreasing_along_ramp(self):
        ramp = " .:-=+*#%@"
        lut = build_ramp_lut(ramp)
        positions = [ramp.index(chr(code)) for code in lut]
        assert positions == sorted(positions)
    
    def test_every_character_used(self):
        ramp = " .:-=+*#%@"
        lut = build_ramp_lut(ramp)
        assert {chr(code) for code in lut} == set(ramp)
    
    def test_single_character_ramp(self):
        assert set(build_ramp_lut("#").tolist()) == {ord("#")}
    
    def test_empty_ramp_rejected(self):
        with pytest.raises(ValueError):
            build_ramp_lut("")


class TestSampling:
    """Tests for nearest-neighbour index mapping."""
    
    def test_downsample(self):
        assert sample_indices(2, 4).tolist() == [0, 2]
    
    def test_upsample(self):
        assert sample_indices(8, 4).tolist() == [0, 0, 1, 1, 2, 2, 3, 3]
    
    def test_identity(self):
        assert sample_indices(5, 5).tolist() == [0, 1, 2, 3, 4]


@pytest.fixture
def checker(make_frame):
    """2x2 frame: black/white on top, white/black below."""
    return make_frame(width=2, height=2, pixels=[BLACK, WHITE, WHITE, BLACK])


class TestAsciiRenderer:
    """Tests for render_ascii."""
    
    def test_exact_output(self, checker):
        fit = compute_fit(4, 3, 2, 2, char_aspect=1.0)
        out = render_ascii(checker, fit, build_ramp_lut(" .:-=+*#%@"))
        
        assert out == b"\x1b[H  @ \n @  \n"
    
    def test_letterboxed_block_fills_terminal(self, make_frame):
        frame = make_frame(width=4, height=4, color=WHITE)
        fit = compute_fit(20, 10, 4, 4)
        out = render_ascii(frame, fit, build_ramp_lut(" .:-=+*#%@"))
        
        assert out.startswith(b"\x1b[H")
        lines = out[len(b"\x1b[H"):].split(b"\n")
        assert lines[-1] == b""
        assert len(lines) - 1 == 10 - 1
        assert all(len(line) == 20 for line in lines[:-1])
        assert out.count(b"@") == fit.out_w * fit.out_h


class TestTruecolorRenderer:
    """Tests for render_truecolor."""
    
    def test_exact_output(self, checker):
        fit = compute_fit(4, 3, 2, 2, char_aspect=1.0)
        out = render_truecolor(checker, fit)
        
        expected = (
            b"\x1b[H"
            b" \x1b[48;2;0;0;0m \x1b[48;2;255;255;255m \x1b[0m \n"
            b" \x1b[48;2;255;255;255m \x1b[48;2;0;0;0m \x1b[0m \n"
        )
        assert out == expected
    
    def test_flat_colour_emits_one_escape_per_line(self, make_frame):
        frame = make_frame(width=8, height=8, color=(10, 20, 30))
        fit = compute_fit(40, 12, 8, 8)
        out = render_truecolor(frame, fit)
        
        assert out.count(b"\x1b[48;2;10;20;30m") == fit.out_h
        assert out.count(b"\x1b[0m") == fit.out_h
    
    def test_colour_change_emits_new_escape(self, make_frame):
        pixels = [RED, RED, BLUE, BLUE] * 4
        frame = make_frame(width=4, height=4, pixels=pixels)
        fit = compute_fit(8, 5, 4, 4)
        out = render_truecolor(frame, fit)
        
        assert (fit.out_w, fit.out_h) == (8, 4)
        assert out.count(b"\x1b[48;2;255;0;0m") == 4
        assert out.count(b"\x1b[48;2;0;0;255m") == 4
        assert out.count(b" ") == 8 * 4
    
    def test_line_count_matches_terminal(self, make_frame):
        frame = make_frame(width=4, height=4, color=RED)
        fit = compute_fit(30, 17, 4, 4)
        out = render_truecolor(frame, fit)
        
        assert out.count(b"\n") == 16


class TestFrameRenderer:
    """Tests for the mode dispatcher."""
    
    def test_dispatch_by_mode(self, make_frame):
        renderer = FrameRenderer(base_w=4, base_h=4)
        frame = make_frame(color=WHITE)
        
        ascii_out = renderer.render(frame, 20, 6, RenderMode.ASCII)
        color_out = renderer.render(frame, 20, 6, RenderMode.TRUECOLOR)
        
        assert b"@" in ascii_out
        assert b"\x1b[48;2;" not in ascii_out
        assert b"\x1b[48;2;255;255;255m" in color_out
    
    def test_rejects_frame_of_wrong_size(self, make_frame):
        renderer = FrameRenderer(base_w=8, base_h=8)
        with pytest.raises(ValueError):
            renderer.render(make_frame(width=4, height=4), 80, 24, RenderMode.ASCII)
    
    def test_invalid_construction(self):
        with pytest.raises(ValueError):
            FrameRenderer(base_w=0, base_h=10)
        with pytest.raises(ValueError):
            FrameRenderer(base_w=10, base_h=10, char_aspect=0)
