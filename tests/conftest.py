"""
Test Configuration
==================

Pytest fixtures and fakes for telecine.

The fakes stand in for asyncio stream writers and ffmpeg processes so the
broadcast and lifecycle logic can be driven without sockets or
subprocesses.
"""

import asyncio
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import pytest

from telecine.models import Frame, RenderMode
from telecine.session.client import ClientSession


class FakeTransport:
    """Transport exposing write-buffer occupancy."""
    
    def __init__(self, buffered: int = 0) -> None:
        self.buffered = buffered
        self.aborted = False
    
    def get_write_buffer_size(self) -> int:
        return self.buffered
    
    def abort(self) -> None:
        self.aborted = True


class FakeWriter:
    """Records everything written, like an asyncio.StreamWriter."""
    
    def __init__(self, buffered: int = 0, fail: bool = False) -> None:
        self.transport = FakeTransport(buffered)
        self.chunks: List[bytes] = []
        self.fail = fail
        self.closed = False
    
    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)
    
    def write(self, data: bytes) -> None:
        if self.fail:
            raise ConnectionResetError("connection reset by peer")
        self.chunks.append(bytes(data))
    
    def is_closing(self) -> bool:
        return self.closed or self.transport.aborted
    
    def close(self) -> None:
        self.closed = True


class FakeDecoder:
    """Scripted decoder output."""
    
    def __init__(
        self,
        source: Path,
        chunks: Iterable[bytes] = (),
        returncode: int = 0,
        block: bool = False,
        stderr_tail: str = "",
    ) -> None:
        self.source = source
        self.returncode = returncode
        self.stderr_tail = stderr_tail
        self.killed = False
        self._chunks = list(chunks)
        self._block = block
        self._killed = asyncio.Event()
    
    async def chunks(self):
        for chunk in self._chunks:
            if self.killed:
                return
            yield chunk
            await asyncio.sleep(0)
        if self._block and not self.killed:
            await self._killed.wait()
    
    async def wait(self) -> int:
        return -9 if self.killed else self.returncode
    
    def kill(self) -> None:
        self.killed = True
        self._killed.set()


@pytest.fixture
def make_writer() -> Callable[..., FakeWriter]:
    """Factory for fake stream writers."""
    return FakeWriter


@pytest.fixture
def make_decoder() -> Callable[..., FakeDecoder]:
    """Factory for fake decoders."""
    return FakeDecoder


@pytest.fixture
def make_frame() -> Callable[..., Frame]:
    """Factory for frames filled with one colour or explicit pixels."""
    
    def _make(
        width: int = 4,
        height: int = 4,
        color=(0, 0, 0),
        pixels: Optional[List[tuple]] = None,
        index: int = 0,
    ) -> Frame:
        if pixels is None:
            pixels = [color] * (width * height)
        data = bytes(channel for pixel in pixels for channel in pixel)
        return Frame(index=index, width=width, height=height, data=data)
    
    return _make


@pytest.fixture
def make_session(make_writer) -> Callable[..., ClientSession]:
    """Factory for sessions over fake writers."""
    
    def _make(
        session_id: str = "127.0.0.1:50000",
        cols: Optional[int] = None,
        rows: Optional[int] = None,
        mode: RenderMode = RenderMode.TRUECOLOR,
        writer: Optional[FakeWriter] = None,
    ) -> ClientSession:
        session = ClientSession(session_id, writer or make_writer(), mode=mode)
        session.cols = cols
        session.rows = rows
        return session
    
    return _make


@pytest.fixture
def media_tree(tmp_path: Path) -> Path:
    """Directory of media files, nested, with non-media noise."""
    root = tmp_path / "videos"
    (root / "b_series").mkdir(parents=True)
    (root / "a_series").mkdir()
    (root / "b_series" / "ep2.mp4").write_bytes(b"")
    (root / "b_series" / "ep1.MKV").write_bytes(b"")
    (root / "a_series" / "intro.webm").write_bytes(b"")
    (root / "notes.txt").write_text("not a video")
    (root / "cover.jpg").write_bytes(b"")
    return root
