"""
Decoder Process
===============

Thin asyncio wrapper around one ffmpeg process.

The process decodes a single media file to back-to-back raw rgb24 frames
on stdout, scaled to the base resolution and resampled to the target
frame rate. stderr is drained continuously (so ffmpeg never blocks on a
full pipe) and only its tail is kept for error reports.

Design Rules:
    - Does NOT split the stream into frames (see FrameDemuxer)
    - Does NOT decide what plays next (see DecoderLifecycle)
    - Spawn failures surface as DecoderError
"""

import asyncio
import logging
from pathlib import Path
from typing import AsyncIterator, List, Optional

from telecine.errors import DecoderError


logger = logging.getLogger(__name__)


def build_ffmpeg_args(
    source: Path,
    width: int,
    height: int,
    fps: int,
    realtime: bool = True,
) -> List[str]:
    """
    Build ffmpeg arguments for raw rgb24 output on stdout.
    
    rgb24 is always requested so clients can switch render modes without
    restarting the decoder.
    """
    args: List[str] = []
    if realtime:
        args.append("-re")
    args += [
        "-i", str(source),
        "-vf", f"scale={width}:{height},fps={fps}",
        "-f", "rawvideo",
        "-pix_fmt", "rgb24",
        "-",
    ]
    return args


class DecoderProcess:
    """
    One running ffmpeg decode of one media file.
    
    Attributes:
        source: Media file being decoded
        
    Example:
        proc = await DecoderProcess.spawn("ffmpeg", path, 240, 135, 15)
        async for chunk in proc.chunks():
            ...
        code = await proc.wait()
    """
    
    def __init__(
        self,
        source: Path,
        process: asyncio.subprocess.Process,
        read_chunk_size: int = 64 * 1024,
        stderr_tail_chars: int = 4000,
    ) -> None:
        self.source = source
        self._process = process
        self._read_chunk_size = read_chunk_size
        self._stderr_tail_chars = stderr_tail_chars
        self._stderr = ""
        self._stderr_task: Optional[asyncio.Task] = None
        if process.stderr is not None:
            self._stderr_task = asyncio.create_task(
                self._drain_stderr(process.stderr),
                name=f"ffmpeg_stderr:{source.name}",
            )
    
    @classmethod
    async def spawn(
        cls,
        binary: str,
        source: Path,
        width: int,
        height: int,
        fps: int,
        realtime: bool = True,
        read_chunk_size: int = 64 * 1024,
        stderr_tail_chars: int = 4000,
    ) -> "DecoderProcess":
        """
        Start ffmpeg for one media file.
        
        Raises:
            DecoderError: If the process cannot be started
        """
        args = build_ffmpeg_args(source, width, height, fps, realtime=realtime)
        try:
            process = await asyncio.create_subprocess_exec(
                binary,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise DecoderError(f"Failed to start {binary}: {e}") from e
        
        logger.debug(f"Spawned {binary} pid={process.pid} for {source}")
        return cls(
            source,
            process,
            read_chunk_size=read_chunk_size,
            stderr_tail_chars=stderr_tail_chars,
        )
    
    @property
    def stderr_tail(self) -> str:
        """Last characters written to stderr."""
        return self._stderr
    
    async def chunks(self) -> AsyncIterator[bytes]:
        """Yield stdout chunks until end of stream."""
        stdout = self._process.stdout
        if stdout is None:
            return
        while True:
            chunk = await stdout.read(self._read_chunk_size)
            if not chunk:
                return
            yield chunk
    
    async def wait(self) -> int:
        """Wait for exit and for stderr to be fully drained."""
        code = await self._process.wait()
        if self._stderr_task is not None:
            await self._stderr_task
        return code
    
    def kill(self) -> None:
        """Forcibly terminate the process (SIGKILL)."""
        if self._process.returncode is not None:
            return
        try:
            self._process.kill()
        except ProcessLookupError:
            pass  # Already exited
    
    async def _drain_stderr(self, stream: asyncio.StreamReader) -> None:
        """Keep only the tail of stderr."""
        while True:
            data = await stream.read(4096)
            if not data:
                break
            if self._stderr_tail_chars <= 0:
                continue
            text = self._stderr + data.decode("utf-8", errors="replace")
            self._stderr = text[-self._stderr_tail_chars:]
