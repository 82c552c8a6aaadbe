"""
Decoder Lifecycle
=================

Owns the active decoder and keeps the playlist playing.

State Machine:
    STARTING → STREAMING → ENDED → STARTING (next item, wrapping)
    STREAMING → FAILED   non-zero exit while not stopping
    any       → STOPPED  deliberate shutdown

Key Features:
    - Exactly one decoder is active at a time; the next one is only
      spawned after the previous one has exited
    - Demuxer carry-over is reset whenever the decoder is replaced
    - STOPPED is set before the decoder is killed, so the resulting exit
      is never mistaken for a failure or followed by a restart
    - Spawn errors are always fatal; non-zero exits are fatal when
      fail_fast is set, otherwise treated like end of stream
"""

import logging
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Optional, Protocol

from telecine.errors import DecoderError
from telecine.models.decoder import DecoderState
from telecine.models.frame import Frame
from telecine.observability.metrics import DecoderMetrics
from telecine.stream.demuxer import FrameDemuxer
from telecine.stream.playlist import Playlist


logger = logging.getLogger(__name__)


class DecoderHandle(Protocol):
    """What the lifecycle needs from a running decoder."""
    
    @property
    def stderr_tail(self) -> str: ...
    
    def chunks(self) -> AsyncIterator[bytes]: ...
    
    async def wait(self) -> int: ...
    
    def kill(self) -> None: ...


Spawner = Callable[[Path], Awaitable[DecoderHandle]]
FrameSink = Callable[[Frame], None]


class DecoderLifecycle:
    """
    Plays the playlist forever, one decoder at a time.
    
    Attributes:
        playlist: Media to play, cursor advanced per decoder start
        demuxer: Splits decoder output into frames
        state: Current DecoderState
        metrics: Operational metrics
        
    Example:
        lifecycle = DecoderLifecycle(playlist, demuxer, spawn, broadcaster.broadcast)
        task = asyncio.create_task(lifecycle.run())
        
        # Later, on SIGINT
        lifecycle.stop()
        await task
    """
    
    def __init__(
        self,
        playlist: Playlist,
        demuxer: FrameDemuxer,
        spawn: Spawner,
        on_frame: FrameSink,
        fail_fast: bool = True,
    ) -> None:
        """
        Initialize decoder lifecycle.
        
        Args:
            playlist: Media to loop over
            demuxer: Frame splitter for decoder output
            spawn: Coroutine starting a decoder for one media path
            on_frame: Called synchronously for each complete frame
            fail_fast: Raise DecoderError on non-zero decoder exit
        """
        self.playlist = playlist
        self.demuxer = demuxer
        self.fail_fast = fail_fast
        self._spawn = spawn
        self._on_frame = on_frame
        
        self.state: DecoderState = DecoderState.IDLE
        self.now_playing: Optional[Path] = None
        self.metrics = DecoderMetrics()
        
        self._current: Optional[DecoderHandle] = None
        self._running: bool = False
        self._stopping: bool = False
    
    @property
    def stopping(self) -> bool:
        """Whether a deliberate shutdown has been requested."""
        return self._stopping
    
    @property
    def active(self) -> bool:
        """Whether a decoder process is currently owned."""
        return self._current is not None
    
    async def run(self) -> None:
        """
        Play until stop() is called.
        
        Raises:
            DecoderError: On spawn failure, or on non-zero exit with fail_fast
            RuntimeError: If already running
        """
        if self._running:
            raise RuntimeError("DecoderLifecycle is already running")
        
        self._running = True
        try:
            while not self._stopping:
                await self._play_next()
        finally:
            self._running = False
    
    def stop(self) -> None:
        """
        Stop playback.
        
        Marks STOPPED first, then kills the active decoder. Safe to call
        more than once.
        """
        if not self._stopping:
            logger.info("Decoder lifecycle stopping")
        self._stopping = True
        self.state = DecoderState.STOPPED
        if self._current is not None:
            self._current.kill()
    
    async def _play_next(self) -> None:
        """Spawn a decoder for the next item and stream it to the end."""
        source = self.playlist.advance()
        self.demuxer.reset()
        self.state = DecoderState.STARTING
        self.now_playing = source
        
        logger.info(f"Now playing: {source.name}")
        handle = await self._spawn(source)
        self.metrics.decoders_started += 1
        
        if self._stopping:
            # stop() raced the spawn
            handle.kill()
            await handle.wait()
            return
        
        self._current = handle
        self.state = DecoderState.STREAMING
        try:
            async for chunk in handle.chunks():
                self.metrics.bytes_read += len(chunk)
                for frame in self.demuxer.feed(chunk):
                    self.metrics.frames_demuxed += 1
                    self._on_frame(frame)
            code = await handle.wait()
        finally:
            self._current = None
        
        self.demuxer.reset()
        
        if self._stopping:
            return
        
        if code != 0:
            self.metrics.failures += 1
            logger.error(
                f"Decoder exited with code {code} on {source.name}: "
                f"{handle.stderr_tail}"
            )
            if self.fail_fast:
                self.state = DecoderState.FAILED
                raise DecoderError(f"Decoder exited with code {code} on {source}")
        
        self.state = DecoderState.ENDED
        self.metrics.items_completed += 1
