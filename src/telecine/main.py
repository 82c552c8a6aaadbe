"""
Telecine Main Application
=========================

Entry point wiring the telnet server, decoder lifecycle and broadcaster.

All process-wide mutable state (session registry, active decoder,
playlist cursor, shutdown flag) lives on one Application object and is
only touched from the asyncio event loop.

Exit Codes:
    0 - Deliberate shutdown (SIGINT / SIGTERM)
    1 - Invalid configuration, missing media, bind failure or decoder failure
"""

import argparse
import asyncio
import logging
import signal
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from telecine import __version__
from telecine.config import Settings, load_config, setup_logging
from telecine.errors import ConfigError, DecoderError, PlaylistError
from telecine.observability.status import build_status_server, create_status_app
from telecine.render.renderer import FrameRenderer
from telecine.server.broadcaster import Broadcaster
from telecine.server.telnet_server import TelnetServer
from telecine.session.registry import SessionRegistry
from telecine.stream.decoder import DecoderProcess
from telecine.stream.demuxer import FrameDemuxer
from telecine.stream.lifecycle import DecoderLifecycle, Spawner
from telecine.stream.playlist import Playlist, build_playlist


logger = logging.getLogger(__name__)


# =============================================================================
# Application
# =============================================================================

class Application:
    """
    Server context shared by every event handler.

    Attributes:
        settings: Effective configuration
        registry: Connected sessions
        broadcaster: Per-frame fan-out
        lifecycle: Active decoder and playlist cursor
        server: Telnet listener
        shutting_down: Set once shutdown has been requested
    """

    def __init__(
        self,
        settings: Settings,
        playlist: Playlist,
        spawn: Optional[Spawner] = None,
    ) -> None:
        self.settings = settings
        self.shutting_down: bool = False
        self.started_at: float = time.time()

        video = settings.video
        self.registry = SessionRegistry()
        self.renderer = FrameRenderer(
            base_w=video.width,
            base_h=video.height,
            ramp=settings.render.ramp,
            char_aspect=settings.render.char_aspect,
            max_dimension=settings.render.max_dimension,
        )
        self.broadcaster = Broadcaster(
            self.registry,
            self.renderer,
            drop_threshold_bytes=settings.broadcast.drop_threshold_bytes,
        )
        self.lifecycle = DecoderLifecycle(
            playlist,
            FrameDemuxer(video.width, video.height),
            spawn or self._spawn_decoder,
            self.broadcaster.broadcast,
            fail_fast=settings.decoder.fail_fast,
        )
        self.server = TelnetServer(
            self.registry,
            host=settings.server.host,
            port=settings.server.port,
            default_mode=settings.render.default_mode,
            quit_keys=settings.session.quit_keys,
            mode_keys=settings.session.mode_keys,
        )

        self._shutdown_event = asyncio.Event()
        self._status_server = None
        self._status_task: Optional[asyncio.Task] = None

    async def _spawn_decoder(self, source: Path) -> DecoderProcess:
        video = self.settings.video
        decoder = self.settings.decoder
        return await DecoderProcess.spawn(
            decoder.binary,
            source,
            video.width,
            video.height,
            video.fps,
            realtime=decoder.realtime,
            read_chunk_size=decoder.read_chunk_size,
            stderr_tail_chars=decoder.stderr_tail_chars,
        )

    def restore_cursors(self) -> None:
        """Best-effort cursor restore on every open session."""
        for session in self.registry:
            try:
                session.restore_cursor()
            except Exception as e:
                logger.debug(f"Cursor restore failed for {session.id}: {e}")

    def request_shutdown(self, reason: str = "shutdown requested") -> None:
        """
        Begin deliberate shutdown.

        The flag is set before the decoder is killed, so its exit is not
        treated as a failure or followed by a restart.
        """
        if self.shutting_down:
            return
        logger.info(f"{reason}, shutting down")
        self.shutting_down = True
        self.restore_cursors()
        self.lifecycle.stop()
        self._shutdown_event.set()

    async def run(self) -> int:
        """
        Serve until shutdown or decoder failure.

        Returns:
            Process exit code
        """
        await self.server.start()
        self._log_settings()

        if self.settings.status.enabled:
            await self._start_status()

        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(
                    signum, self.request_shutdown, f"{signal.Signals(signum).name} received"
                )
            except (NotImplementedError, RuntimeError):
                pass  # Not supported on this platform / thread

        decoder_task = asyncio.create_task(self.lifecycle.run(), name="decoder_lifecycle")
        shutdown_task = asyncio.create_task(self._shutdown_event.wait(), name="shutdown_wait")

        exit_code = 0
        try:
            await asyncio.wait(
                {decoder_task, shutdown_task},
                return_when=asyncio.FIRST_COMPLETED,
            )

            if not decoder_task.done():
                try:
                    await asyncio.wait_for(decoder_task, timeout=5.0)
                except asyncio.TimeoutError:
                    logger.warning("Decoder did not exit in time")

            if decoder_task.done() and not decoder_task.cancelled():
                error = decoder_task.exception()
                if isinstance(error, DecoderError):
                    logger.error(f"Fatal decoder error: {error}")
                    exit_code = 1
                elif error is not None:
                    logger.error("Decoder lifecycle crashed", exc_info=error)
                    exit_code = 1

            if exit_code != 0 and not self.shutting_down:
                self.shutting_down = True
                self.lifecycle.stop()
                self.restore_cursors()
        finally:
            for task in (decoder_task, shutdown_task):
                if not task.done():
                    task.cancel()
            for signum in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.remove_signal_handler(signum)
                except (NotImplementedError, RuntimeError):
                    pass
            await self._stop_status()
            await self.server.stop()

        logger.info("Shutdown complete")
        return exit_code

    async def _start_status(self) -> None:
        status = self.settings.status
        app = create_status_app(
            self.registry,
            self.broadcaster,
            self.lifecycle,
            started_at=self.started_at,
        )
        self._status_server = build_status_server(app, status.host, status.port)
        self._status_task = asyncio.create_task(
            self._status_server.serve(), name="status_server"
        )
        logger.info(f"Status endpoint on http://{status.host}:{status.port}/")

    async def _stop_status(self) -> None:
        if self._status_server is None or self._status_task is None:
            return
        self._status_server.should_exit = True
        try:
            await asyncio.wait_for(self._status_task, timeout=2.0)
        except asyncio.TimeoutError:
            self._status_task.cancel()
        self._status_server = None
        self._status_task = None

    def _log_settings(self) -> None:
        video = self.settings.video
        logger.info(
            f"Settings: mode_default={self.settings.render.default_mode.value}, "
            f"fps={video.fps}, base={video.width}x{video.height}, "
            f"video={video.path or video.media_dir}, "
            f"playlist={len(self.lifecycle.playlist)} items"
        )


# =============================================================================
# Command Line
# =============================================================================

def build_arg_parser() -> argparse.ArgumentParser:
    # -h is the frame height, so --help has no short form
    parser = argparse.ArgumentParser(
        prog="telecine",
        description="Stream video as ANSI art to telnet clients.",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="show this help message and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-p", "--port", type=int, help="telnet port (default 2323)")
    parser.add_argument("-f", "--fps", type=int, help="frame rate (default 15)")
    parser.add_argument("-w", "--width", type=int, help="base render width (default 240)")
    parser.add_argument("-h", "--height", type=int, help="base render height (default 135)")
    parser.add_argument("-v", "--video", help="loop a single file instead of ./videos")
    parser.add_argument("--media-dir", help="directory searched for media files")
    parser.add_argument("--config", help="path to config.yaml")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    return parser


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Dict[str, Any]]:
    """
    Map parsed flags onto config sections.

    Raises:
        ConfigError: If -v/--video was given an empty path
    """
    overrides: Dict[str, Dict[str, Any]] = {}

    if args.port is not None:
        overrides.setdefault("server", {})["port"] = args.port
    for name in ("fps", "width", "height"):
        value = getattr(args, name)
        if value is not None:
            overrides.setdefault("video", {})[name] = value
    if args.video is not None:
        if not args.video.strip():
            raise ConfigError("-v/--video requires a path")
        overrides.setdefault("video", {})["path"] = args.video
    if args.media_dir is not None:
        overrides.setdefault("video", {})["media_dir"] = args.media_dir
    if args.log_level is not None:
        overrides.setdefault("logging", {})["level"] = args.log_level

    return overrides


def main(argv: Optional[List[str]] = None) -> int:
    """Run the server; returns the process exit code."""
    args = build_arg_parser().parse_args(argv)

    try:
        settings = load_config(args.config, overrides=overrides_from_args(args))
    except ConfigError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.critical(f"Invalid configuration: {e}")
        return 1

    setup_logging(settings)

    try:
        playlist = build_playlist(
            settings.video.path,
            settings.video.media_dir,
            settings.video.extensions,
        )
    except PlaylistError as e:
        logger.critical(str(e))
        return 1

    async def _serve() -> int:
        app = Application(settings, playlist)
        return await app.run()

    try:
        return asyncio.run(_serve())
    except OSError as e:
        logger.critical(f"Failed to start server: {e}")
        return 1


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
