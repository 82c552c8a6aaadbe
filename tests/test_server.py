"""
Server Tests
============

TelnetServer over real loopback sockets, and Application runs with
scripted decoders.
"""

import asyncio
from pathlib import Path

from telecine.config import Settings
from telecine.main import Application
from telecine.models import RenderMode
from telecine.render import FrameRenderer
from telecine.server import Broadcaster, TelnetServer, format_peer
from telecine.session import SessionRegistry
from telecine.session.telnet import (
    CLEAR_SCREEN,
    CURSOR_HOME,
    DO_NAWS,
    HIDE_CURSOR,
    IAC,
    NAWS,
    SB,
    SE,
    SHOW_CURSOR,
)
from telecine.stream import Playlist


HANDSHAKE = DO_NAWS + CLEAR_SCREEN + CURSOR_HOME + HIDE_CURSOR


def naws(cols: int, rows: int) -> bytes:
    return bytes([IAC, SB, NAWS, cols >> 8, cols & 0xFF, rows >> 8, rows & 0xFF, IAC, SE])


async def _until(predicate, timeout: float = 2.0) -> None:
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.01)
    await asyncio.wait_for(_poll(), timeout=timeout)


class TestFormatPeer:
    """Tests for format_peer."""
    
    def test_ipv4(self):
        assert format_peer(("127.0.0.1", 50000)) == "127.0.0.1:50000"
    
    def test_ipv6_tuple(self):
        assert format_peer(("::1", 50000, 0, 0)) == "::1:50000"
    
    def test_missing(self):
        assert format_peer(None) == "?:?"


class TestTelnetServer:
    """Loopback tests for TelnetServer."""
    
    def test_viewer_session(self, make_frame):
        async def scenario():
            registry = SessionRegistry()
            server = TelnetServer(
                registry, host="127.0.0.1", port=0, default_mode=RenderMode.ASCII
            )
            broadcaster = Broadcaster(registry, FrameRenderer(4, 4, char_aspect=1.0))
            await server.start()
            try:
                reader, writer = await asyncio.open_connection("127.0.0.1", server.bound_port)
                
                assert await reader.readexactly(len(HANDSHAKE)) == HANDSHAKE
                await _until(lambda: len(registry) == 1)
                
                # No geometry yet: nothing is rendered
                assert broadcaster.broadcast(make_frame(color=(255, 255, 255))) == 0
                
                writer.write(naws(4, 3))
                await writer.drain()
                session = registry.snapshot()[0]
                await _until(lambda: session.negotiated)
                assert (session.cols, session.rows) == (4, 3)
                
                assert broadcaster.broadcast(make_frame(color=(255, 255, 255))) == 1
                frame_bytes = b"\x1b[H" + b" @@ \n" * 2
                assert await reader.readexactly(len(frame_bytes)) == frame_bytes
                
                writer.write(b"q")
                await writer.drain()
                tail = await asyncio.wait_for(reader.read(), timeout=2.0)
                assert tail == SHOW_CURSOR + b"\n"
                
                await _until(lambda: len(registry) == 0)
                writer.close()
            finally:
                await server.stop()
        
        asyncio.run(scenario())
    
    def test_disconnect_deregisters(self):
        async def scenario():
            registry = SessionRegistry()
            server = TelnetServer(registry, host="127.0.0.1", port=0)
            await server.start()
            try:
                reader, writer = await asyncio.open_connection("127.0.0.1", server.bound_port)
                await reader.readexactly(len(HANDSHAKE))
                await _until(lambda: len(registry) == 1)
                
                writer.close()
                await _until(lambda: len(registry) == 0)
            finally:
                await server.stop()
        
        asyncio.run(scenario())
    
    def test_stop_drops_connections(self):
        async def scenario():
            registry = SessionRegistry()
            server = TelnetServer(registry, host="127.0.0.1", port=0)
            await server.start()
            reader, writer = await asyncio.open_connection("127.0.0.1", server.bound_port)
            await reader.readexactly(len(HANDSHAKE))
            await _until(lambda: len(registry) == 1)
            
            await server.stop()
            
            assert server.bound_port is None
            try:
                remaining = await asyncio.wait_for(reader.read(), timeout=2.0)
            except ConnectionResetError:
                remaining = b""
            assert remaining == b""
            writer.close()
        
        asyncio.run(scenario())


def _settings() -> Settings:
    return Settings.model_validate({
        "server": {"host": "127.0.0.1", "port": 0},
        "video": {"width": 4, "height": 4},
    })


class TestApplication:
    """Application runs with scripted decoders."""
    
    def test_decoder_failure_exits_nonzero(self, make_decoder):
        spawned = []
        
        async def spawn(source: Path):
            spawned.append(source)
            return make_decoder(source, chunks=[bytes(48)], returncode=1)
        
        async def scenario():
            app = Application(_settings(), Playlist([Path("/media/a.mp4")]), spawn=spawn)
            code = await app.run()
            return app, code
        
        app, code = asyncio.run(scenario())
        
        assert code == 1
        assert len(spawned) == 1
        assert app.shutting_down
        assert app.lifecycle.metrics.frames_demuxed == 1
        assert app.broadcaster.metrics.frames_broadcast == 1
    
    def test_requested_shutdown_exits_zero(self, make_decoder):
        async def spawn(source: Path):
            return make_decoder(source, chunks=[bytes(48)], block=True)
        
        async def scenario():
            app = Application(_settings(), Playlist([Path("/media/a.mp4")]), spawn=spawn)
            asyncio.get_running_loop().call_later(0.05, app.request_shutdown, "test")
            code = await app.run()
            return app, code
        
        app, code = asyncio.run(scenario())
        
        assert code == 0
        assert app.lifecycle.state.value == "STOPPED"
        assert app.lifecycle.metrics.failures == 0
        assert app.lifecycle.metrics.decoders_started == 1
    
    def test_clean_end_of_stream_loops(self, make_decoder):
        spawned = []
        
        async def spawn(source: Path):
            spawned.append(source)
            if len(spawned) == 3:
                return make_decoder(source, block=True)
            return make_decoder(source)
        
        async def scenario():
            app = Application(
                _settings(),
                Playlist([Path("/media/a.mp4"), Path("/media/b.mp4")]),
                spawn=spawn,
            )
            
            async def stop_after_third():
                await _until(lambda: len(spawned) == 3)
                app.request_shutdown("test")
            
            stopper = asyncio.create_task(stop_after_third())
            code = await app.run()
            await stopper
            return code
        
        assert asyncio.run(scenario()) == 0
        assert [p.name for p in spawned] == ["a.mp4", "b.mp4", "a.mp4"]
    
    def test_requested_shutdown_restores_viewer_cursor(self, make_decoder):
        async def spawn(source: Path):
            return make_decoder(source, block=True)
        
        async def scenario():
            app = Application(_settings(), Playlist([Path("/media/a.mp4")]), spawn=spawn)
            run = asyncio.create_task(app.run())
            reader, writer = await _connect_viewer(app)
            
            app.request_shutdown("test")
            code = await asyncio.wait_for(run, timeout=5.0)
            received = await _read_to_end(reader)
            writer.close()
            return code, received
        
        code, received = asyncio.run(scenario())
        
        assert code == 0
        assert received.endswith(SHOW_CURSOR + b"\n")
    
    def test_decoder_failure_restores_viewer_cursor(self, make_decoder):
        viewer_ready = None
        
        async def spawn(source: Path):
            await viewer_ready.wait()
            return make_decoder(source, chunks=[bytes(48)], returncode=1)
        
        async def scenario():
            nonlocal viewer_ready
            viewer_ready = asyncio.Event()
            app = Application(_settings(), Playlist([Path("/media/a.mp4")]), spawn=spawn)
            run = asyncio.create_task(app.run())
            reader, writer = await _connect_viewer(app)
            
            viewer_ready.set()
            code = await asyncio.wait_for(run, timeout=5.0)
            received = await _read_to_end(reader)
            writer.close()
            return app, code, received
        
        app, code, received = asyncio.run(scenario())
        
        assert code == 1
        assert app.broadcaster.metrics.frames_rendered == 1
        assert received.endswith(SHOW_CURSOR + b"\n")


async def _connect_viewer(app: Application):
    """Connect a negotiated 40x12 viewer to a running Application."""
    await _until(lambda: app.server.bound_port is not None)
    reader, writer = await asyncio.open_connection("127.0.0.1", app.server.bound_port)
    assert await reader.readexactly(len(HANDSHAKE)) == HANDSHAKE
    
    writer.write(naws(40, 12))
    await writer.drain()
    await _until(lambda: any(s.negotiated for s in app.registry))
    return reader, writer


async def _read_to_end(reader: asyncio.StreamReader) -> bytes:
    received = bytearray()
    try:
        while True:
            chunk = await asyncio.wait_for(reader.read(65536), timeout=2.0)
            if not chunk:
                break
            received += chunk
    except ConnectionResetError:
        pass
    return bytes(received)
