"""
Status Endpoint
===============

Optional read-only HTTP surface for operators.

Endpoints:
    GET  /          - Service information
    GET  /health    - Liveness probe
    GET  /metrics   - Broadcast and decoder counters
    GET  /sessions  - Connected viewers

The app runs under uvicorn inside the main event loop, so handlers see
the same state the frame loop mutates without any locking.
"""

import contextlib
import logging
import time
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from telecine import __version__
from telecine.server.broadcaster import Broadcaster
from telecine.session.registry import SessionRegistry
from telecine.stream.lifecycle import DecoderLifecycle


logger = logging.getLogger(__name__)


def create_status_app(
    registry: SessionRegistry,
    broadcaster: Broadcaster,
    lifecycle: DecoderLifecycle,
    started_at: Optional[float] = None,
) -> FastAPI:
    """Build the FastAPI status application."""
    startup_time = started_at if started_at is not None else time.time()
    
    app = FastAPI(
        title="telecine",
        description="Telnet video streaming server status",
        version=__version__,
    )
    
    @app.get("/")
    async def root() -> JSONResponse:
        """Service information endpoint."""
        now_playing = lifecycle.now_playing
        return JSONResponse({
            "service": "telecine",
            "version": __version__,
            "decoder_state": lifecycle.state.value,
            "now_playing": now_playing.name if now_playing else None,
            "playlist_length": len(lifecycle.playlist),
            "clients": len(registry),
        })
    
    @app.get("/health")
    async def health() -> JSONResponse:
        """
        Liveness probe.
        
        Returns 503 once the decoder has failed or stopped.
        """
        alive = lifecycle.state.value not in ("FAILED", "STOPPED")
        return JSONResponse(
            {
                "status": "healthy" if alive else "unhealthy",
                "decoder_state": lifecycle.state.value,
                "uptime_seconds": round(time.time() - startup_time, 1),
            },
            status_code=200 if alive else 503,
        )
    
    @app.get("/metrics")
    async def metrics() -> JSONResponse:
        """Counters for observability."""
        return JSONResponse({
            "uptime_seconds": round(time.time() - startup_time, 1),
            "clients": len(registry),
            "broadcast": broadcaster.metrics.to_dict(),
            "decoder": lifecycle.metrics.to_dict(),
        })
    
    @app.get("/sessions")
    async def sessions() -> JSONResponse:
        """Connected viewers and their negotiated geometry."""
        return JSONResponse([
            {
                "id": session.id,
                "cols": session.cols,
                "rows": session.rows,
                "mode": session.mode.value,
                "negotiated": session.negotiated,
            }
            for session in registry
        ])
    
    return app


class StatusServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the application."""
    
    def install_signal_handlers(self) -> None:
        pass
    
    @contextlib.contextmanager
    def capture_signals(self):
        yield


def build_status_server(app: FastAPI, host: str, port: int) -> StatusServer:
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level="warning",
        lifespan="off",
    )
    return StatusServer(config)
