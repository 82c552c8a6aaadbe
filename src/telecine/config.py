"""
Telecine Configuration
======================

This module handles configuration loading for the telnet video server.

Configuration Sources (in order of precedence):
    1. Command-line flags (applied by telecine.main)
    2. Environment variables
    3. config.yaml file
    4. Default values (lowest priority)

Environment Variable Mapping:
    TELECINE_HOST            -> server.host
    TELECINE_PORT            -> server.port
    TELECINE_FPS             -> video.fps
    TELECINE_WIDTH           -> video.width
    TELECINE_HEIGHT          -> video.height
    TELECINE_VIDEO           -> video.path
    TELECINE_MEDIA_DIR       -> video.media_dir
    TELECINE_DROP_THRESHOLD  -> broadcast.drop_threshold_bytes
    TELECINE_FFMPEG          -> decoder.binary
    TELECINE_STATUS_PORT     -> status.port (also enables status server)
    TELECINE_LOG_LEVEL       -> logging.level

Example:
    from telecine.config import load_config

    settings = load_config()
    print(settings.server.port)
    print(settings.video.fps)
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from telecine.errors import ConfigError
from telecine.models.session import RenderMode


logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

LOG_FORMATS = {
    "json": '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}',
    "text": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


# =============================================================================
# Configuration Models
# =============================================================================

class ServerConfig(BaseModel):
    """Telnet listener configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=2323, ge=0, le=65535, description="Bind port (0 picks a free port)")


class VideoConfig(BaseModel):
    """Decoded frame geometry and media source selection."""

    fps: int = Field(default=15, ge=1, le=240, description="Output frame rate")
    width: int = Field(default=240, ge=1, le=4096, description="Base render width")
    height: int = Field(default=135, ge=1, le=4096, description="Base render height")
    path: Optional[str] = Field(
        default=None,
        description="Single media file to loop (disables directory playlist)",
    )
    media_dir: str = Field(
        default="./videos",
        description="Directory searched recursively when no path is given",
    )
    extensions: List[str] = Field(
        default_factory=lambda: ["mp4", "mkv", "webm", "mov", "avi"],
        min_length=1,
        description="Media file extensions (case-insensitive)",
    )


class RenderConfig(BaseModel):
    """Renderer configuration."""

    default_mode: RenderMode = Field(
        default=RenderMode.TRUECOLOR,
        description="Render mode for newly connected clients",
    )
    ramp: str = Field(
        default=" .:-=+*#%@",
        min_length=1,
        description="ASCII ramp ordered dark to bright",
    )
    char_aspect: float = Field(
        default=2.0,
        gt=0,
        description="Terminal cell height divided by width",
    )
    max_dimension: int = Field(
        default=10000,
        ge=1,
        description="Upper clamp for negotiated columns/rows",
    )

    @field_validator("ramp")
    @classmethod
    def _ramp_is_ascii(cls, value: str) -> str:
        if not value.isascii():
            raise ValueError("ramp must contain ASCII characters only")
        return value


class BroadcastConfig(BaseModel):
    """Fan-out and backpressure configuration."""

    drop_threshold_bytes: int = Field(
        default=1024 * 1024,
        ge=0,
        description="Skip a client's frame while more than this many bytes are unsent",
    )


class SessionConfig(BaseModel):
    """Per-client keystroke handling."""

    quit_keys: List[str] = Field(default_factory=lambda: ["q", "Q"])
    mode_keys: List[str] = Field(default_factory=lambda: ["m", "M"])


class DecoderConfig(BaseModel):
    """External decoder (ffmpeg) configuration."""

    binary: str = Field(default="ffmpeg", description="ffmpeg executable")
    realtime: bool = Field(
        default=True,
        description="Pace decoding at native speed (ffmpeg -re)",
    )
    read_chunk_size: int = Field(
        default=64 * 1024,
        ge=1,
        description="Bytes requested per read from decoder stdout",
    )
    stderr_tail_chars: int = Field(
        default=4000,
        ge=0,
        description="Characters of decoder stderr kept for error reports",
    )
    fail_fast: bool = Field(
        default=True,
        description="Stop the server when the decoder exits non-zero",
    )


class StatusConfig(BaseModel):
    """Optional HTTP status endpoint."""

    enabled: bool = Field(default=False, description="Serve /health and /metrics")
    host: str = Field(default="127.0.0.1", description="Bind host")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level name")
    format: Literal["json", "text"] = Field(default="text", description="Log format")

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(LOG_LEVELS)}")
        return level


class Settings(BaseModel):
    """
    Main settings class for telecine.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    server: ServerConfig = Field(default_factory=ServerConfig)
    video: VideoConfig = Field(default_factory=VideoConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    broadcast: BroadcastConfig = Field(default_factory=BroadcastConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    decoder: DecoderConfig = Field(default_factory=DecoderConfig)
    status: StatusConfig = Field(default_factory=StatusConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> Settings:
    """
    Load configuration from YAML file, environment variables and overrides.

    Priority (highest to lowest):
        1. overrides (command-line flags)
        2. Environment variables
        3. YAML config file
        4. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.
        overrides: Section -> {field: value} mapping applied last

    Returns:
        Settings: Loaded configuration

    Raises:
        ConfigError: If the file is unreadable or any value is invalid
    """
    if config_path is None:
        for path in (Path("config.yaml"), Path("config.yml")):
            if path.exists():
                config_path = str(path)
                break
    elif not Path(config_path).exists():
        raise ConfigError(f"Config file not found: {config_path}")

    config_data: Dict[str, Any] = {}
    if config_path:
        logger.info(f"Loading config from: {config_path}")
        try:
            with open(config_path, "r") as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(config_data, dict):
            raise ConfigError(f"Top level of {config_path} must be a mapping")

    try:
        _apply_env_overrides(config_data)
    except ValueError as e:
        raise ConfigError(f"Invalid environment override: {e}") from e

    for section, values in (overrides or {}).items():
        config_data.setdefault(section, {}).update(values)

    try:
        return Settings.model_validate(config_data)
    except ValidationError as e:
        raise ConfigError(str(e)) from e


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Server settings
    if env_host := os.environ.get("TELECINE_HOST"):
        config_data.setdefault("server", {})["host"] = env_host
    if env_port := os.environ.get("TELECINE_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Video settings
    if env_fps := os.environ.get("TELECINE_FPS"):
        config_data.setdefault("video", {})["fps"] = int(env_fps)
    if env_width := os.environ.get("TELECINE_WIDTH"):
        config_data.setdefault("video", {})["width"] = int(env_width)
    if env_height := os.environ.get("TELECINE_HEIGHT"):
        config_data.setdefault("video", {})["height"] = int(env_height)
    if env_video := os.environ.get("TELECINE_VIDEO"):
        config_data.setdefault("video", {})["path"] = env_video
    if env_dir := os.environ.get("TELECINE_MEDIA_DIR"):
        config_data.setdefault("video", {})["media_dir"] = env_dir

    # Backpressure
    if env_drop := os.environ.get("TELECINE_DROP_THRESHOLD"):
        config_data.setdefault("broadcast", {})["drop_threshold_bytes"] = int(env_drop)

    # Decoder
    if env_ffmpeg := os.environ.get("TELECINE_FFMPEG"):
        config_data.setdefault("decoder", {})["binary"] = env_ffmpeg

    # Status endpoint
    if env_status := os.environ.get("TELECINE_STATUS_PORT"):
        status = config_data.setdefault("status", {})
        status["port"] = int(env_status)
        status["enabled"] = True

    # Logging settings
    if env_log := os.environ.get("TELECINE_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger from settings.

    Replaces any handlers installed earlier, e.g. the fallback used to
    report a configuration error.
    """
    logging.basicConfig(
        level=settings.logging.level,
        format=LOG_FORMATS[settings.logging.format],
        datefmt="%Y-%m-%dT%H:%M:%S",
        force=True,
    )
    logger.debug(
        f"Logging configured: level={settings.logging.level}, "
        f"format={settings.logging.format}"
    )
