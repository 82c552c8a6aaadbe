"""
Stream Module
=============

Decoding media into frames and keeping playback going.

This module provides the ingestion layer for telecine:
    - FrameDemuxer: Reassembles fixed-size frames from decoder output
    - DecoderProcess: asyncio wrapper around one ffmpeg process
    - Playlist: Looping cursor over discovered media
    - DecoderLifecycle: Spawns, streams and replaces decoders

Example:
    from telecine.stream import DecoderLifecycle, FrameDemuxer, build_playlist
    
    playlist = build_playlist(None, "./videos", ["mp4"])
    demuxer = FrameDemuxer(width=240, height=135)
    lifecycle = DecoderLifecycle(playlist, demuxer, spawn, broadcaster.broadcast)
    
    task = asyncio.create_task(lifecycle.run())
"""

from telecine.stream.demuxer import FrameDemuxer
from telecine.stream.decoder import DecoderProcess, build_ffmpeg_args
from telecine.stream.playlist import Playlist, build_playlist, discover_media
from telecine.stream.lifecycle import DecoderLifecycle


__all__ = [
    "FrameDemuxer",
    "DecoderProcess",
    "build_ffmpeg_args",
    "Playlist",
    "build_playlist",
    "discover_media",
    "DecoderLifecycle",
]
