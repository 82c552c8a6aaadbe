"""
Playlist
========

Media discovery and the looping play cursor.

Either a single explicit file is looped, or a directory is searched
recursively and every matching file is played in lexicographic order of
its full path, wrapping around forever.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from telecine.errors import PlaylistError


logger = logging.getLogger(__name__)


def discover_media(media_dir: Path, extensions: Iterable[str]) -> List[Path]:
    """
    Find media files below a directory.
    
    Args:
        media_dir: Directory to search recursively
        extensions: File extensions without dot, matched case-insensitively
        
    Returns:
        Absolute paths sorted by full path
    """
    wanted = {"." + ext.lower().lstrip(".") for ext in extensions}
    found = [
        path.resolve()
        for path in media_dir.rglob("*")
        if path.is_file() and path.suffix.lower() in wanted
    ]
    return sorted(found, key=str)


def build_playlist(
    video_path: Optional[str],
    media_dir: str,
    extensions: Iterable[str],
) -> "Playlist":
    """
    Resolve the configured media source into a playlist.
    
    Raises:
        PlaylistError: If the explicit file or directory is missing, or
            the directory holds no media
    """
    if video_path:
        path = Path(video_path).resolve()
        if not path.exists():
            raise PlaylistError(f"Video file not found: {path}")
        return Playlist([path])
    
    directory = Path(media_dir).resolve()
    if not directory.is_dir():
        raise PlaylistError(f"Missing media directory: {directory}")
    
    files = discover_media(directory, extensions)
    if not files:
        raise PlaylistError(f"No video files found in {directory}")
    
    logger.info(f"Found {len(files)} media files in {directory}")
    return Playlist(files)


class Playlist:
    """
    Fixed sequence of media paths with a wrapping cursor.
    
    Attributes:
        items: Media paths, fixed at construction
        cursor: Index of the item advance() will return next
    """
    
    def __init__(self, items: Sequence[Path]) -> None:
        if not items:
            raise PlaylistError("Playlist must contain at least one item")
        self.items: List[Path] = list(items)
        self.cursor: int = 0
    
    def __len__(self) -> int:
        return len(self.items)
    
    @property
    def current(self) -> Path:
        """Item advance() will return next."""
        return self.items[self.cursor]
    
    def advance(self) -> Path:
        """Return the current item and move the cursor on, wrapping."""
        item = self.items[self.cursor]
        self.cursor = (self.cursor + 1) % len(self.items)
        return item
