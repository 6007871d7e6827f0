"""Best-effort tag extraction using mutagen.

:func:`read_tags` never raises: files mutagen cannot open or parse yield
``None`` and the caller keeps an entry without metadata.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import FileType, MutagenError


@dataclass(frozen=True)
class TrackTags:
    """Metadata found in an audio file.  Every field is optional."""

    title: str | None = None
    artists: list[str] | None = None
    duration: timedelta | None = None
    album: str | None = None
    genre: str | None = None


def _first_value(audio: FileType, key: str) -> str | None:
    values = audio.get(key)
    if not values:
        return None
    value = str(values[0]).strip()
    return value or None


def _all_values(audio: FileType, key: str) -> list[str] | None:
    values = [str(v).strip() for v in audio.get(key) or []]
    values = [v for v in values if v]
    return values or None


def _duration(audio: FileType) -> timedelta | None:
    info = getattr(audio, "info", None)
    length = getattr(info, "length", None)
    if not length or length < 0:
        return None
    return timedelta(seconds=float(length))


def read_tags(path: str | Path) -> TrackTags | None:
    """Read title, artists, album, genre and duration from *path*.

    Returns ``None`` when the file cannot be read or its format is not
    recognised.  Missing individual tags are left as ``None``.
    """
    try:
        audio = MutagenFile(str(path), easy=True)
    except (MutagenError, OSError) as exc:
        logger.debug(f"Could not read tags from {path}: {exc}")
        return None
    if audio is None:
        logger.debug(f"Unsupported format for tag reading: {path}")
        return None

    return TrackTags(
        title=_first_value(audio, "title"),
        artists=_all_values(audio, "artist"),
        duration=_duration(audio),
        album=_first_value(audio, "album"),
        genre=_first_value(audio, "genre"),
    )
