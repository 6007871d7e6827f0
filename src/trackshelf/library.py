"""Directory scanner: lists one directory level as local entries.

Given a directory such as::

    <path>/
        Live Sets/
        b.mp3
        a.flac
        cover.jpg

:func:`scan_directory` returns ``["..", "Live Sets", "a.flac", "b.mp3"]``:
the parent marker, then sub-directories, then playable files, each group
sorted by file name.  Files without a recognised audio extension are left
out.  Sub-directories are not expanded; navigating into one means scanning
it again.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Iterable

from loguru import logger

from trackshelf.entry import PARENT_MARKER, Directory, Entry, EntryCollection, Playable
from trackshelf.tags import TrackTags, read_tags

PLAYABLE_EXTENSIONS: frozenset[str] = frozenset({".mp3", ".flac"})

TagReader = Callable[[str], TrackTags | None]


def normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    """Lower-case *extensions* and make sure each starts with a dot."""
    return frozenset(
        ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        for ext in extensions
        if ext
    )


def is_playable(name: str, extensions: Iterable[str] = PLAYABLE_EXTENSIONS) -> bool:
    """Return ``True`` if *name* carries one of *extensions* (case-insensitive)."""
    return _has_extension(name, normalize_extensions(extensions))


def _has_extension(name: str, allowed: frozenset[str]) -> bool:
    suffix = os.path.splitext(name)[1].lower()
    return bool(suffix) and suffix in allowed


def make_playable(full_path: str, tags: TrackTags | None) -> Playable:
    """Build a :class:`Playable` for *full_path*, copying whatever *tags* has."""
    if tags is None:
        return Playable(full_path=full_path)
    return Playable(
        full_path=full_path,
        title=tags.title,
        artists=tags.artists,
        duration=tags.duration,
        album=tags.album,
        genre=tags.genre,
    )


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError as exc:
        logger.debug(f"Skipping {path}: {exc}")
        return False


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError as exc:
        logger.debug(f"Skipping {path}: {exc}")
        return False


def _list_children(path: Path) -> list[Path]:
    try:
        return list(path.iterdir())
    except OSError as exc:
        logger.warning(f"Could not list directory {path}: {exc}")
        return []


def scan_directory(
    path: str | Path,
    extensions: Iterable[str] = PLAYABLE_EXTENSIONS,
    tag_reader: TagReader = read_tags,
) -> EntryCollection:
    """Return the sorted entries of *path*.

    A path that is not a directory yields an empty collection.  Otherwise the
    result always holds the ``".."`` parent marker, even when the listing
    itself fails.
    """
    path = Path(path)
    if not _is_dir(path):
        logger.debug(f"Not a directory, nothing to scan: {path}")
        return EntryCollection()

    allowed = normalize_extensions(extensions)
    entries: list[Entry] = [Directory(full_path=PARENT_MARKER)]

    for child in _list_children(path):
        full_path = str(child)
        if _is_dir(child):
            entries.append(Directory(full_path=full_path))
        elif _is_file(child) and _has_extension(child.name, allowed):
            entries.append(make_playable(full_path, tag_reader(full_path)))

    collection = EntryCollection.from_unsorted(entries)
    logger.debug(f"Scanned {path}: {len(collection)} entries")
    return collection
