"""Reshape local entries into a remote "currently playing + queue" value.

The remote playback model knows catalog tracks with ids, markets and
popularity.  Local files have none of that, so those fields get neutral
defaults and ``is_local`` is set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from trackshelf.entry import Entry, EntryCollection, Playable


@dataclass(frozen=True)
class QueueItem:
    """One track as the remote playback queue expects it."""

    name: str
    album: str
    artists: list[str]
    duration: timedelta
    is_local: bool = True
    id: str | None = None
    uri: str = ""
    popularity: int = 0
    explicit: bool = False
    available_markets: list[str] = field(default_factory=list)
    preview_url: str | None = None
    track_number: int = 0

    @property
    def duration_ms(self) -> int:
        return int(self.duration.total_seconds() * 1000)


@dataclass(frozen=True)
class CurrentQueue:
    currently_playing: QueueItem | None = None
    queue: list[QueueItem] = field(default_factory=list)


def to_item(entry: Entry) -> QueueItem | None:
    """Convert a playable entry; directories have no queue item."""
    if not isinstance(entry, Playable):
        return None
    return QueueItem(
        name=entry.name(),
        album=entry.album_name(),
        artists=entry.artist_names(),
        duration=entry.total_duration(),
    )


def to_queue(collection: EntryCollection, current_index: int) -> CurrentQueue:
    """Build the queue value for playback starting at *current_index*.

    Entries before *current_index* are never included.  An index outside the
    collection, negative ones included, yields an empty queue.
    """
    if not collection.in_bounds(current_index):
        return CurrentQueue()

    following = (to_item(entry) for entry in collection.entries[current_index + 1 :])
    return CurrentQueue(
        currently_playing=to_item(collection[current_index]),
        queue=[item for item in following if item is not None],
    )
