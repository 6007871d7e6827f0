"""Local entries: directories and playable tracks found by a directory scan.

An :data:`Entry` is either a :class:`Directory` or a :class:`Playable`.
Only playables carry selection state and tag metadata.

Entries sort directories first, then tracks, each group by the file-name
component of ``full_path``.  The synthetic parent marker ``".."`` always
comes first.  Sorting uses the file name, never the tag title.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from functools import total_ordering
from pathlib import PurePath
from typing import Iterator, Sequence

PARENT_MARKER = ".."
UNKNOWN_ALBUM = "unknown"


def file_name(full_path: str) -> str:
    """Return the last component of *full_path*, or the path itself if it has none."""
    return PurePath(full_path).name or full_path


@total_ordering
class _Ordered(ABC):
    """Comparison and hashing shared by both entry variants."""

    @abstractmethod
    def _sort_key(self) -> tuple[int, str]:
        """Return the key both ordering and equality are based on."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _Ordered):
            return NotImplemented
        return self._sort_key() == other._sort_key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, _Ordered):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self) -> int:
        return hash(self._sort_key())


@dataclass(frozen=True, eq=False)
class Directory(_Ordered):
    """A sub-directory, or the ``".."`` parent marker."""

    full_path: str

    def _sort_key(self) -> tuple[int, str]:
        # 0 = parent marker, 1 = any other directory, 2 = playable
        return (0 if self.is_parent_marker() else 1, file_name(self.full_path))

    def is_parent_marker(self) -> bool:
        return file_name(self.full_path) == PARENT_MARKER

    def name(self) -> str:
        return file_name(self.full_path)

    def album_name(self) -> str:
        return UNKNOWN_ALBUM

    def artist_names(self) -> list[str]:
        return []

    def genre_name(self) -> str | None:
        return None

    def total_duration(self) -> timedelta:
        return timedelta(0)

    def is_selected(self) -> bool:
        return False

    def set_selected(self, value: bool) -> None:
        pass

    def set_duration(self, duration: timedelta | None) -> None:
        pass


@dataclass(eq=False)
class Playable(_Ordered):
    """A local audio file, optionally enriched with tag metadata.

    ``full_path`` cannot be reassigned after construction.  ``selected`` is
    UI state and ``duration`` may be backfilled by the decoder.
    """

    full_path: str
    selected: bool = False
    title: str | None = None
    artists: list[str] | None = None
    duration: timedelta | None = None
    album: str | None = None
    genre: str | None = None

    def __setattr__(self, name: str, value: object) -> None:
        if name == "full_path" and "full_path" in self.__dict__:
            raise AttributeError("full_path is read-only")
        super().__setattr__(name, value)

    def _sort_key(self) -> tuple[int, str]:
        return (2, file_name(self.full_path))

    def name(self) -> str:
        """Return the tag title, falling back to the file name."""
        if self.title:
            return self.title
        return file_name(self.full_path)

    def album_name(self) -> str:
        return self.album if self.album is not None else UNKNOWN_ALBUM

    def artist_names(self) -> list[str]:
        return list(self.artists) if self.artists is not None else []

    def genre_name(self) -> str | None:
        return self.genre

    def total_duration(self) -> timedelta:
        return self.duration if self.duration is not None else timedelta(0)

    def is_selected(self) -> bool:
        return self.selected

    def set_selected(self, value: bool) -> None:
        self.selected = value

    def set_duration(self, duration: timedelta | None) -> None:
        """Overwrite the stored duration unconditionally."""
        self.duration = duration


Entry = Directory | Playable


class EntryCollection:
    """An ordered list of entries with single-selection semantics.

    The order is fixed when the collection is built; selecting entries never
    reorders it.  A new scan produces a new collection instead of mutating
    this one.
    """

    def __init__(self, entries: Sequence[Entry] = ()) -> None:
        self._entries = list(entries)

    def __repr__(self) -> str:
        return f"EntryCollection({self._entries!r})"

    @classmethod
    def from_unsorted(cls, entries: Sequence[Entry]) -> EntryCollection:
        """Build a collection ordered by the entry ordering."""
        return cls(sorted(entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> Entry:
        return self._entries[index]

    @property
    def entries(self) -> tuple[Entry, ...]:
        """Read-only snapshot of the entries in order."""
        return tuple(self._entries)

    def entries_mut(self) -> Iterator[Entry]:
        """Iterate the live entry objects, e.g. to backfill durations."""
        return iter(self._entries)

    def in_bounds(self, index: int) -> bool:
        return 0 <= index < len(self._entries)

    def select(self, index: int) -> None:
        """Select the entry at *index* and clear every other selection.

        An out-of-range index only clears the selection.
        """
        for i, entry in enumerate(self._entries):
            entry.set_selected(i == index)

    def unselect_all(self) -> None:
        for entry in self._entries:
            entry.set_selected(False)

    def selected_index(self) -> int | None:
        for i, entry in enumerate(self._entries):
            if entry.is_selected():
                return i
        return None

    def rows(self, active_index: int | None = None) -> list[tuple[str, bool, bool]]:
        """Return ``(name, is_selected, is_active)`` for every entry."""
        return [
            (entry.name(), entry.is_selected(), i == active_index)
            for i, entry in enumerate(self._entries)
        ]
