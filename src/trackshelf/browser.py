"""Local file browser: the current directory view and its playback state.

States
------
- playing : A track from the current view has been handed to the audio sink.
- paused  : Nothing is playing, or playback is paused (initial state).

State properties
----------------
- cwd           : Path               – directory shown in the view.
- entries       : EntryCollection    – result of the last scan of *cwd*.
- playing_index : int | None         – row of the track currently playing.

Allowed transitions
-------------------
From *paused*:
    play(index)          → playing   (requires a decodable playable at *index*)
    resume()             → playing   (requires a track to be loaded)

From *playing*:
    pause()              → paused
    play(index)          → playing   (switches to another track)
    on_track_end()       → playing   (next track the sink accepted)
                         → paused    (the last queued track finished)

From any state:
    open(path) / enter(index) on a directory rescans and replaces *entries*.
    Navigating away keeps the audio sink playing but clears *playing_index*,
    since the new view has no row for the playing track.
"""

from __future__ import annotations

from enum import Enum, auto
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from loguru import logger

from trackshelf.entry import Directory, EntryCollection, Playable
from trackshelf.library import PLAYABLE_EXTENSIONS, scan_directory
from trackshelf.queue_adapter import CurrentQueue, to_queue

if TYPE_CHECKING:
    from trackshelf.audio import AudioPlayer


class State(Enum):
    PLAYING = auto()
    PAUSED = auto()


class InvalidTransitionError(Exception):
    """Raised when a transition is not allowed from the current state."""


class LocalBrowser:
    """Navigates a local directory tree and plays tracks from the current view."""

    def __init__(
        self,
        root: str | Path,
        audio: AudioPlayer | None = None,
        *,
        extensions: Iterable[str] = PLAYABLE_EXTENSIONS,
    ) -> None:
        self._audio = audio
        self._extensions = frozenset(extensions)
        self._state: State = State.PAUSED
        self._cwd = Path(root)
        self._entries = EntryCollection()
        # Rows of the current view the sink accepted; the first one is playing.
        self._queued_rows: list[int] = []
        self._has_track = False

        if self._audio is not None:
            self._audio.set_end_callback(self.on_track_end)

        self.refresh()

    # -- public properties ---------------------------------------------------

    @property
    def state(self) -> State:
        return self._state

    @property
    def cwd(self) -> Path:
        return self._cwd

    @property
    def entries(self) -> EntryCollection:
        return self._entries

    @property
    def playing_index(self) -> int | None:
        return self._queued_rows[0] if self._queued_rows else None

    @property
    def playing_entry(self) -> Playable | None:
        if not self._queued_rows:
            return None
        entry = self._entries[self._queued_rows[0]]
        return entry if isinstance(entry, Playable) else None

    # -- navigation ----------------------------------------------------------

    def refresh(self) -> None:
        """Rescan the current directory."""
        self._entries = scan_directory(self._cwd, self._extensions)
        self._queued_rows = []

    def open(self, path: str | Path) -> None:
        """Show *path*.  Raises ``ValueError`` if it is not a directory."""
        path = Path(path)
        if not path.is_dir():
            raise ValueError(f"'{path}' is not a directory.")
        self._cwd = path
        self.refresh()
        logger.info(f"Browsing {self._cwd}")

    def enter(self, index: int) -> None:
        """Activate the row at *index*.

        Directories are opened (the parent marker goes one level up) and
        playables start playing.
        """
        entry = self._entry_at(index)
        if isinstance(entry, Directory):
            if entry.is_parent_marker():
                self.open(self._cwd.resolve().parent)
            else:
                self.open(entry.full_path)
        else:
            self.play(index)

    def up(self) -> None:
        """Go to the parent of the current directory."""
        self.open(self._cwd.resolve().parent)

    # -- selection -----------------------------------------------------------

    def select(self, index: int) -> None:
        self._entries.select(index)

    def unselect_all(self) -> None:
        self._entries.unselect_all()

    def rows(self) -> list[tuple[str, bool, bool]]:
        """Rendering rows, with the playing track marked active."""
        return self._entries.rows(self.playing_index)

    # -- transitions ---------------------------------------------------------

    def play(self, index: int) -> None:
        """Play the track at *index*, queueing every playable after it.

        Raises ``ValueError`` if *index* is out of range, not a playable, or
        cannot be decoded by the audio sink.  State is left untouched then.
        """
        entry = self._entry_at(index)
        if not isinstance(entry, Playable):
            raise ValueError(f"'{entry.name()}' is not playable.")

        if self._audio is None:
            rows = [
                i
                for i in range(index, len(self._entries))
                if isinstance(self._entries[i], Playable)
            ]
        else:
            if not self._audio.can_play(entry):
                raise ValueError(f"'{entry.name()}' cannot be decoded.")
            accepted = self._audio.play(self._entries.entries[index:])
            rows = [index + offset for offset, ok in enumerate(accepted) if ok]
            logger.debug(f"Queued {len(rows)} tracks starting at {entry.full_path}")
            if not rows or rows[0] != index:
                # The file changed between the check and the sink opening it.
                self._audio.stop()
                self._queued_rows = []
                self._has_track = False
                self._state = State.PAUSED
                raise ValueError(f"'{entry.name()}' cannot be decoded.")

        self._queued_rows = rows
        self._has_track = True
        self._state = State.PLAYING

    def pause(self) -> None:
        """Pause playback.  Only allowed from *playing*."""
        if self._state is not State.PLAYING:
            raise InvalidTransitionError(
                f"pause() is only allowed in PLAYING state, "
                f"current state is {self._state.name}."
            )
        if self._audio is not None:
            self._audio.pause()
        self._state = State.PAUSED

    def resume(self) -> None:
        """Resume a paused track.  Requires a track to have been played."""
        if not self._has_track:
            raise InvalidTransitionError(
                "Cannot resume without a track. Use play(index) first."
            )
        if self._audio is not None and self._state is State.PAUSED:
            self._audio.unpause()
        self._state = State.PLAYING

    def on_track_end(self) -> None:
        """Handle end-of-track event from the audio sink.

        Moves to the next track the sink accepted.  After the last one,
        transitions to PAUSED.
        """
        if not self._queued_rows:
            return
        self._queued_rows.pop(0)
        if self._queued_rows:
            return
        self._has_track = False
        self._state = State.PAUSED

    def current_queue(self) -> CurrentQueue:
        """The playing track and what follows it, shaped for the remote queue."""
        if not self._queued_rows:
            return CurrentQueue()
        queued = EntryCollection([self._entries[i] for i in self._queued_rows])
        return to_queue(queued, 0)

    # -- internal helpers ----------------------------------------------------

    def _entry_at(self, index: int) -> Directory | Playable:
        if not self._entries.in_bounds(index):
            raise ValueError(f"No entry at index {index}.")
        return self._entries[index]
