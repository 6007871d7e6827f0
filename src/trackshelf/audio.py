"""Audio sink: decodes local tracks with soundfile and plays them via sounddevice.

Tracks are appended to a FIFO and streamed one after another by a single
worker thread.  Appending a track opens it first; files that cannot be
decoded are dropped and never reach the FIFO.  Every track that leaves the
FIFO, played through or failed, produces one end-of-track event.
"""

from __future__ import annotations

import threading
from collections import deque
from datetime import timedelta
from typing import Callable, Iterable

import sounddevice as sd
import soundfile as sf
from loguru import logger

from trackshelf.entry import Entry, Playable

# Number of frames to read per chunk during streaming playback.
_BLOCK_SIZE = 2048


def probe_duration(path: str) -> timedelta | None:
    """Return the decoded length of *path*, or ``None`` if it cannot be opened."""
    try:
        info = sf.info(path)
    except (RuntimeError, OSError) as exc:
        logger.warning(f"Audio: cannot decode {path}: {exc}")
        return None
    if not info.samplerate:
        return None
    return timedelta(seconds=info.frames / info.samplerate)


class AudioPlayer:
    """Streams queued audio files through PortAudio via sounddevice."""

    def __init__(self) -> None:
        self._end_callback: Callable[[], None] | None = None
        self._pending: deque[str] = deque()
        self._lock = threading.Lock()
        self._paused = threading.Event()
        self._paused.set()  # starts in "not paused" state
        # Each worker thread gets its own stop event, see append().
        self._stop_event = threading.Event()
        self._ended_tracks = 0
        self._worker_running = False
        self._playback_thread: threading.Thread | None = None

    # -- queue ---------------------------------------------------------------

    def can_play(self, entry: Entry) -> bool:
        """Return ``True`` if *entry* is a playable the sink can decode.

        A playable without a known duration gets the decoded one.
        """
        if not isinstance(entry, Playable):
            return False
        duration = probe_duration(entry.full_path)
        if duration is None:
            return False
        if not entry.total_duration():
            entry.set_duration(duration)
        return True

    def append(self, entry: Entry) -> bool:
        """Queue *entry* for playback.

        Returns ``False`` for directories and for files that cannot be
        decoded; those never reach the FIFO.
        """
        if not self.can_play(entry):
            return False

        with self._lock:
            self._pending.append(entry.full_path)
            start = not self._worker_running
            self._worker_running = True
            if start:
                self._stop_event = threading.Event()
                stop_event = self._stop_event
        if start:
            self._playback_thread = threading.Thread(
                target=self._run_queue, args=(stop_event,), daemon=True
            )
            self._playback_thread.start()
        return True

    def play(self, entries: Iterable[Entry]) -> list[bool]:
        """Replace whatever is playing with *entries*.

        Returns one flag per entry telling whether the sink queued it.
        """
        self.stop()
        return [self.append(entry) for entry in entries]

    @property
    def pending(self) -> list[str]:
        with self._lock:
            return list(self._pending)

    # -- playback controls ---------------------------------------------------

    def pause(self) -> None:
        """Pause the currently playing track."""
        self._paused.clear()

    def unpause(self) -> None:
        """Resume a paused track."""
        self._paused.set()

    def stop(self) -> None:
        """Stop playback and drop every queued track."""
        with self._lock:
            self._pending.clear()
            self._stop_event.set()
            self._worker_running = False
        self._paused.set()  # unblock the thread if it is waiting on pause
        if self._playback_thread is not None:
            self._playback_thread.join(timeout=2.0)
            if self._playback_thread.is_alive():
                logger.warning("Audio: playback thread did not stop in time")
            self._playback_thread = None

    # -- end-of-track callback -----------------------------------------------

    def set_end_callback(self, callback: Callable[[], None]) -> None:
        """Register a callback invoked once for every track that leaves the sink."""
        self._end_callback = callback

    def check_events(self) -> None:
        """Fire the end-of-track callback for tracks finished since the last call.

        A track that fails while streaming counts as finished, so callers
        stay in step with the FIFO.  Must be called periodically (e.g. from
        the main loop).
        """
        with self._lock:
            ended, self._ended_tracks = self._ended_tracks, 0
        if self._end_callback is None:
            return
        for _ in range(ended):
            self._end_callback()

    # -- internal ------------------------------------------------------------

    def _run_queue(self, stop_event: threading.Event) -> None:
        """Worker that plays queued files until the FIFO is empty or stopped."""
        while True:
            with self._lock:
                if stop_event.is_set():
                    return
                if not self._pending:
                    self._worker_running = False
                    return
                path = self._pending.popleft()
            self._stream_file(path, stop_event)
            with self._lock:
                if not stop_event.is_set():
                    self._ended_tracks += 1

    def _stream_file(self, path: str, stop_event: threading.Event) -> bool:
        """Stream *path* to an output stream; return ``True`` if it played through."""
        try:
            with sf.SoundFile(path) as f:
                stream = sd.OutputStream(
                    samplerate=f.samplerate,
                    channels=f.channels,
                    dtype="float32",
                )
                stream.start()
                try:
                    while True:
                        self._paused.wait()
                        if stop_event.is_set():
                            return False
                        data = f.read(_BLOCK_SIZE, dtype="float32")
                        if len(data) == 0:
                            break
                        stream.write(data)
                finally:
                    stream.stop()
                    stream.close()
        except Exception as exc:
            logger.error(f"Audio: playback error for {path}: {exc}")
            return False
        return True
