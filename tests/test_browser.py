"""Tests for the local browser state machine."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from trackshelf.browser import InvalidTransitionError, LocalBrowser, State


# ---------------------------------------------------------------------------
# Fixture: small music folder on disk
# ---------------------------------------------------------------------------

@pytest.fixture()
def music_dir(tmp_path):
    """Create a small fake music folder on disk.

    Layout: ``..``, ``Album A/``, ``Album B/``, ``01 - First.mp3``,
    ``02 - Second.flac``, ``03 - Third.mp3`` plus a non-audio file.
    """
    album_a = tmp_path / "Album A"
    album_a.mkdir()
    (album_a / "track1.flac").touch()
    (album_a / "track2.flac").touch()
    (tmp_path / "Album B").mkdir()

    (tmp_path / "01 - First.mp3").touch()
    (tmp_path / "02 - Second.flac").touch()
    (tmp_path / "03 - Third.mp3").touch()
    (tmp_path / "notes.txt").touch()
    return tmp_path


@pytest.fixture()
def browser(music_dir):
    return LocalBrowser(music_dir)


def _names(browser: LocalBrowser) -> list[str]:
    return [entry.name() for entry in browser.entries]


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------

class TestInitialState:
    def test_starts_in_paused(self, browser):
        assert browser.state is State.PAUSED

    def test_lists_cwd(self, browser):
        assert _names(browser) == [
            "..",
            "Album A",
            "Album B",
            "01 - First.mp3",
            "02 - Second.flac",
            "03 - Third.mp3",
        ]

    def test_nothing_playing(self, browser):
        assert browser.playing_index is None
        assert browser.playing_entry is None
        assert browser.current_queue().currently_playing is None


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

class TestNavigation:
    def test_enter_directory(self, browser, music_dir):
        browser.enter(1)
        assert browser.cwd == music_dir / "Album A"
        assert _names(browser) == ["..", "track1.flac", "track2.flac"]

    def test_enter_parent_marker(self, browser, music_dir):
        browser.enter(1)
        browser.enter(0)
        assert browser.cwd == music_dir.resolve()
        assert "Album A" in _names(browser)

    def test_up(self, browser, music_dir):
        browser.open(music_dir / "Album A")
        browser.up()
        assert browser.cwd == music_dir.resolve()

    def test_open_non_directory_raises(self, browser, music_dir):
        with pytest.raises(ValueError, match="not a directory"):
            browser.open(music_dir / "notes.txt")

    def test_enter_out_of_range_raises(self, browser):
        with pytest.raises(ValueError, match="No entry"):
            browser.enter(42)

    def test_enter_playable_plays(self, browser):
        browser.enter(3)
        assert browser.state is State.PLAYING
        assert browser.playing_index == 3

    def test_navigation_clears_selection(self, browser):
        browser.select(3)
        browser.enter(1)
        browser.enter(0)
        assert browser.entries.selected_index() is None


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class TestSelection:
    def test_select(self, browser):
        browser.select(4)
        assert browser.entries.selected_index() == 4

    def test_select_directory_selects_nothing(self, browser):
        browser.select(4)
        browser.select(1)
        assert browser.entries.selected_index() is None

    def test_unselect_all(self, browser):
        browser.select(4)
        browser.unselect_all()
        assert browser.entries.selected_index() is None

    def test_rows_mark_playing_track(self, browser):
        browser.select(4)
        browser.play(3)
        rows = browser.rows()
        assert rows[3] == ("01 - First.mp3", False, True)
        assert rows[4] == ("02 - Second.flac", True, False)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

class TestTransitions:
    def test_play(self, browser):
        browser.play(4)
        assert browser.state is State.PLAYING
        assert browser.playing_entry.name() == "02 - Second.flac"

    def test_play_directory_raises(self, browser):
        with pytest.raises(ValueError, match="not playable"):
            browser.play(1)

    def test_pause_and_resume(self, browser):
        browser.play(3)
        browser.pause()
        assert browser.state is State.PAUSED
        browser.resume()
        assert browser.state is State.PLAYING
        assert browser.playing_index == 3

    def test_pause_from_paused_raises(self, browser):
        with pytest.raises(InvalidTransitionError):
            browser.pause()

    def test_resume_without_track_raises(self, browser):
        with pytest.raises(InvalidTransitionError):
            browser.resume()

    def test_track_end_advances(self, browser):
        browser.play(3)
        browser.on_track_end()
        assert browser.playing_index == 4
        assert browser.state is State.PLAYING

    def test_track_end_after_last_pauses(self, browser):
        browser.play(5)
        browser.on_track_end()
        assert browser.state is State.PAUSED
        assert browser.playing_index is None

    def test_current_queue(self, browser):
        browser.play(4)
        queue = browser.current_queue()
        assert queue.currently_playing.name == "02 - Second.flac"
        assert [item.name for item in queue.queue] == ["03 - Third.mp3"]


# ---------------------------------------------------------------------------
# Audio sink interaction
# ---------------------------------------------------------------------------

class TestWithAudio:
    @pytest.fixture()
    def audio(self):
        audio = MagicMock()
        audio.can_play.return_value = True
        audio.play.return_value = [True, True, True]
        return audio

    @pytest.fixture()
    def audio_browser(self, music_dir, audio):
        return LocalBrowser(music_dir, audio=audio)

    def test_registers_end_callback(self, audio_browser, audio):
        audio.set_end_callback.assert_called_once_with(audio_browser.on_track_end)

    def test_play_hands_following_entries_to_sink(self, audio_browser, audio):
        audio_browser.play(3)
        (entries,), _ = audio.play.call_args
        assert [e.name() for e in entries] == [
            "01 - First.mp3",
            "02 - Second.flac",
            "03 - Third.mp3",
        ]

    def test_undecodable_track_leaves_state(self, audio_browser, audio):
        audio.can_play.return_value = False
        with pytest.raises(ValueError, match="cannot be decoded"):
            audio_browser.play(3)
        audio.play.assert_not_called()
        assert audio_browser.state is State.PAUSED
        assert audio_browser.playing_index is None

    def test_sink_rejecting_first_track_stops(self, audio_browser, audio):
        audio.play.return_value = [False, True, True]
        with pytest.raises(ValueError):
            audio_browser.play(3)
        audio.stop.assert_called_once()
        assert audio_browser.state is State.PAUSED
        assert audio_browser.current_queue().currently_playing is None

    def test_queue_skips_rejected_tracks(self, audio_browser, audio):
        audio.play.return_value = [True, False, True]
        audio_browser.play(3)
        assert [item.name for item in audio_browser.current_queue().queue] == [
            "03 - Third.mp3"
        ]
        audio_browser.on_track_end()
        assert audio_browser.playing_index == 5

    def test_pause_resume_forwarded(self, audio_browser, audio):
        audio_browser.play(3)
        audio_browser.pause()
        audio.pause.assert_called_once()
        audio_browser.resume()
        audio.unpause.assert_called_once()


class TestExtensions:
    def test_custom_extensions(self, music_dir):
        browser = LocalBrowser(music_dir, extensions={".flac"})
        assert _names(browser) == ["..", "Album A", "Album B", "02 - Second.flac"]
