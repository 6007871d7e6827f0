"""Simple interactive CLI for browsing and playing local music."""

from __future__ import annotations

import argparse
import sys

from trackshelf.browser import InvalidTransitionError, LocalBrowser
from trackshelf.config import DEFAULT_CONFIG_PATH, load_config
from trackshelf.entry import Directory
from trackshelf.library import normalize_extensions, scan_directory
from trackshelf.logging_utils import setup_logging

HELP = (
    "Available commands: ls, cd <n>, up, select <n>, play <n>, pause, resume, "
    "queue, status, quit"
)


def format_rows(rows: list[tuple[str, bool, bool]], kinds: list[bool]) -> list[str]:
    """Render ``(name, selected, active)`` rows as numbered lines.

    *kinds* flags which rows are directories; they get a trailing slash.
    """
    lines = []
    for index, ((name, selected, active), is_dir) in enumerate(zip(rows, kinds)):
        marker = ">" if active else ("*" if selected else " ")
        suffix = "/" if is_dir else ""
        lines.append(f" {marker}{index:>3}  {name}{suffix}")
    return lines


def _print_listing(browser: LocalBrowser) -> None:
    print(f"  {browser.cwd}")
    kinds = [isinstance(entry, Directory) for entry in browser.entries]
    for line in format_rows(browser.rows(), kinds):
        print(line)


def _print_status(browser: LocalBrowser) -> None:
    entry = browser.playing_entry
    if entry is None:
        print(f"  [{browser.state.name}]  title: –")
        return
    artists = ", ".join(entry.artist_names()) or "–"
    print(
        f"  [{browser.state.name}]"
        f"  title: {entry.name()}"
        f"  artists: {artists}"
        f"  album: {entry.album_name()}"
    )


def _print_queue(browser: LocalBrowser) -> None:
    current = browser.current_queue()
    if current.currently_playing is None:
        print("  Nothing playing.")
        return
    playing = current.currently_playing
    print(f"  now:  {playing.name}  ({playing.duration_ms // 1000}s)")
    for position, item in enumerate(current.queue, start=1):
        print(f"  {position:>4}. {item.name}  ({item.duration_ms // 1000}s)")


def _parse_index(arg: str | None) -> int:
    if arg is None:
        raise ValueError("This command needs a row number.")
    try:
        return int(arg)
    except ValueError:
        raise ValueError(f"'{arg}' is not a row number.") from None


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="trackshelf – browse and play a local music folder",
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Path to TOML config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--music-dir",
        default=None,
        help="Directory to start browsing in",
    )
    parser.add_argument(
        "--extensions",
        default=None,
        help="Comma-separated list of playable extensions (e.g. mp3,flac)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Console log level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the entries of the music directory and exit",
    )
    args = parser.parse_args(argv)

    # Load config file (silently skip if not found)
    cfg = load_config(args.config)

    # CLI flags override config values (only when explicitly provided)
    music_dir = args.music_dir if args.music_dir is not None else cfg.music_dir
    log_level = args.log_level if args.log_level is not None else cfg.log_level
    extensions = (
        normalize_extensions(args.extensions.split(","))
        if args.extensions is not None
        else cfg.extensions
    )

    setup_logging(log_level, cfg.log_file)

    if args.list:
        entries = scan_directory(music_dir, extensions)
        if not len(entries):
            print(f"Not a directory: {music_dir}")
            sys.exit(1)
        kinds = [isinstance(entry, Directory) for entry in entries]
        for line in format_rows(entries.rows(), kinds):
            print(line)
        return

    from trackshelf.audio import AudioPlayer

    audio = AudioPlayer()
    browser = LocalBrowser(music_dir, audio=audio, extensions=extensions)
    if not len(browser.entries):
        print(f"Not a directory: {music_dir}")
        sys.exit(1)

    print("trackshelf – interactive mode")
    print(HELP)
    print()
    _print_listing(browser)

    try:
        while True:
            try:
                raw = input("trackshelf> ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                break

            audio.check_events()

            if not raw:
                continue

            parts = raw.split(maxsplit=1)
            cmd = parts[0].lower()
            arg = parts[1] if len(parts) > 1 else None

            try:
                if cmd == "quit":
                    break
                elif cmd == "ls":
                    _print_listing(browser)
                elif cmd == "cd":
                    browser.enter(_parse_index(arg))
                    _print_listing(browser)
                elif cmd == "up":
                    browser.up()
                    _print_listing(browser)
                elif cmd == "select":
                    browser.select(_parse_index(arg))
                    _print_listing(browser)
                elif cmd == "play":
                    browser.play(_parse_index(arg))
                    _print_status(browser)
                elif cmd == "pause":
                    browser.pause()
                    _print_status(browser)
                elif cmd == "resume":
                    browser.resume()
                    _print_status(browser)
                elif cmd == "queue":
                    _print_queue(browser)
                elif cmd == "status":
                    _print_status(browser)
                elif cmd == "help":
                    print(HELP)
                else:
                    print(f"  Unknown command: {cmd}")
            except (InvalidTransitionError, ValueError) as exc:
                print(f"  Error: {exc}")
    finally:
        audio.stop()


if __name__ == "__main__":
    main()
