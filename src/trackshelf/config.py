"""Load trackshelf configuration from a TOML file."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from trackshelf.library import PLAYABLE_EXTENSIONS, normalize_extensions

DEFAULT_CONFIG_PATH = Path("~/.config/trackshelf/config.toml").expanduser()


@dataclass
class Config:
    """Trackshelf configuration."""

    music_dir: str = str(Path.home() / "Music")
    extensions: frozenset[str] = field(default_factory=lambda: PLAYABLE_EXTENSIONS)
    log_level: str = "WARNING"
    log_file: str | None = None


def load_config(path: Path | str) -> Config:
    """Load configuration from a TOML file.

    Returns a :class:`Config` with defaults for any missing keys.
    If the file does not exist, returns a default :class:`Config`.
    """
    path = Path(path)
    if not path.is_file():
        return Config()

    with open(path, "rb") as f:
        data = tomllib.load(f)

    defaults = Config()
    extensions = data.get("extensions")
    logging_cfg = data.get("logging", {})

    return Config(
        music_dir=str(Path(data.get("music-dir", defaults.music_dir)).expanduser()),
        extensions=(
            normalize_extensions(extensions)
            if extensions is not None
            else defaults.extensions
        ),
        log_level=str(logging_cfg.get("level", defaults.log_level)).upper(),
        log_file=logging_cfg.get("file"),
    )
