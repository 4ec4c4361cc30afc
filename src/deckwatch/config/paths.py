from __future__ import annotations

import os
from pathlib import Path

import platformdirs

APP_NAME = "deckwatch"
CONFIG_FILENAME = "config.toml"

VENDOR_AUTHOR = "Elgato"
VENDOR_APP = "StreamDeck"


def default_config_path() -> Path:
    return Path(platformdirs.user_config_dir(APP_NAME)) / CONFIG_FILENAME


def default_vendor_root() -> Path:
    # %APPDATA%\Elgato\StreamDeck on Windows
    return Path(platformdirs.user_data_dir(VENDOR_APP, VENDOR_AUTHOR, roaming=True))


def expand_path(value: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(value)))
