from __future__ import annotations

import json
from pathlib import Path

import pytest

from deckwatch.config import PathsConfig, Settings, get_settings

FIXTURES = Path(__file__).parent / "fixtures"


def make_blob(*fragments: str) -> bytes:
    """Encode fragments the way the vendor stores them: NUL separated UTF-16."""
    return "\x00".join(fragments).encode("utf-16-le")


def load_fixture_blob(name: str) -> bytes:
    lines = (FIXTURES / "registry" / name).read_text(encoding="utf-8").splitlines()
    return make_blob(*lines)


def write_json(path: Path, data: object) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("DECKWATCH_CONFIG", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def vendor_root(tmp_path: Path) -> Path:
    root = tmp_path / "StreamDeck"
    (root / "ProfilesV2").mkdir(parents=True)
    (root / "Plugins").mkdir(parents=True)
    return root


@pytest.fixture
def settings(vendor_root: Path) -> Settings:
    return Settings(paths=PathsConfig(vendor_root=str(vendor_root)))
