from __future__ import annotations

import queue
import threading
import time
from collections.abc import Callable
from pathlib import Path

import pytest
from conftest import load_fixture_blob, make_blob, write_json
from pydantic import ValidationError

from deckwatch.config import HELPER_PLUGIN, MonitorConfig, PathsConfig, Settings
from deckwatch.core import DeckMonitor, RegistryUnavailableError
from deckwatch.models import ButtonInfo, Snapshot

OFFICE = "CL12K1A00042"
STUDIO = "CL31L2A01234"
OFFICE_PROFILE = "A1B2C3D4-0000-4000-8000-000000000001"
STUDIO_PROFILE = "C0FFEE00-1111-4111-8111-111111111111"


class FakeNotifier:
    def __init__(self) -> None:
        self._fired = threading.Event()
        self.closed = False

    def fire(self) -> None:
        self._fired.set()

    def arm(self) -> None:
        pass

    def wait(self, timeout: float) -> bool:
        fired = self._fired.wait(timeout)
        self._fired.clear()
        return fired

    def close(self) -> None:
        self.closed = True


class FakeSource:
    def __init__(self, blob: bytes | None, open_error: OSError | None = None) -> None:
        self.blob = blob
        self.open_error = open_error
        self.notifications = FakeNotifier()
        self.closed = False

    def open(self) -> None:
        if self.open_error is not None:
            raise self.open_error

    def read(self) -> bytes | None:
        return self.blob

    def notifier(self) -> FakeNotifier:
        return self.notifications

    def close(self) -> None:
        self.closed = True


def _wait_for(
    updates: queue.Queue[Snapshot],
    predicate: Callable[[Snapshot], bool],
    timeout: float = 5.0,
) -> Snapshot:
    deadline = threading.Event()
    timer = threading.Timer(timeout, deadline.set)
    timer.start()
    try:
        while not deadline.is_set():
            try:
                snapshot = updates.get(timeout=0.05)
            except queue.Empty:
                continue
            if predicate(snapshot):
                return snapshot
    finally:
        timer.cancel()
    raise AssertionError("expected snapshot was not published")


@pytest.fixture
def fast_settings(vendor_root: Path) -> Settings:
    return Settings(
        paths=PathsConfig(vendor_root=str(vendor_root)),
        monitor=MonitorConfig(wait_timeout=0.05, log_scan_interval=3600),
    )


@pytest.fixture
def profiles(vendor_root: Path) -> Path:
    profiles_dir = vendor_root / "ProfilesV2"
    office = profiles_dir / f"{OFFICE_PROFILE}.sdProfile"
    write_json(office / "manifest.json", {"Name": "Office"})
    write_json(
        office / "Profiles" / "P1" / "manifest.json",
        {"Controllers": [{"Actions": {"0,0": {"Name": "Mute"}}}]},
    )
    write_json(
        profiles_dir / f"{STUDIO_PROFILE}.sdProfile" / "manifest.json",
        {"Name": "Studio"},
    )
    return profiles_dir


def test_refresh_builds_full_snapshot(settings: Settings, profiles: Path):
    source = FakeSource(load_fixture_blob("two_devices.txt"))
    monitor = DeckMonitor(settings, source)

    snapshot = monitor.refresh()

    assert [d.serial for d in snapshot.devices] == [OFFICE, STUDIO]
    office = snapshot.device(OFFICE)
    assert office is not None
    assert office.device_name == "Office Deck"
    assert office.profile_name == "Office"
    assert office.buttons["0,0"].title == "Mute"
    assert office.last_update is not None
    assert snapshot.device(STUDIO).profile_name == "Studio"
    assert not snapshot.has_error


def test_refresh_with_unknown_profile(settings: Settings):
    monitor = DeckMonitor(settings, FakeSource(load_fixture_blob("no_name.txt")))

    device = monitor.refresh().devices[0]

    assert device.device_name == "Stream Deck"
    assert device.profile_name == "Unknown Profile"
    assert device.buttons == {}


def test_refresh_raises_when_source_unavailable(settings: Settings):
    source = FakeSource(None, open_error=RegistryUnavailableError("no key"))

    with pytest.raises(RegistryUnavailableError):
        DeckMonitor(settings, source).refresh()


def test_unchanged_profile_keeps_last_update_and_rereads_buttons(
    settings: Settings, profiles: Path
):
    monitor = DeckMonitor(settings, FakeSource(load_fixture_blob("two_devices.txt")))
    first = monitor.refresh().device(OFFICE)

    write_json(
        profiles / f"{OFFICE_PROFILE}.sdProfile" / "Profiles" / "P1" / "manifest.json",
        {"Controllers": [{"Actions": {"0,0": {"Name": "Unmute"}}}]},
    )
    second = monitor.refresh().device(OFFICE)

    assert second.last_update == first.last_update
    assert second.buttons["0,0"].title == "Unmute"


def test_subscriber_errors_do_not_break_publication(settings: Settings):
    calls: list[Snapshot] = []

    def broken(snapshot: Snapshot) -> None:
        calls.append(snapshot)
        raise RuntimeError("boom")

    monitor = DeckMonitor(settings, FakeSource(load_fixture_blob("two_devices.txt")))
    monitor.subscribe(broken)

    snapshot = monitor.refresh()

    assert calls == [snapshot]
    assert monitor.snapshot() is snapshot


def test_known_devices_are_copies(settings: Settings):
    monitor = DeckMonitor(settings, FakeSource(load_fixture_blob("two_devices.txt")))
    monitor.refresh()

    devices = monitor.known_devices()
    devices[0].device_name = "changed"
    devices[0].buttons["9,9"] = ButtonInfo(title="extra")

    assert monitor.known_devices()[0].device_name == "Office Deck"
    assert "9,9" not in monitor.known_devices()[0].buttons


def test_loop_publishes_initial_and_notified_changes(
    fast_settings: Settings, profiles: Path
):
    source = FakeSource(load_fixture_blob("two_devices.txt"))
    updates: queue.Queue[Snapshot] = queue.Queue()
    monitor = DeckMonitor(fast_settings, source, subscriber=updates.put)

    monitor.start()
    try:
        first = _wait_for(updates, lambda s: len(s.devices) == 2)
        assert first.device(OFFICE).profile_name == "Office"

        source.blob = make_blob(
            "DeviceName",
            "Office Deck",
            "ESDProfilesPreferred",
            STUDIO_PROFILE,
            f"@(1)[4057/128/{OFFICE}]",
        )
        source.notifications.fire()

        second = _wait_for(updates, lambda s: len(s.devices) == 1)
        assert second.devices[0].serial == OFFICE
        assert second.devices[0].profile_uuid == STUDIO_PROFILE
        assert second.devices[0].profile_name == "Studio"
    finally:
        monitor.stop()

    assert not monitor.is_running
    assert source.closed
    assert source.notifications.closed


def test_missing_value_clears_devices(fast_settings: Settings):
    source = FakeSource(load_fixture_blob("two_devices.txt"))
    updates: queue.Queue[Snapshot] = queue.Queue()
    monitor = DeckMonitor(fast_settings, source, subscriber=updates.put)

    monitor.start()
    try:
        _wait_for(updates, lambda s: len(s.devices) == 2)
        source.blob = None
        source.notifications.fire()
        cleared = _wait_for(updates, lambda s: not s.devices)
    finally:
        monitor.stop()

    assert not cleared.has_error
    assert monitor.known_devices() == []


def test_open_failure_publishes_error_snapshot(fast_settings: Settings):
    source = FakeSource(None, open_error=RegistryUnavailableError("no key"))
    updates: queue.Queue[Snapshot] = queue.Queue()
    monitor = DeckMonitor(fast_settings, source, subscriber=updates.put)

    monitor.start()
    snapshot = _wait_for(updates, lambda s: s.has_error)
    monitor.stop()

    assert snapshot.error_message == "no key"
    assert snapshot.devices == ()
    assert source.closed


def test_periodic_log_scan_upgrades_placeholder_name(vendor_root: Path):
    settings = Settings(
        paths=PathsConfig(vendor_root=str(vendor_root)),
        monitor=MonitorConfig(wait_timeout=0.02, log_scan_interval=0.05),
    )
    profile = "0BADF00D-2222-4222-8222-222222222222"
    write_json(
        vendor_root / "ProfilesV2" / f"{profile}.sdProfile" / "manifest.json",
        {"Name": "Gaming"},
    )
    source = FakeSource(load_fixture_blob("no_name.txt"))
    updates: queue.Queue[Snapshot] = queue.Queue()
    monitor = DeckMonitor(settings, source, subscriber=updates.put)

    monitor.start()
    try:
        first = _wait_for(updates, lambda s: len(s.devices) == 1)
        assert first.devices[0].device_name == "Stream Deck"

        device_id = "0123456789abcdef0123456789abcdef"
        logs = vendor_root / "Plugins" / HELPER_PLUGIN
        logs.mkdir(parents=True)
        (logs / "plugin.log").write_text(
            f'{{"devices":[{{"id":"{device_id}","name":"Desk Deck"}}]}}\n'
            f"Device: StreamDeck ({device_id}) - Profile: Gaming\n",
            encoding="utf-8",
        )

        renamed = _wait_for(
            updates, lambda s: s.devices and s.devices[0].device_name == "Desk Deck"
        )
    finally:
        monitor.stop()

    assert renamed.devices[0].serial == "FL19K1A07777"


def test_readers_only_see_complete_passes(fast_settings: Settings):
    both = load_fixture_blob("two_devices.txt")
    one = make_blob("ESDProfilesPreferred", OFFICE_PROFILE, f"@(1)[4057/128/{OFFICE}]")
    source = FakeSource(both)
    monitor = DeckMonitor(fast_settings, source)
    monitor.refresh()

    seen: set[tuple[str, ...]] = set()
    stop = threading.Event()

    def reader() -> None:
        while not stop.is_set():
            seen.add(tuple(d.serial for d in monitor.known_devices()))

    thread = threading.Thread(target=reader)
    thread.start()
    try:
        for index in range(20):
            source.blob = one if index % 2 else both
            monitor.refresh()
    finally:
        stop.set()
        thread.join()

    assert seen <= {(OFFICE, STUDIO), (OFFICE,)}


class SlowSource(FakeSource):
    def __init__(self, blob: bytes | None, delay: float) -> None:
        super().__init__(blob)
        self.delay = delay

    def read(self) -> bytes | None:
        time.sleep(self.delay)
        return super().read()


def _monitor_threads() -> list[threading.Thread]:
    return [t for t in threading.enumerate() if t.name == "deck-monitor" and t.is_alive()]


def test_restart_waits_for_busy_thread(fast_settings: Settings):
    source = SlowSource(load_fixture_blob("two_devices.txt"), delay=0.5)
    monitor = DeckMonitor(fast_settings, source)

    monitor.start()
    # The first pass outlasts the default join timeout.
    assert monitor.stop() is False
    assert monitor.is_running

    monitor.start()
    try:
        assert len(_monitor_threads()) == 1
    finally:
        assert monitor.stop(timeout=5.0) is True

    assert _monitor_threads() == []


def test_stop_with_zero_timeout_returns_immediately(fast_settings: Settings):
    source = SlowSource(load_fixture_blob("two_devices.txt"), delay=0.5)
    monitor = DeckMonitor(fast_settings, source)

    monitor.start()
    assert monitor.stop(timeout=0) is False
    assert monitor.is_running

    assert monitor.stop(timeout=5.0) is True
    assert not monitor.is_running


def test_refresh_is_refused_while_thread_runs(fast_settings: Settings):
    source = SlowSource(load_fixture_blob("two_devices.txt"), delay=0.2)
    monitor = DeckMonitor(fast_settings, source)

    monitor.start()
    try:
        with pytest.raises(RuntimeError):
            monitor.refresh()
    finally:
        monitor.stop(timeout=5.0)


def test_refresh_releases_source(settings: Settings):
    source = FakeSource(load_fixture_blob("two_devices.txt"))

    DeckMonitor(settings, source).refresh()

    assert source.closed


def test_published_devices_are_read_only(settings: Settings, profiles: Path):
    monitor = DeckMonitor(settings, FakeSource(load_fixture_blob("two_devices.txt")))

    published = monitor.refresh().device(OFFICE)

    with pytest.raises(ValidationError):
        published.device_name = "tampered"
    with pytest.raises(TypeError):
        published.buttons["9,9"] = ButtonInfo(title="extra")
    with pytest.raises(ValidationError):
        published.buttons["0,0"].title = "tampered"

    latest = monitor.snapshot().device(OFFICE)
    assert latest.device_name == "Office Deck"
    assert latest.buttons["0,0"].title == "Mute"
    assert "9,9" not in latest.buttons
