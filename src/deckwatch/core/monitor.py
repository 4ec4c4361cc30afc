"""Background monitor: registry notifications plus periodic log rescans."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime, timezone

from deckwatch.config import Settings, plugins_dir, profiles_dir
from deckwatch.core.logscan import LogScanner
from deckwatch.core.names import resolve_device_names
from deckwatch.core.plugins import ButtonIconResolver
from deckwatch.core.profiles import ProfileButtonResolver, ProfileManifestReader
from deckwatch.core.registry import extract_devices
from deckwatch.core.sources import RegistrySource
from deckwatch.models import DeviceState, Snapshot

logger = logging.getLogger(__name__)

Subscriber = Callable[[Snapshot], None]


class DeckMonitor:
    """Owns the device map and keeps it reconciled with the vendor's data.

    All mutation happens on the monitor thread (or in ``refresh`` when no
    thread is running). Each reconciliation builds a new device map and swaps
    it in under the lock, so readers only ever see complete passes.
    """

    def __init__(
        self,
        settings: Settings,
        source: RegistrySource,
        subscriber: Subscriber | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self._source = source
        self._subscriber = subscriber
        self._clock = clock

        profiles = profiles_dir(settings)
        plugins = plugins_dir(settings)
        self.icons = ButtonIconResolver(plugins)
        self.profile_names = ProfileManifestReader(
            profiles, settings.monitor.unknown_profile_name
        )
        self.buttons = ProfileButtonResolver(profiles, self.icons)
        self.log_scanner = LogScanner(plugins, settings.paths.helper_plugin)

        self._lock = threading.Lock()
        self._devices: dict[str, DeviceState] = {}
        self._latest: Snapshot | None = None
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None

    def subscribe(self, subscriber: Subscriber | None) -> None:
        self._subscriber = subscriber

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def known_devices(self) -> list[DeviceState]:
        with self._lock:
            devices = sorted(self._devices.values(), key=lambda d: d.serial)
            return [device.model_copy(deep=True) for device in devices]

    def snapshot(self) -> Snapshot | None:
        with self._lock:
            return self._latest

    def refresh(self) -> Snapshot:
        """Run one full pass synchronously, then release the source.

        Raises ``RegistryUnavailableError`` if the source cannot be opened and
        ``RuntimeError`` while the monitor thread owns the source.
        """
        if self.is_running:
            raise RuntimeError("Cannot refresh while the monitor thread is running")

        self._source.open()
        try:
            return self._reconcile(poll_registry=True, scan_logs=True)
        finally:
            self._source.close()

    def start(self) -> None:
        thread = self._thread
        if thread is not None and thread.is_alive():
            if self._stop_event is not None and not self._stop_event.is_set():
                return
            # A stopped thread may still be inside a pass; only one may write.
            logger.info("Waiting for the previous monitor thread to exit")
            thread.join()

        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run, args=(stop_event,), name="deck-monitor", daemon=True
        )
        self._thread.start()
        logger.info("Monitoring started")

    def stop(self, timeout: float | None = None) -> bool:
        """Signal the thread and wait for it; returns False if it is still alive."""
        if self._stop_event is not None:
            self._stop_event.set()

        thread = self._thread
        if thread is None:
            return True

        if timeout is None:
            timeout = self.settings.monitor.wait_timeout * 3
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning("Monitor thread still busy %.2fs after stop", timeout)
            return False

        self._thread = None
        logger.info("Monitoring stopped")
        return True

    def _run(self, stop_event: threading.Event) -> None:
        monitor = self.settings.monitor
        try:
            self._source.open()
            notifier = self._source.notifier()
        except OSError as exc:
            logger.error("Registry monitoring aborted: %s", exc)
            self._source.close()
            self._publish_error(str(exc))
            return

        try:
            self._safe_reconcile(poll_registry=True, scan_logs=True)
            last_log_scan = self._clock()
            armed = False

            while not stop_event.is_set():
                if not armed:
                    notifier.arm()
                    armed = True

                if notifier.wait(monitor.wait_timeout):
                    armed = False
                    self._safe_reconcile(poll_registry=True, scan_logs=False)

                if self._clock() - last_log_scan > monitor.log_scan_interval:
                    self._safe_reconcile(poll_registry=False, scan_logs=True)
                    last_log_scan = self._clock()
        finally:
            notifier.close()
            self._source.close()

    def _safe_reconcile(self, *, poll_registry: bool, scan_logs: bool) -> None:
        try:
            self._reconcile(poll_registry=poll_registry, scan_logs=scan_logs)
        except Exception:
            logger.exception("Reconciliation pass failed")

    def _reconcile(self, *, poll_registry: bool, scan_logs: bool) -> Snapshot:
        with self._lock:
            prior = self._devices

        if poll_registry:
            working = self._apply_registry(prior)
        else:
            working = {serial: d.model_copy(deep=True) for serial, d in prior.items()}

        if scan_logs:
            self.log_scanner.scan()

        resolve_device_names(
            working.values(),
            self.log_scanner.evidence,
            self.settings.monitor.placeholder_name,
        )

        ordered = sorted(working.values(), key=lambda d: d.serial)
        snapshot = Snapshot(
            devices=tuple(device.view() for device in ordered),
            timestamp=datetime.now(timezone.utc),
        )

        with self._lock:
            self._devices = working
            self._latest = snapshot

        self._publish(snapshot)
        return snapshot

    def _apply_registry(self, prior: dict[str, DeviceState]) -> dict[str, DeviceState]:
        logger.debug("Polling registry")
        result = extract_devices(
            self._source.read(), prior, self.settings.monitor.placeholder_name
        )

        changed = set(result.changed)
        now = datetime.now(timezone.utc)
        for serial, device in result.devices.items():
            if serial in changed:
                device.profile_name = self.profile_names.name(device.profile_uuid)
                device.buttons = self.buttons.resolve(device.profile_uuid)
                device.last_update = now
            elif self.settings.monitor.refresh_unchanged_profiles:
                device.buttons = self.buttons.resolve(device.profile_uuid)

        return result.devices

    def _publish_error(self, message: str) -> None:
        snapshot = Snapshot(
            timestamp=datetime.now(timezone.utc),
            has_error=True,
            error_message=message,
        )
        with self._lock:
            self._devices = {}
            self._latest = snapshot
        self._publish(snapshot)

    def _publish(self, snapshot: Snapshot) -> None:
        subscriber = self._subscriber
        if subscriber is None:
            return
        try:
            subscriber(snapshot)
        except Exception:
            logger.exception("Error in snapshot subscriber")
