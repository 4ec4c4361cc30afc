"""Blocking change notification for the watched registry value."""

from __future__ import annotations

import ctypes
import logging
import threading
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

REG_NOTIFY_CHANGE_LAST_SET = 0x00000004
WAIT_OBJECT_0 = 0x00000000
WAIT_TIMEOUT = 0x00000102


class ChangeNotifier(Protocol):
    """Capability the monitor loop waits on.

    ``arm`` requests one notification; ``wait`` blocks up to ``timeout``
    seconds and returns True when the armed notification fired.
    """

    def arm(self) -> None: ...

    def wait(self, timeout: float) -> bool: ...

    def close(self) -> None: ...


class RegistryChangeNotifier:
    """``RegNotifyChangeKeyValue`` on an open key, signalled through an event."""

    def __init__(self, key_handle: int) -> None:
        from ctypes import wintypes

        self._advapi32 = ctypes.WinDLL("advapi32", use_last_error=True)  # type: ignore[attr-defined]
        self._kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)  # type: ignore[attr-defined]

        self._advapi32.RegNotifyChangeKeyValue.argtypes = [
            wintypes.HANDLE,
            wintypes.BOOL,
            wintypes.DWORD,
            wintypes.HANDLE,
            wintypes.BOOL,
        ]
        self._advapi32.RegNotifyChangeKeyValue.restype = wintypes.LONG
        self._kernel32.CreateEventW.argtypes = [
            wintypes.LPVOID,
            wintypes.BOOL,
            wintypes.BOOL,
            wintypes.LPCWSTR,
        ]
        self._kernel32.CreateEventW.restype = wintypes.HANDLE
        self._kernel32.WaitForSingleObject.argtypes = [wintypes.HANDLE, wintypes.DWORD]
        self._kernel32.WaitForSingleObject.restype = wintypes.DWORD
        self._kernel32.CloseHandle.argtypes = [wintypes.HANDLE]
        self._kernel32.CloseHandle.restype = wintypes.BOOL

        self._key = key_handle
        # auto-reset, initially unsignalled
        self._event = self._kernel32.CreateEventW(None, False, False, None)
        if not self._event:
            raise ctypes.WinError(ctypes.get_last_error())  # type: ignore[attr-defined]

    def arm(self) -> None:
        result = self._advapi32.RegNotifyChangeKeyValue(
            self._key, True, REG_NOTIFY_CHANGE_LAST_SET, self._event, True
        )
        if result != 0:
            logger.warning("RegNotifyChangeKeyValue failed: %d", result)

    def wait(self, timeout: float) -> bool:
        result = self._kernel32.WaitForSingleObject(
            self._event, max(int(timeout * 1000), 0)
        )
        return result == WAIT_OBJECT_0

    def close(self) -> None:
        if self._event:
            self._kernel32.CloseHandle(self._event)
            self._event = None


class FileChangeNotifier:
    """Fires when a file's modification time or size changes."""

    def __init__(self, path: Path, poll_interval: float = 0.1) -> None:
        self.path = path
        self.poll_interval = poll_interval
        self._baseline: tuple[int, int] | None = None
        self._closed = threading.Event()

    def _signature(self) -> tuple[int, int] | None:
        try:
            stat = self.path.stat()
        except OSError:
            return None
        return stat.st_mtime_ns, stat.st_size

    def arm(self) -> None:
        self._baseline = self._signature()

    def wait(self, timeout: float) -> bool:
        remaining = timeout
        while remaining > 0 and not self._closed.is_set():
            if self._signature() != self._baseline:
                return True
            step = min(self.poll_interval, remaining)
            self._closed.wait(step)
            remaining -= step
        return self._signature() != self._baseline

    def close(self) -> None:
        self._closed.set()
