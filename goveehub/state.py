"""
Shared device store.

Ingestion code (platform poller, LAN discovery, IoT listener) mutates device
records through ``device_mut``; entities only ever read point-in-time copies
through ``device_by_id`` and hold nothing but the device id and a reference to
the store.
"""
import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

from goveehub.device import ServiceDevice

log = logging.getLogger(__name__)


class DeviceStore:
    def __init__(self):
        self._devices: Dict[str, ServiceDevice] = {}
        self._lock = asyncio.Lock()

    async def device_by_id(self, device_id: str) -> Optional[ServiceDevice]:
        """Snapshot of a device, or None if it is not (or no longer) known."""
        async with self._lock:
            device = self._devices.get(device_id)
            return copy.deepcopy(device) if device is not None else None

    async def devices(self) -> List[ServiceDevice]:
        async with self._lock:
            return [copy.deepcopy(d) for d in self._devices.values()]

    @asynccontextmanager
    async def device_mut(self, sku: str, device_id: str) -> AsyncIterator[ServiceDevice]:
        """Lock the store and yield the live record, creating it if needed."""
        async with self._lock:
            device = self._devices.get(device_id)
            if device is None:
                log.info(f"Adding device {sku} {device_id}")
                device = ServiceDevice(sku, device_id)
                self._devices[device_id] = device
            yield device

    async def remove_device(self, device_id: str) -> bool:
        async with self._lock:
            removed = self._devices.pop(device_id, None)
        if removed is not None:
            log.info(f"Removed device {removed!r}")
        return removed is not None
