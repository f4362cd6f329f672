# onboarding/gatt_server.py
from __future__ import annotations

import asyncio
import logging
import signal
import threading
from typing import Optional

from bluez_peripheral.util import Adapter, get_message_bus
from bluez_peripheral.advert import Advertisement

from bluez_peripheral.agent import NoIoAgent
from bluez_peripheral.gatt.service import Service
from bluez_peripheral.gatt.characteristic import characteristic, CharacteristicFlags as CharFlags
from bluez_peripheral.gatt.descriptor import descriptor, DescriptorFlags as DescFlags

from onboarding.protocol import (
    APP_NAME,
    COMM_CHAR_UUID,
    DEFAULT_INTERFACE,
    DESCR_UUID,
    SERVICE_UUID,
    descriptor_payload,
)


log = logging.getLogger("gatt_server")

BLUEZ_SERVICE_NAME = "org.bluez"
LE_ADVERTISING_MANAGER_IFACE = "org.bluez.LEAdvertisingManager1"
ADVERT_PATH = "/com/spacecheese/bluez_peripheral/onboarding/advert0"


class ReadCounter:
    """Counts descriptor reads since process start."""

    def __init__(self):
        self._lock = threading.Lock()
        self._value = 0

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value


class OnboardingService(Service):
    """
    Single service + single characteristic used for onboarding:
      - the characteristic accepts READ and WRITE but carries no data yet
      - its descriptor reports how many times it has been read
    """

    def __init__(self, read_counter: Optional[ReadCounter] = None):
        # Primary service
        super().__init__(SERVICE_UUID, True)
        self.read_counter = read_counter if read_counter is not None else ReadCounter()

    @characteristic(COMM_CHAR_UUID, CharFlags.READ | CharFlags.WRITE)
    def comm(self, options):
        return self.on_read(options)

    @comm.setter
    def comm(self, value: bytes, options):
        self.on_write(value, options)

    @descriptor(DESCR_UUID, comm, DescFlags.READ)
    def comm_descr(self, options):
        return self.on_descriptor_read(options)

    def on_read(self, options) -> bytes:
        return b""

    def on_write(self, value: bytes, options) -> None:
        log.debug("discarding write of %d bytes", len(value))

    def on_descriptor_read(self, options) -> bytes:
        count = self.read_counter.increment()
        return descriptor_payload(count)


async def get_adapter(bus, interface: str) -> Adapter:
    """Look up the BlueZ adapter object for an hci interface name (e.g. "hci0")."""
    path = f"/org/bluez/{interface}"
    introspection = await bus.introspect(BLUEZ_SERVICE_NAME, path)
    proxy = bus.get_proxy_object(BLUEZ_SERVICE_NAME, path, introspection)
    return Adapter(proxy)


class Peripheral:
    """Owns everything registered with BlueZ for the onboarding peripheral.

    Build one with :meth:`create` and release it with :meth:`close`, or use
    it as an async context manager.
    """

    def __init__(self, bus, adapter: Adapter, agent: NoIoAgent, service: OnboardingService):
        self.bus = bus
        self.adapter = adapter
        self.agent = agent
        self.service = service
        self.read_counter = service.read_counter
        self.advert: Optional[Advertisement] = None

    @classmethod
    async def create(cls, interface: str = DEFAULT_INTERFACE) -> "Peripheral":
        bus = await get_message_bus()
        try:
            adapter = await get_adapter(bus, interface)

            # Pairing without PIN entry on either side
            agent = NoIoAgent()
            await agent.register(bus)

            if not await adapter.get_powered():
                log.info("Powering on adapter %s", interface)
                await adapter.set_powered(True)

            service = OnboardingService()
            await service.register(bus, adapter=adapter)
        except BaseException:
            bus.disconnect()
            raise

        log.info("service UUID: %s", SERVICE_UUID)
        log.info("characteristic UUID: %s", COMM_CHAR_UUID)
        log.info("descriptor UUID: %s", DESCR_UUID)
        return cls(bus, adapter, agent, service)

    @property
    def advertising(self) -> bool:
        return self.advert is not None

    async def run(self, stop: asyncio.Event) -> None:
        log.info("advertise")
        # timeout=0 means no timeout
        advert = Advertisement(APP_NAME, [SERVICE_UUID], 0x0000, 0)
        await advert.register(self.bus, self.adapter, ADVERT_PATH)
        self.advert = advert

        log.info("waiting...")
        try:
            await stop.wait()
        finally:
            await self._unregister_advert()

    async def _unregister_advert(self) -> None:
        advert, self.advert = self.advert, None
        if advert is None:
            return
        # bluez-peripheral 0.1 has no Advertisement.unregister
        try:
            manager = self.adapter._proxy.get_interface(LE_ADVERTISING_MANAGER_IFACE)
            await manager.call_unregister_advertisement(ADVERT_PATH)
            self.bus.unexport(ADVERT_PATH)
        except Exception:
            log.warning("Failed to unregister advertisement", exc_info=True)

    async def close(self) -> None:
        await self._unregister_advert()

        service, self.service = self.service, None
        if service is not None:
            try:
                await service.unregister()
            except Exception:
                log.warning("Failed to unregister service", exc_info=True)

        agent, self.agent = self.agent, None
        bus, self.bus = self.bus, None
        if agent is not None and bus is not None:
            try:
                await agent.unregister(bus)
            except Exception:
                log.warning("Failed to unregister agent", exc_info=True)
        if bus is not None:
            bus.disconnect()

    async def __aenter__(self) -> "Peripheral":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


async def run_server(interface: str = DEFAULT_INTERFACE) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    signals = (signal.SIGINT, signal.SIGTERM)
    for sig in signals:
        loop.add_signal_handler(sig, stop.set)

    try:
        async with await Peripheral.create(interface) as peripheral:
            await peripheral.run(stop)
    finally:
        for sig in signals:
            loop.remove_signal_handler(sig)
    log.info("Server stopped")
