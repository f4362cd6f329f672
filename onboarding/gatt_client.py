from __future__ import annotations

import logging

from bleak import BleakClient

from onboarding.errors import OnboardingError
from onboarding.protocol import CLIENT_PEER_ADDRESS, COMM_CHAR_UUID, DEFAULT_INTERFACE, DESCR_UUID

log = logging.getLogger("gatt_client")


async def run_client(interface: str = DEFAULT_INTERFACE, address: str = CLIENT_PEER_ADDRESS) -> None:
    """Connect to the paired onboarding peripheral and read its characteristic and descriptor."""
    log.info("Connecting to %s via %s ...", address, interface)
    async with BleakClient(address, bluez={"adapter": interface}) as client:
        log.info("Connected to %s", address)

        char = client.services.get_characteristic(COMM_CHAR_UUID)
        if char is None:
            raise OnboardingError(f"characteristic {COMM_CHAR_UUID} not found on {address}")
        descr = char.get_descriptor(DESCR_UUID)
        if descr is None:
            raise OnboardingError(f"descriptor {DESCR_UUID} not found on {address}")

        value = await client.read_gatt_char(char)
        log.info("READ %s (%d bytes): %r", COMM_CHAR_UUID, len(value), bytes(value)[:120])

        descr_value = await client.read_gatt_descriptor(descr.handle)
        log.info("READ %s: %s", DESCR_UUID, bytes(descr_value).decode("utf-8", errors="replace"))

    log.info("Disconnected from %s", address)
