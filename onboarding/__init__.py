"""BLE GATT peripheral demo for snapd onboarding.

Exports the peripheral (gatt_server), its paired client (gatt_client) and
the shared identifiers (protocol).
"""
from . import protocol
from . import gatt_server
from . import gatt_client

__all__ = ["protocol", "gatt_server", "gatt_client"]
