from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from onboarding import gatt_server


@pytest.fixture
def fake_bluez(monkeypatch: pytest.MonkeyPatch) -> SimpleNamespace:
    """Replace every D-Bus facing piece of the peripheral with mocks."""
    bus = MagicMock(name="bus")

    manager = MagicMock(name="advertising_manager")
    manager.call_register_advertisement = AsyncMock()
    manager.call_unregister_advertisement = AsyncMock()

    adapter = MagicMock(name="adapter")
    adapter.get_powered = AsyncMock(return_value=False)
    adapter.set_powered = AsyncMock()
    adapter._proxy.get_interface.return_value = manager

    agent = MagicMock(name="agent")
    agent.register = AsyncMock()
    agent.unregister = AsyncMock()

    advert = MagicMock(name="advert")
    advert.register = AsyncMock()
    advert_cls = MagicMock(return_value=advert)

    service_register = AsyncMock()
    service_unregister = AsyncMock()

    monkeypatch.setattr(gatt_server, "get_message_bus", AsyncMock(return_value=bus))
    monkeypatch.setattr(gatt_server, "get_adapter", AsyncMock(return_value=adapter))
    monkeypatch.setattr(gatt_server, "NoIoAgent", MagicMock(return_value=agent))
    monkeypatch.setattr(gatt_server, "Advertisement", advert_cls)
    monkeypatch.setattr(gatt_server.OnboardingService, "register", service_register)
    monkeypatch.setattr(gatt_server.OnboardingService, "unregister", service_unregister)

    return SimpleNamespace(
        bus=bus,
        adapter=adapter,
        manager=manager,
        agent=agent,
        advert=advert,
        advert_cls=advert_cls,
        service_register=service_register,
        service_unregister=service_unregister,
    )
