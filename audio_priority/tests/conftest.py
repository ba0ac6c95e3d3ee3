"""
Общие фикстуры: FakeAudioBackend и хранилище в памяти
"""

from typing import Dict, List, Optional

import pytest

from audio_priority.config.unified_config_loader import PriorityConfig
from audio_priority.core.backend import AudioBackend
from audio_priority.core.priority_store import PriorityStore
from audio_priority.core.types import AudioDevice, DeviceClass
from audio_priority.storage.local_storage import InMemoryStorage


def make_device(name: str, device_class: DeviceClass = DeviceClass.OUTPUT,
                uid: Optional[str] = None, transport_type: str = "unknown") -> AudioDevice:
    slug = name.lower().replace(" ", "-")
    return AudioDevice(
        id=f"id-{slug}",
        uid=uid or f"uid-{slug}",
        name=name,
        transport_type=transport_type,
        is_input=device_class == DeviceClass.INPUT,
        is_output=device_class == DeviceClass.OUTPUT,
    )


class FakeAudioBackend(AudioBackend):
    """Бэкенд в памяти: set_active_device меняет активное устройство"""

    def __init__(self):
        self.devices: Dict[DeviceClass, List[AudioDevice]] = {DeviceClass.OUTPUT: [], DeviceClass.INPUT: []}
        self.active: Dict[DeviceClass, Optional[AudioDevice]] = {DeviceClass.OUTPUT: None, DeviceClass.INPUT: None}
        self.switch_calls: List[tuple] = []
        self.system_sound_calls: List[str] = []
        self.failing_classes = set()
        self.list_error: Optional[Exception] = None

    def add(self, name: str, device_class: DeviceClass = DeviceClass.OUTPUT,
            active: bool = False, **kwargs) -> AudioDevice:
        device = make_device(name, device_class, **kwargs)
        self.devices[device_class].append(device)
        if active:
            self.active[device_class] = device
        return device

    def unplug(self, name: str, device_class: DeviceClass = DeviceClass.OUTPUT):
        self.devices[device_class] = [d for d in self.devices[device_class] if d.name != name]
        active = self.active[device_class]
        if active is not None and active.name == name:
            self.active[device_class] = self.devices[device_class][0] if self.devices[device_class] else None

    async def list_devices(self, device_class: DeviceClass) -> List[AudioDevice]:
        if self.list_error:
            raise self.list_error
        return list(self.devices[device_class])

    async def get_active_device(self, device_class: DeviceClass) -> Optional[AudioDevice]:
        return self.active[device_class]

    async def set_active_device(self, device_class: DeviceClass, device_id: str) -> bool:
        self.switch_calls.append((device_class, device_id))
        if device_class in self.failing_classes:
            return False
        device = next((d for d in self.devices[device_class] if d.id == device_id), None)
        if device is None:
            return False
        self.active[device_class] = device
        return True

    async def set_system_sound_device(self, device_id: str) -> bool:
        self.system_sound_calls.append(device_id)
        return True


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    return PriorityStore(storage)


@pytest.fixture
def backend():
    return FakeAudioBackend()


@pytest.fixture
def preferences():
    return PriorityConfig(auto_switch_enabled=True, also_switch_system_sound=False, polling_interval=5.0)


@pytest.fixture
def device_factory():
    return make_device
