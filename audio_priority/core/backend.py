"""
Абстракции внешних возможностей: перечисление устройств и управление ими
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .types import AudioDevice, DeviceClass


class DeviceEnumerator(ABC):
    """Перечисление устройств. Ошибки не пробрасываются: пустой список / None"""

    @abstractmethod
    async def list_devices(self, device_class: DeviceClass) -> List[AudioDevice]:
        ...

    @abstractmethod
    async def get_active_device(self, device_class: DeviceClass) -> Optional[AudioDevice]:
        ...


class DeviceController(ABC):
    """Переключение активного устройства"""

    @abstractmethod
    async def set_active_device(self, device_class: DeviceClass, device_id: str) -> bool:
        ...

    @abstractmethod
    async def set_system_sound_device(self, device_id: str) -> bool:
        ...


class AudioBackend(DeviceEnumerator, DeviceController):
    """Полный бэкенд: и перечисление, и управление"""
    pass
