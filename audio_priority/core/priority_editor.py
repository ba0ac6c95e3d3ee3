"""
Priority Editor - пользовательские операции над списком приоритетов

Каждая операция перезаписывает список целиком (выставляя dirty флаг) и сразу
проверяет, не стало ли живое устройство первым - тогда оно активируется,
не дожидаясь фонового монитора.
"""

import logging
from typing import Callable, List, Optional

from . import naming
from .backend import AudioBackend
from .types import AudioDevice, DeviceClass, EditResult, NotificationCallback
from .priority_store import PriorityStore
from ..config.unified_config_loader import PriorityConfig

logger = logging.getLogger(__name__)

ListOperation = Callable[[List[str], str], List[str]]


class PriorityEditor:
    """Перестановки в списке приоритетов с немедленным переключением"""

    def __init__(self, store: PriorityStore, backend: AudioBackend,
                 preferences: Callable[[], PriorityConfig],
                 on_notification: Optional[NotificationCallback] = None):
        self.store = store
        self.backend = backend
        self.preferences = preferences
        self.on_notification = on_notification

    async def set_top(self, device_class: DeviceClass, name: str) -> EditResult:
        return await self._apply(device_class, name, naming.set_top, "set as top priority", always_check=True)

    async def move_up(self, device_class: DeviceClass, name: str) -> EditResult:
        return await self._apply(device_class, name, naming.move_up, "moved up")

    async def move_down(self, device_class: DeviceClass, name: str) -> EditResult:
        return await self._apply(device_class, name, naming.move_down, "moved down")

    async def move_to_bottom(self, device_class: DeviceClass, name: str) -> EditResult:
        return await self._apply(device_class, name, naming.move_to_bottom, "moved to bottom")

    async def remove(self, device_class: DeviceClass, name: str) -> EditResult:
        """Удаление разрешено только для отключенных устройств"""
        live_devices = await self._list_live(device_class)
        if any(naming.names_equal(d.name, name) for d in live_devices):
            logger.warning(f"⚠️ Нельзя удалить подключенное устройство из списка: {name}")
            return EditResult(changed=False, priority_list=self.store.get_priority_list(device_class))
        return await self._apply(device_class, name, naming.remove_name, "removed")

    async def _apply(self, device_class: DeviceClass, name: str, operation: ListOperation,
                     label: str, always_check: bool = False) -> EditResult:
        current = self.store.get_priority_list(device_class)
        if not naming.contains_name(current, name):
            logger.warning(f"⚠️ Устройство '{name}' отсутствует в списке {device_class.value}")
            return EditResult(changed=False, priority_list=current)

        new_list = operation(current, name)
        changed = new_list != current
        if changed:
            self.store.set_priority_list(device_class, new_list)
            logger.info(f"📊 {name} {label} ({device_class.value}): {new_list}")
        else:
            logger.debug(f"🔍 {name}: '{label}' ничего не изменил")

        switched = False
        if changed or always_check:
            switched = await self._auto_switch_if_top_priority(device_class, name, new_list)

        return EditResult(changed=changed, priority_list=new_list, switched=switched)

    async def _list_live(self, device_class: DeviceClass) -> List[AudioDevice]:
        try:
            return await self.backend.list_devices(device_class)
        except Exception as e:
            logger.error(f"❌ Ошибка получения устройств {device_class.value}: {e}")
            return []

    async def _auto_switch_if_top_priority(self, device_class: DeviceClass, name: str,
                                           priority_list: List[str]) -> bool:
        """Активирует устройство, если оно стало первым и подключено"""
        if naming.priority_rank(priority_list, name) != 1:
            return False

        preferences = self.preferences()
        if not preferences.auto_switch_enabled:
            return False

        live_devices = await self._list_live(device_class)
        device = next((d for d in live_devices if naming.names_equal(d.name, name)), None)
        if device is None:
            return False

        try:
            if not await self.backend.set_active_device(device_class, device.id):
                logger.error(f"❌ Не удалось переключиться на {device.name}")
                return False
            if device_class == DeviceClass.OUTPUT and preferences.also_switch_system_sound:
                if not await self.backend.set_system_sound_device(device.id):
                    logger.warning(f"⚠️ Не удалось назначить {device.name} для системных звуков")
        except Exception as e:
            logger.error(f"❌ Ошибка автоматического переключения: {e}")
            return False

        logger.info(f"✅ Auto-switched to {device_class.value}: {device.name}")
        self._notify(f"Auto-switched to {device_class.value.capitalize()}: {device.name}")
        return True

    def _notify(self, message: str):
        if self.on_notification:
            try:
                self.on_notification(message)
            except Exception as e:
                logger.error(f"❌ Ошибка в callback уведомлений: {e}")
