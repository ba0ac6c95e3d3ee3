"""
Priority Store - хранение списков приоритетов, сведений об устройствах и dirty флагов

Поврежденные записи не пробрасываются наружу: запись удаляется, возвращается
пустой список.
"""

import json
import logging
from typing import Any, List

from ..storage.local_storage import KeyValueStorage
from .naming import dedupe_names, normalize_device_name
from .types import AudioDevice, DeviceClass, StoredDeviceInfo, TransportType

logger = logging.getLogger(__name__)

DIRTY_VALUE = "true"


def priority_list_key(device_class: DeviceClass) -> str:
    return f"{device_class.storage_prefix}_priority_list"


def device_info_key(device_class: DeviceClass) -> str:
    return f"{device_class.storage_prefix}_device_info"


def dirty_flag_key(device_class: DeviceClass) -> str:
    return f"{device_class.storage_prefix}_priority_dirty"


class PriorityStore:
    """Списки приоритетов output/input поверх KeyValueStorage"""

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    def _load_json_list(self, key: str) -> List[Any]:
        """
        Читает JSON массив по ключу

        Returns:
            List: содержимое или [] (поврежденная запись удаляется)
        """
        raw = self.storage.get_item(key)
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except ValueError as e:
            logger.warning(f"⚠️ Не удалось разобрать {key}, сбрасываем: {e}")
            self.storage.remove_item(key)
            return []
        if not isinstance(parsed, list):
            logger.warning(f"⚠️ {key} не является массивом, сбрасываем")
            self.storage.remove_item(key)
            return []
        return parsed

    # =====================================================
    # СПИСКИ ПРИОРИТЕТОВ
    # =====================================================

    def get_priority_list(self, device_class: DeviceClass) -> List[str]:
        key = priority_list_key(device_class)
        names = self._load_json_list(key)
        if not all(isinstance(name, str) for name in names):
            logger.warning(f"⚠️ В {key} есть не строковые элементы, сбрасываем")
            self.storage.remove_item(key)
            return []
        return dedupe_names(names)

    def set_priority_list(self, device_class: DeviceClass, names: List[str]):
        """Сохраняет список и безусловно выставляет dirty флаг этого класса"""
        priority_list = dedupe_names(names)
        self.storage.set_item(priority_list_key(device_class), json.dumps(priority_list, ensure_ascii=False))
        self.mark_dirty(device_class)
        logger.debug(f"📊 Список приоритетов {device_class.value} сохранен: {priority_list}")

    # =====================================================
    # СВЕДЕНИЯ ОБ УСТРОЙСТВАХ
    # =====================================================

    def get_stored_device_info(self, device_class: DeviceClass) -> List[StoredDeviceInfo]:
        key = device_info_key(device_class)
        entries = self._load_json_list(key)
        try:
            return [StoredDeviceInfo.from_dict(entry) for entry in entries]
        except ValueError as e:
            logger.warning(f"⚠️ Сведения об устройствах {device_class.value} повреждены, сбрасываем: {e}")
            self.storage.remove_item(key)
            return []

    def save_stored_device_info(self, device_class: DeviceClass, infos: List[StoredDeviceInfo]):
        """
        Upsert по имени: существующая запись заменяется на месте, новая добавляется в конец.
        Записи никогда не удаляются.
        """
        merged = self.get_stored_device_info(device_class)
        positions = {normalize_device_name(info.name): index for index, info in enumerate(merged)}

        for info in infos:
            key = normalize_device_name(info.name)
            if key in positions:
                existing = merged[positions[key]]
                if info.transport_type == TransportType.UNKNOWN.value:
                    # Неизвестный тип не затирает запомненный
                    info = StoredDeviceInfo(name=info.name, transport_type=existing.transport_type)
                merged[positions[key]] = info
            else:
                positions[key] = len(merged)
                merged.append(info)

        payload = [info.to_dict() for info in merged]
        self.storage.set_item(device_info_key(device_class), json.dumps(payload, ensure_ascii=False))

    def remember_devices(self, device_class: DeviceClass, devices: List[AudioDevice]):
        """Запоминает живые устройства, чтобы показывать их тип после отключения"""
        if not devices:
            return
        self.save_stored_device_info(
            device_class,
            [StoredDeviceInfo(name=d.name, transport_type=d.transport_type) for d in devices],
        )

    # =====================================================
    # DIRTY ФЛАГИ
    # =====================================================

    def is_dirty(self, device_class: DeviceClass) -> bool:
        return self.storage.get_item(dirty_flag_key(device_class)) == DIRTY_VALUE

    def mark_dirty(self, device_class: DeviceClass):
        self.storage.set_item(dirty_flag_key(device_class), DIRTY_VALUE)

    def clear_dirty(self, device_class: DeviceClass):
        self.storage.remove_item(dirty_flag_key(device_class))
