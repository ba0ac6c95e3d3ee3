"""
Reconciler - сведение живых устройств со списком приоритетов

Единый алгоритм для списка устройств, фонового монитора и ручного обновления.
"""

import logging
from typing import List, Optional, Tuple

from .naming import contains_name, dedupe_names, index_of_name, names_equal, normalize_device_name, priority_rank
from .priority_store import PriorityStore
from .types import AudioDevice, DeviceClass, RankedDevice, TransportType

logger = logging.getLogger(__name__)


def bootstrap_priority_list(live_devices: List[AudioDevice],
                            active_device: Optional[AudioDevice]) -> List[str]:
    """Начальный список: активное устройство первым, остальные в порядке перечисления"""
    names = [device.name for device in live_devices]
    if active_device is not None:
        names = [active_device.name] + names
    return dedupe_names(names)


def append_unseen_devices(priority_list: List[str], live_devices: List[AudioDevice]) -> List[str]:
    """Добавляет в конец новые имена, сохраняя порядок перечисления"""
    updated = list(priority_list)
    for device in live_devices:
        if not contains_name(updated, device.name):
            updated.append(device.name)
    return updated


def get_highest_priority_device(live_devices: List[AudioDevice],
                                priority_list: List[str]) -> Optional[AudioDevice]:
    """
    Живое устройство с наименьшим рангом

    Returns:
        AudioDevice: лучшее устройство или None, если ни одного нет в списке
    """
    best_device = None
    best_rank = None
    for device in live_devices:
        rank = priority_rank(priority_list, device.name)
        if rank is None:
            continue
        if best_rank is None or rank < best_rank:
            best_rank = rank
            best_device = device
    return best_device


class PriorityReconciler:
    """Объединяет перечисление устройств и сохраненные списки приоритетов"""

    def __init__(self, store: PriorityStore):
        self.store = store

    def reconcile_priority_list(self, device_class: DeviceClass, live_devices: List[AudioDevice],
                                active_device: Optional[AudioDevice] = None) -> Tuple[List[str], bool]:
        """
        Bootstrap пустого списка и дописывание новых устройств

        Returns:
            Tuple[List[str], bool]: актуальный список и флаг "список был перезаписан"
        """
        self.store.remember_devices(device_class, live_devices)

        priority_list = self.store.get_priority_list(device_class)
        updated = priority_list

        if not priority_list and live_devices:
            updated = bootstrap_priority_list(live_devices, active_device)
            logger.info(f"🎯 Список приоритетов {device_class.value} инициализирован: {updated}")

        updated = append_unseen_devices(updated, live_devices)

        if updated != priority_list:
            added = [name for name in updated if not contains_name(priority_list, name)]
            if priority_list:
                logger.info(f"➕ Новые устройства {device_class.value} добавлены в конец списка: {added}")
            self.store.set_priority_list(device_class, updated)
            return updated, True

        return priority_list, False

    def rank_devices(self, device_class: DeviceClass, live_devices: List[AudioDevice],
                     priority_list: List[str],
                     active_device: Optional[AudioDevice] = None) -> List[RankedDevice]:
        """Ранжированный вид: живые и запомненные отключенные устройства"""
        stored_info = {
            normalize_device_name(info.name): info
            for info in self.store.get_stored_device_info(device_class)
        }
        active_uid = active_device.uid if active_device else None

        ranked: List[RankedDevice] = []
        captured = set()

        for index, name in enumerate(priority_list):
            live = next((d for d in live_devices if names_equal(d.name, name)), None)
            if live is not None:
                captured.add(id(live))
                ranked.append(self._ranked_from_live(live, index + 1, active_uid))
            else:
                info = stored_info.get(normalize_device_name(name))
                ranked.append(RankedDevice(
                    id="",
                    uid=f"unavailable-{name}",
                    name=name,
                    transport_type=info.transport_type if info else TransportType.UNKNOWN.value,
                    is_input=device_class == DeviceClass.INPUT,
                    is_output=device_class == DeviceClass.OUTPUT,
                    priority_rank=index + 1,
                    is_available=False,
                    is_current=False,
                ))

        # Все живые устройства уже должны быть в списке; страхуемся от пропусков
        for device in live_devices:
            if id(device) in captured:
                continue
            index = index_of_name(priority_list, device.name)
            rank = index + 1 if index != -1 else len(priority_list) + 1
            ranked.append(self._ranked_from_live(device, rank, active_uid))

        ranked.sort(key=lambda d: d.priority_rank)
        return ranked

    def build_ranked_view(self, device_class: DeviceClass, live_devices: List[AudioDevice],
                          active_device: Optional[AudioDevice] = None) -> List[RankedDevice]:
        priority_list, _ = self.reconcile_priority_list(device_class, live_devices, active_device)
        return self.rank_devices(device_class, live_devices, priority_list, active_device)

    @staticmethod
    def _ranked_from_live(device: AudioDevice, rank: int, active_uid: Optional[str]) -> RankedDevice:
        return RankedDevice(
            id=device.id,
            uid=device.uid,
            name=device.name,
            transport_type=device.transport_type,
            is_input=device.is_input,
            is_output=device.is_output,
            priority_rank=rank,
            is_available=True,
            is_current=active_uid is not None and device.uid == active_uid,
        )
