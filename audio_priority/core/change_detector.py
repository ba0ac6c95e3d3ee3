"""
Change Detector - кэшированный вердикт и решение о полном проходе

Полный проход нужен, если сработал хотя бы один из трех сигналов:
- dirty флаг (пользователь поменял порядок)
- смена активного устройства вне этого инструмента
- в кэшированном списке есть живое устройство выше активного (hot-plug)
Кэш не устаревает по времени, только по изменениям.
"""

import json
import logging
import time
from typing import List, Optional

from ..storage.local_storage import KeyValueStorage
from .naming import names_equal, normalize_device_name
from .priority_store import PriorityStore
from .types import AudioDevice, CachedVerdict, DeviceClass, GateSignals

logger = logging.getLogger(__name__)

MONITOR_STATE_KEY = "priority_monitor_state"


def available_priorities(cached_priority_list: List[str], live_devices: List[AudioDevice]) -> List[str]:
    """Кэшированный список, отфильтрованный до живых устройств"""
    live_names = {normalize_device_name(device.name) for device in live_devices}
    return [name for name in cached_priority_list if normalize_device_name(name) in live_names]


def is_active_device_optimal(cached_priority_list: List[str], live_devices: List[AudioDevice],
                             active_device: Optional[AudioDevice]) -> bool:
    """Активное устройство совпадает с первым живым именем кэшированного списка"""
    candidates = available_priorities(cached_priority_list, live_devices)
    if not candidates:
        return True
    if active_device is None:
        return False
    return names_equal(candidates[0], active_device.name)


class ChangeDetector:
    """Хранит CachedVerdict и собирает сигналы для решения о полном проходе"""

    def __init__(self, storage: KeyValueStorage, store: PriorityStore):
        self.storage = storage
        self.store = store

    def load_verdict(self) -> CachedVerdict:
        """Загружает вердикт; поврежденная запись удаляется и считается пустой"""
        raw = self.storage.get_item(MONITOR_STATE_KEY)
        if not raw:
            return CachedVerdict()
        try:
            return CachedVerdict.from_dict(json.loads(raw))
        except ValueError as e:
            logger.warning(f"⚠️ Кэш монитора поврежден, сбрасываем: {e}")
            self.storage.remove_item(MONITOR_STATE_KEY)
            return CachedVerdict()

    def save_verdict(self, verdict: CachedVerdict):
        if verdict.last_update is None:
            verdict.last_update = time.time()
        self.storage.set_item(MONITOR_STATE_KEY, json.dumps(verdict.to_dict(), ensure_ascii=False))
        logger.debug(f"💾 Кэш обновлен: output={verdict.output_uid}, input={verdict.input_uid}")

    def build_verdict(self, output_uid: Optional[str], input_uid: Optional[str],
                      output_priority_list: List[str], input_priority_list: List[str]) -> CachedVerdict:
        return CachedVerdict(
            output_uid=output_uid,
            input_uid=input_uid,
            output_priority_list=list(output_priority_list),
            input_priority_list=list(input_priority_list),
            last_update=time.time(),
        )

    def collect_signals(self, verdict: CachedVerdict,
                        active_output: Optional[AudioDevice], active_input: Optional[AudioDevice],
                        live_output: List[AudioDevice], live_input: List[AudioDevice]) -> GateSignals:
        """Собирает три независимых сигнала"""
        output_uid = active_output.uid if active_output else None
        input_uid = active_input.uid if active_input else None

        signals = GateSignals(
            output_dirty=self.store.is_dirty(DeviceClass.OUTPUT),
            input_dirty=self.store.is_dirty(DeviceClass.INPUT),
            device_changed=(output_uid != verdict.output_uid or input_uid != verdict.input_uid),
            output_optimal=is_active_device_optimal(
                verdict.priority_list_for(DeviceClass.OUTPUT), live_output, active_output
            ),
            input_optimal=is_active_device_optimal(
                verdict.priority_list_for(DeviceClass.INPUT), live_input, active_input
            ),
        )

        if not signals.output_optimal:
            expected = available_priorities(verdict.output_priority_list, live_output)[0]
            logger.info(f"⚠️ Доступно более приоритетное устройство вывода: '{expected}'")
        if not signals.input_optimal:
            expected = available_priorities(verdict.input_priority_list, live_input)[0]
            logger.info(f"⚠️ Доступно более приоритетное устройство ввода: '{expected}'")

        logger.debug(
            f"🔍 Сигналы: dirty={signals.priority_list_changed}, device_changed={signals.device_changed}, "
            f"mismatch={signals.priority_mismatch}, cached_uids=({verdict.output_uid}, {verdict.input_uid}), "
            f"current_uids=({output_uid}, {input_uid})"
        )
        return signals
