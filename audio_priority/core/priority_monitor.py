"""
Priority Monitor - фоновый проход по расписанию и ручное обновление

Фоновый проход идет через Change Detector и переключает устройства только при
запуске без участия пользователя. Ручное обновление всегда делает полный проход
и всегда переключает на устройства с наивысшим приоритетом.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from .backend import AudioBackend
from .change_detector import ChangeDetector
from .priority_store import PriorityStore
from .reconciler import PriorityReconciler, get_highest_priority_device
from .types import (
    AudioDevice, DeviceClass, LaunchType, PassOutcome, PassResult, RankedDevice, SwitchRecord,
    StatusCallback, NotificationCallback
)
from ..config.unified_config_loader import PriorityConfig

logger = logging.getLogger(__name__)

STATUS_DISABLED = "Auto-switch disabled"
STATUS_NO_ACTIVE_DEVICES = "No audio devices found"
STATUS_NO_DEVICES = "No devices available"
STATUS_MONITOR_ERROR = "Error checking priorities"
STATUS_REFRESH_ERROR = "Error during refresh"
STATUS_CHECKING = "Checking audio devices..."


def _device_label(device: Optional[AudioDevice]) -> str:
    return device.name if device else "none"


def format_status(prefix: str, output_device: Optional[AudioDevice], input_device: Optional[AudioDevice]) -> str:
    return f"{prefix}: {_device_label(output_device)} | {_device_label(input_device)}"


def describe_switches(records: List[SwitchRecord]) -> str:
    return ", ".join(f"{r.device_class.value.capitalize()}: {r.device.name}" for r in records)


class PriorityMonitor:
    """Проходы сведения приоритетов: фоновый (с кэшем) и ручной"""

    def __init__(self, store: PriorityStore, backend: AudioBackend,
                 preferences: Callable[[], PriorityConfig],
                 detector: Optional[ChangeDetector] = None,
                 reconciler: Optional[PriorityReconciler] = None,
                 on_status: Optional[StatusCallback] = None,
                 on_notification: Optional[NotificationCallback] = None):
        self.store = store
        self.backend = backend
        self.preferences = preferences
        self.detector = detector or ChangeDetector(store.storage, store)
        self.reconciler = reconciler or PriorityReconciler(store)
        self.on_status = on_status
        self.on_notification = on_notification

        # Проходы одного процесса не пересекаются
        self._pass_lock = asyncio.Lock()

    # =====================================================
    # ФОНОВЫЙ ПРОХОД
    # =====================================================

    async def run_pass(self, launch_type: LaunchType = LaunchType.BACKGROUND) -> PassResult:
        """Один проход монитора через кэш-гейт"""
        async with self._pass_lock:
            start_time = time.monotonic()
            logger.info(f"🚀 [PriorityMonitor] Проход начат ({launch_type.value})")

            try:
                result = await self._run_gated_pass(launch_type)
            except Exception as e:
                logger.error(f"❌ [PriorityMonitor] Ошибка прохода: {e}", exc_info=True)
                result = PassResult(outcome=PassOutcome.ERROR, status=STATUS_MONITOR_ERROR)

            self._emit_status(result.status)
            duration_ms = (time.monotonic() - start_time) * 1000
            logger.info(f"✅ [PriorityMonitor] Проход завершен: {result.outcome.value} ({duration_ms:.0f}ms)")
            return result

    async def _run_gated_pass(self, launch_type: LaunchType) -> PassResult:
        preferences = self.preferences()
        if not preferences.auto_switch_enabled:
            logger.info("🔄 Автоматическое переключение отключено")
            return PassResult(outcome=PassOutcome.DISABLED, status=STATUS_DISABLED)

        verdict = self.detector.load_verdict()

        active_output, active_input = await self._get_active_devices()
        if active_output is None and active_input is None:
            logger.warning("⚠️ Не удалось определить активные устройства")
            return PassResult(outcome=PassOutcome.NO_DEVICES, status=STATUS_NO_ACTIVE_DEVICES)

        live_output, live_input = await self._list_live_devices()
        signals = self.detector.collect_signals(verdict, active_output, active_input, live_output, live_input)

        if not signals.needs_full_pass:
            logger.info("⚡ Изменений нет - быстрый путь")
            return PassResult(
                outcome=PassOutcome.FAST_PATH,
                status=format_status("Active", active_output, active_input),
                signals=signals,
            )

        logger.info(
            f"🔄 Нужен полный проход: dirty={signals.priority_list_changed}, "
            f"device_changed={signals.device_changed}, mismatch={signals.priority_mismatch}"
        )

        should_switch = launch_type == LaunchType.BACKGROUND and preferences.auto_switch_enabled
        if not should_switch:
            logger.info("ℹ️ Запуск пользователем - переключение пропускается")

        result = await self._full_pass(
            preferences,
            active_output,
            active_input,
            perform_switch=should_switch,
            consumed_dirty={
                DeviceClass.OUTPUT: signals.output_dirty,
                DeviceClass.INPUT: signals.input_dirty,
            },
            status_prefix="Priority",
        )
        result.signals = signals

        if result.successful_switches:
            self._notify(f"Auto-switched to {describe_switches(result.successful_switches)}")
        return result

    # =====================================================
    # РУЧНОЕ ОБНОВЛЕНИЕ
    # =====================================================

    async def refresh(self) -> PassResult:
        """Ручное обновление: всегда полный проход и переключение"""
        async with self._pass_lock:
            start_time = time.monotonic()
            logger.info("🚀 [PriorityRefresh] Ручное обновление начато")
            self._emit_status(STATUS_CHECKING)

            try:
                result = await self._run_refresh()
            except Exception as e:
                logger.error(f"❌ [PriorityRefresh] Ошибка обновления: {e}", exc_info=True)
                result = PassResult(outcome=PassOutcome.ERROR, status=STATUS_REFRESH_ERROR)
                self._notify("❌ Error during device refresh")

            self._emit_status(result.status)
            duration_ms = (time.monotonic() - start_time) * 1000
            logger.info(f"✅ [PriorityRefresh] Обновление завершено: {result.outcome.value} ({duration_ms:.0f}ms)")
            return result

    async def _run_refresh(self) -> PassResult:
        preferences = self.preferences()

        active_output, active_input = await self._get_active_devices()
        if active_output is None and active_input is None:
            logger.warning("⚠️ Не удалось определить активные устройства")
            self._notify("❌ No audio devices found")
            return PassResult(outcome=PassOutcome.NO_DEVICES, status=STATUS_NO_ACTIVE_DEVICES)

        result = await self._full_pass(
            preferences,
            active_output,
            active_input,
            perform_switch=True,
            consumed_dirty={
                DeviceClass.OUTPUT: self.store.is_dirty(DeviceClass.OUTPUT),
                DeviceClass.INPUT: self.store.is_dirty(DeviceClass.INPUT),
            },
            status_prefix="Active",
        )

        if result.outcome == PassOutcome.NO_DEVICES:
            self._notify("❌ No audio devices available")
        elif result.successful_switches:
            self._notify(f"✅ Switched to {describe_switches(result.successful_switches)}")
        elif result.switched:
            self._notify("❌ Failed to switch audio devices")
        else:
            self._notify("✅ Already using highest priority devices")
        return result

    # =====================================================
    # СПИСОК УСТРОЙСТВ
    # =====================================================

    async def list_ranked_devices(self, device_class: DeviceClass) -> List[RankedDevice]:
        """Ранжированный вид класса (живые + запомненные отключенные)"""
        async with self._pass_lock:
            active_device, live_devices = await asyncio.gather(
                self._get_active(device_class),
                self._list_live(device_class),
            )
            return self.reconciler.build_ranked_view(device_class, live_devices, active_device)

    # =====================================================
    # ПОЛНЫЙ ПРОХОД
    # =====================================================

    async def _full_pass(self, preferences: PriorityConfig,
                         active_output: Optional[AudioDevice], active_input: Optional[AudioDevice],
                         perform_switch: bool, consumed_dirty: Dict[DeviceClass, bool],
                         status_prefix: str) -> PassResult:
        """Перечисление, сведение, выбор лучших устройств, переключение, обновление кэша"""
        live_output, live_input = await self._list_live_devices()
        logger.info(f"📱 Найдено устройств: output={len(live_output)}, input={len(live_input)}")

        if not live_output and not live_input:
            logger.warning("⚠️ Нет доступных устройств ни одного класса")
            return PassResult(outcome=PassOutcome.NO_DEVICES, status=STATUS_NO_DEVICES)

        output_list, output_appended = self.reconciler.reconcile_priority_list(
            DeviceClass.OUTPUT, live_output, active_output
        )
        input_list, input_appended = self.reconciler.reconcile_priority_list(
            DeviceClass.INPUT, live_input, active_input
        )

        top_output = get_highest_priority_device(live_output, output_list)
        top_input = get_highest_priority_device(live_input, input_list)
        logger.info(f"🎯 Лучшие устройства: output={_device_label(top_output)}, input={_device_label(top_input)}")

        switched: List[SwitchRecord] = []
        if perform_switch:
            for device_class, top_device, active_device in (
                (DeviceClass.OUTPUT, top_output, active_output),
                (DeviceClass.INPUT, top_input, active_input),
            ):
                if top_device is None:
                    continue
                if active_device is not None and active_device.uid == top_device.uid:
                    continue
                switched.append(await self._switch_class(device_class, top_device, active_device, preferences))

        verdict = self.detector.build_verdict(
            output_uid=self._verdict_uid(top_output, active_output),
            input_uid=self._verdict_uid(top_input, active_input),
            output_priority_list=output_list,
            input_priority_list=input_list,
        )
        self.detector.save_verdict(verdict)

        for device_class, appended in ((DeviceClass.OUTPUT, output_appended), (DeviceClass.INPUT, input_appended)):
            if consumed_dirty.get(device_class) or appended:
                self.store.clear_dirty(device_class)

        return PassResult(
            outcome=PassOutcome.FULL_PASS,
            status=format_status(status_prefix, top_output or active_output, top_input or active_input),
            switched=switched,
        )

    async def _switch_class(self, device_class: DeviceClass, target: AudioDevice,
                            active_device: Optional[AudioDevice], preferences: PriorityConfig) -> SwitchRecord:
        """Переключение одного класса; ошибка не мешает другому классу"""
        logger.info(
            f"🔄 Переключение {device_class.value}: '{_device_label(active_device)}' -> '{target.name}'"
        )
        try:
            success = await self.backend.set_active_device(device_class, target.id)
            if success and device_class == DeviceClass.OUTPUT and preferences.also_switch_system_sound:
                if not await self.backend.set_system_sound_device(target.id):
                    logger.warning(f"⚠️ Не удалось назначить {target.name} для системных звуков")
        except Exception as e:
            logger.error(f"❌ Ошибка переключения {device_class.value} на {target.name}: {e}")
            success = False

        if success:
            logger.info(f"✅ {device_class.value} переключен на: {target.name}")
        else:
            logger.error(f"❌ Не удалось переключить {device_class.value} на: {target.name}")
        return SwitchRecord(device_class=device_class, device=target, success=success)

    @staticmethod
    def _verdict_uid(top_device: Optional[AudioDevice], active_device: Optional[AudioDevice]) -> Optional[str]:
        if top_device is not None:
            return top_device.uid
        return active_device.uid if active_device else None

    # =====================================================
    # ВНЕШНИЕ ВЫЗОВЫ
    # =====================================================

    async def _get_active(self, device_class: DeviceClass) -> Optional[AudioDevice]:
        try:
            return await self.backend.get_active_device(device_class)
        except Exception as e:
            logger.error(f"❌ Ошибка получения активного устройства {device_class.value}: {e}")
            return None

    async def _list_live(self, device_class: DeviceClass) -> List[AudioDevice]:
        try:
            return list(await self.backend.list_devices(device_class))
        except Exception as e:
            logger.error(f"❌ Ошибка получения устройств {device_class.value}: {e}")
            return []

    async def _get_active_devices(self) -> Tuple[Optional[AudioDevice], Optional[AudioDevice]]:
        active_output, active_input = await asyncio.gather(
            self._get_active(DeviceClass.OUTPUT),
            self._get_active(DeviceClass.INPUT),
        )
        logger.debug(f"🔍 Активные устройства: output={_device_label(active_output)}, input={_device_label(active_input)}")
        return active_output, active_input

    async def _list_live_devices(self) -> Tuple[List[AudioDevice], List[AudioDevice]]:
        live_output, live_input = await asyncio.gather(
            self._list_live(DeviceClass.OUTPUT),
            self._list_live(DeviceClass.INPUT),
        )
        return live_output, live_input

    def _emit_status(self, status: str):
        if self.on_status:
            try:
                self.on_status(status)
            except Exception as e:
                logger.error(f"❌ Ошибка в callback статуса: {e}")

    def _notify(self, message: str):
        if self.on_notification:
            try:
                self.on_notification(message)
            except Exception as e:
                logger.error(f"❌ Ошибка в callback уведомлений: {e}")
