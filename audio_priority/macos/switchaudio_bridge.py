"""
Мост для работы с SwitchAudioSource - утилитой переключения аудио устройств на macOS

Перечисление: SwitchAudioSource -a -t <output|input> -f json
Активное устройство: SwitchAudioSource -c -t <output|input> -f json
Переключение: SwitchAudioSource -t <output|input|system> -i <id>
Тип подключения берется из system_profiler SPAudioDataType -json.
"""

import asyncio
import json
import logging
import shutil
import subprocess
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

from ..core.backend import AudioBackend
from ..core.naming import normalize_device_name
from ..core.types import AudioDevice, BackendError, DeviceClass, TransportType

logger = logging.getLogger(__name__)

# coreaudio_device_transport -> TransportType
TRANSPORT_MAP = {
    "coreaudio_device_type_builtin": TransportType.BUILTIN,
    "coreaudio_device_type_usb": TransportType.USB,
    "coreaudio_device_type_bluetooth": TransportType.BLUETOOTH,
    "coreaudio_device_type_bluetooth_le": TransportType.BLUETOOTH_LE,
    "coreaudio_device_type_hdmi": TransportType.HDMI,
    "coreaudio_device_type_displayport": TransportType.DISPLAYPORT,
    "coreaudio_device_type_airplay": TransportType.AIRPLAY,
    "coreaudio_device_type_thunderbolt": TransportType.THUNDERBOLT,
    "coreaudio_device_type_virtual": TransportType.VIRTUAL,
    "coreaudio_device_type_aggregate": TransportType.AGGREGATE,
}

TRANSPORT_CACHE_TTL = 30.0


def parse_transport_type(raw: Optional[str]) -> str:
    if not raw:
        return TransportType.UNKNOWN.value
    return TRANSPORT_MAP.get(raw.strip().lower(), TransportType.UNKNOWN).value


def parse_system_profiler_output(output: str) -> Dict[str, str]:
    """
    Разбирает JSON вывод system_profiler SPAudioDataType

    Returns:
        Dict[str, str]: нормализованное имя устройства -> TransportType.value
    """
    data = json.loads(output)
    transports: Dict[str, str] = {}
    for section in data.get("SPAudioDataType", []) or []:
        for item in section.get("_items", []) or []:
            name = item.get("_name")
            if not isinstance(name, str):
                continue
            transports[normalize_device_name(name)] = parse_transport_type(
                item.get("coreaudio_device_transport")
            )
    return transports


class SwitchAudioBridge(AudioBackend):
    """Перечисление и переключение устройств через SwitchAudioSource"""

    def __init__(self, switchaudio_path: Optional[str] = None, timeout: float = 10.0,
                 system_profiler_enabled: bool = True, system_profiler_timeout: float = 10.0):
        self.configured_path = switchaudio_path
        self.timeout = timeout
        self.system_profiler_enabled = system_profiler_enabled
        self.system_profiler_timeout = system_profiler_timeout

        self._transport_cache: Dict[str, str] = {}
        self._transport_cache_time: Optional[float] = None

    def _get_switchaudio_path(self) -> str:
        """
        Определяет путь к бинарнику SwitchAudioSource.

        Порядок поиска:
        1) PyInstaller onefile (sys._MEIPASS)
        2) PyInstaller bundle (.app/Contents/Resources/)
        3) путь из конфигурации
        4) PATH (Homebrew)
        """
        if hasattr(sys, "_MEIPASS"):
            path = Path(sys._MEIPASS) / "resources" / "audio" / "SwitchAudioSource"
            if path.exists():
                return str(path)

        macos_dir = Path(sys.argv[0]).resolve().parent
        resources_path = macos_dir.parent / "Resources" / "resources" / "audio" / "SwitchAudioSource"
        if resources_path.exists():
            return str(resources_path)

        if self.configured_path:
            return str(Path(self.configured_path).expanduser())

        return shutil.which("SwitchAudioSource") or "SwitchAudioSource"

    def _run(self, args: List[str], timeout: float) -> str:
        """Запускает команду и возвращает stdout; любые сбои -> BackendError"""
        try:
            result = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise BackendError(f"{args[0]} timed out after {timeout}s") from e
        except OSError as e:
            raise BackendError(f"{args[0]} is not available: {e}") from e

        if result.returncode != 0:
            raise BackendError(f"{args[0]} exited with {result.returncode}: {result.stderr.strip()}")
        return result.stdout

    def _run_switchaudio(self, *args: str) -> str:
        return self._run([self._get_switchaudio_path(), *args], self.timeout)

    # =====================================================
    # ТИП ПОДКЛЮЧЕНИЯ
    # =====================================================

    def _load_transport_types(self) -> Dict[str, str]:
        if not self.system_profiler_enabled:
            return {}

        now = time.monotonic()
        if self._transport_cache_time is not None and now - self._transport_cache_time < TRANSPORT_CACHE_TTL:
            return self._transport_cache

        try:
            output = self._run(["system_profiler", "SPAudioDataType", "-json"], self.system_profiler_timeout)
            self._transport_cache = parse_system_profiler_output(output)
        except (BackendError, ValueError) as e:
            logger.warning(f"⚠️ Не удалось получить типы подключения через system_profiler: {e}")
            self._transport_cache = {}
        self._transport_cache_time = now
        return self._transport_cache

    # =====================================================
    # ПЕРЕЧИСЛЕНИЕ
    # =====================================================

    def _parse_device_line(self, line: str, device_class: DeviceClass,
                           transports: Dict[str, str]) -> Optional[AudioDevice]:
        """Строка вида {"name": "...", "type": "output", "id": "73", "uid": "..."}"""
        try:
            data = json.loads(line)
        except ValueError:
            logger.warning(f"⚠️ Не удалось разобрать строку SwitchAudioSource: {line!r}")
            return None

        name = data.get("name")
        if not isinstance(name, str) or not name:
            return None

        return AudioDevice(
            id=str(data.get("id", "")),
            uid=str(data.get("uid") or data.get("id", "")),
            name=name,
            transport_type=transports.get(normalize_device_name(name), TransportType.UNKNOWN.value),
            is_input=device_class == DeviceClass.INPUT,
            is_output=device_class == DeviceClass.OUTPUT,
        )

    def _list_devices_sync(self, device_class: DeviceClass) -> List[AudioDevice]:
        output = self._run_switchaudio("-a", "-t", device_class.value, "-f", "json")
        transports = self._load_transport_types()
        devices = []
        for line in output.splitlines():
            if line.strip():
                device = self._parse_device_line(line, device_class, transports)
                if device:
                    devices.append(device)
        return devices

    def _get_active_device_sync(self, device_class: DeviceClass) -> Optional[AudioDevice]:
        output = self._run_switchaudio("-c", "-t", device_class.value, "-f", "json").strip()
        if not output:
            return None
        return self._parse_device_line(output.splitlines()[0], device_class, self._load_transport_types())

    async def list_devices(self, device_class: DeviceClass) -> List[AudioDevice]:
        """Получение списка устройств класса; при ошибке - пустой список"""
        try:
            devices = await asyncio.to_thread(self._list_devices_sync, device_class)
            logger.debug(f"📱 {device_class.value}: {[d.name for d in devices]}")
            return devices
        except BackendError as e:
            logger.error(f"❌ Ошибка получения устройств через SwitchAudioSource: {e}")
            return []

    async def get_active_device(self, device_class: DeviceClass) -> Optional[AudioDevice]:
        try:
            return await asyncio.to_thread(self._get_active_device_sync, device_class)
        except BackendError as e:
            logger.error(f"❌ Ошибка получения активного устройства: {e}")
            return None

    # =====================================================
    # ПЕРЕКЛЮЧЕНИЕ
    # =====================================================

    async def set_active_device(self, device_class: DeviceClass, device_id: str) -> bool:
        return await self._switch(device_class.value, device_id)

    async def set_system_sound_device(self, device_id: str) -> bool:
        return await self._switch("system", device_id)

    async def _switch(self, target_type: str, device_id: str) -> bool:
        if not device_id:
            logger.error(f"❌ Пустой ID устройства для переключения ({target_type})")
            return False
        try:
            await asyncio.to_thread(self._run_switchaudio, "-t", target_type, "-i", device_id)
            logger.info(f"✅ Устройство {target_type} переключено: id={device_id}")
            return True
        except BackendError as e:
            logger.error(f"❌ Ошибка переключения {target_type} на id={device_id}: {e}")
            return False
