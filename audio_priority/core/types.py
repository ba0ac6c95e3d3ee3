"""
Типы данных для модуля приоритетов аудио устройств
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Callable


class DeviceClass(Enum):
    """Класс устройства - списки приоритетов ведутся для каждого класса отдельно"""
    OUTPUT = "output"    # Наушники, колонки, встроенные динамики
    INPUT = "input"      # Микрофоны, гарнитуры

    @property
    def storage_prefix(self) -> str:
        return self.value


class TransportType(Enum):
    """Тип подключения устройства"""
    BUILTIN = "builtin"
    USB = "usb"
    BLUETOOTH = "bluetooth"
    BLUETOOTH_LE = "bluetooth_le"
    HDMI = "hdmi"
    DISPLAYPORT = "displayport"
    AIRPLAY = "airplay"
    THUNDERBOLT = "thunderbolt"
    VIRTUAL = "virtual"
    AGGREGATE = "aggregate"
    UNKNOWN = "unknown"


class LaunchType(Enum):
    """Способ запуска прохода"""
    BACKGROUND = "background"          # по расписанию, без участия пользователя
    USER_INITIATED = "user_initiated"  # запущен пользователем вручную


class PassOutcome(Enum):
    """Итог одного прохода монитора"""
    DISABLED = "disabled"
    NO_DEVICES = "no_devices"
    FAST_PATH = "fast_path"
    FULL_PASS = "full_pass"
    ERROR = "error"


@dataclass
class AudioDevice:
    """Аудио устройство, как его видит система"""
    id: str
    uid: str
    name: str
    transport_type: str = TransportType.UNKNOWN.value
    is_input: bool = False
    is_output: bool = False

    def __str__(self) -> str:
        return f"{self.name} ({self.transport_type})"


@dataclass
class RankedDevice(AudioDevice):
    """Устройство с рангом в списке приоритетов (вычисляется, не сохраняется)"""
    priority_rank: int = 0
    is_available: bool = True
    is_current: bool = False


# Ключ типа подключения в записи: пишем transport_type, читаем и camelCase варианты
STORED_TRANSPORT_KEYS = ("transport_type", "transportType", "transportKind")


@dataclass
class StoredDeviceInfo:
    """Запомненные сведения об устройстве, которое сейчас может быть отключено"""
    name: str
    transport_type: str = TransportType.UNKNOWN.value

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "transport_type": self.transport_type}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredDeviceInfo":
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            raise ValueError(f"Invalid stored device info: {data!r}")
        transport_type = next(
            (data[key] for key in STORED_TRANSPORT_KEYS if data.get(key)),
            TransportType.UNKNOWN.value,
        )
        return cls(name=data["name"], transport_type=str(transport_type))


@dataclass
class CachedVerdict:
    """Снимок последнего полного прохода - без срока годности"""
    output_uid: Optional[str] = None
    input_uid: Optional[str] = None
    output_priority_list: List[str] = field(default_factory=list)
    input_priority_list: List[str] = field(default_factory=list)
    last_update: Optional[float] = None

    def uid_for(self, device_class: DeviceClass) -> Optional[str]:
        return self.output_uid if device_class == DeviceClass.OUTPUT else self.input_uid

    def priority_list_for(self, device_class: DeviceClass) -> List[str]:
        if device_class == DeviceClass.OUTPUT:
            return self.output_priority_list
        return self.input_priority_list

    def to_dict(self) -> Dict[str, Any]:
        return {
            "output_uid": self.output_uid,
            "input_uid": self.input_uid,
            "output_priority_list": list(self.output_priority_list),
            "input_priority_list": list(self.input_priority_list),
            "last_update": self.last_update,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CachedVerdict":
        if not isinstance(data, dict):
            raise ValueError(f"Invalid cached verdict: {data!r}")

        def _names(value: Any) -> List[str]:
            if value is None:
                return []
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ValueError(f"Invalid priority list in cached verdict: {value!r}")
            return list(value)

        def _uid(value: Any) -> Optional[str]:
            if value is None or isinstance(value, str):
                return value
            raise ValueError(f"Invalid uid in cached verdict: {value!r}")

        last_update = data.get("last_update")
        if last_update is not None and not isinstance(last_update, (int, float)):
            raise ValueError(f"Invalid timestamp in cached verdict: {last_update!r}")

        return cls(
            output_uid=_uid(data.get("output_uid")),
            input_uid=_uid(data.get("input_uid")),
            output_priority_list=_names(data.get("output_priority_list")),
            input_priority_list=_names(data.get("input_priority_list")),
            last_update=last_update,
        )


@dataclass
class GateSignals:
    """Сигналы, по которым решается, нужен ли полный проход"""
    output_dirty: bool = False
    input_dirty: bool = False
    device_changed: bool = False
    output_optimal: bool = True
    input_optimal: bool = True

    @property
    def priority_list_changed(self) -> bool:
        return self.output_dirty or self.input_dirty

    @property
    def priority_mismatch(self) -> bool:
        return not self.output_optimal or not self.input_optimal

    @property
    def needs_full_pass(self) -> bool:
        return self.priority_list_changed or self.device_changed or self.priority_mismatch


@dataclass
class SwitchRecord:
    """Попытка переключения одного класса устройств"""
    device_class: DeviceClass
    device: AudioDevice
    success: bool


@dataclass
class PassResult:
    """Результат прохода монитора или ручного обновления"""
    outcome: PassOutcome
    status: str
    switched: List[SwitchRecord] = field(default_factory=list)
    signals: Optional[GateSignals] = None

    @property
    def successful_switches(self) -> List[SwitchRecord]:
        return [record for record in self.switched if record.success]


@dataclass
class EditResult:
    """Результат операции над списком приоритетов"""
    changed: bool
    priority_list: List[str]
    switched: bool = False


class AudioPriorityError(Exception):
    """Базовое исключение модуля audio_priority"""
    pass


class StorageError(AudioPriorityError):
    """Ошибка записи в хранилище"""
    pass


class BackendError(AudioPriorityError):
    """Ошибка вызова системной утилиты управления звуком"""
    pass


# Callback типы
StatusCallback = Callable[[str], None]            # строка статуса после каждого прохода
NotificationCallback = Callable[[str], None]      # уведомление о переключении (HUD)
