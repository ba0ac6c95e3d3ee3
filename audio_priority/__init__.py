"""
AudioPriority - списки приоритетов аудио устройств для macOS

Этот модуль предоставляет:
- Отдельные списки приоритетов для вывода и ввода
- Автоматическое переключение на самое приоритетное подключенное устройство
- Кэш-гейт, пропускающий полный проход, когда ничего не изменилось
- Ручное обновление и перестановки списка с немедленным переключением
"""

from typing import Optional

from .core.types import (
    AudioDevice, RankedDevice, StoredDeviceInfo, CachedVerdict, GateSignals,
    DeviceClass, TransportType, LaunchType, PassOutcome, PassResult, SwitchRecord, EditResult,
    AudioPriorityError, StorageError, BackendError,
    StatusCallback, NotificationCallback
)
from .core.backend import AudioBackend, DeviceEnumerator, DeviceController
from .core.priority_store import PriorityStore
from .core.reconciler import PriorityReconciler, get_highest_priority_device
from .core.change_detector import ChangeDetector
from .core.priority_editor import PriorityEditor
from .core.priority_monitor import PriorityMonitor
from .storage.local_storage import KeyValueStorage, InMemoryStorage, JsonFileStorage
from .config.unified_config_loader import UnifiedConfigLoader

# Версия модуля
__version__ = "1.0.0"

# Экспортируемые классы и функции
__all__ = [
    # Основные классы
    "PriorityMonitor",
    "PriorityEditor",
    "PriorityStore",
    "PriorityReconciler",
    "ChangeDetector",

    # Типы данных
    "AudioDevice",
    "RankedDevice",
    "StoredDeviceInfo",
    "CachedVerdict",
    "GateSignals",
    "DeviceClass",
    "TransportType",
    "LaunchType",
    "PassOutcome",
    "PassResult",
    "SwitchRecord",
    "EditResult",

    # Исключения
    "AudioPriorityError",
    "StorageError",
    "BackendError",

    # Callback типы
    "StatusCallback",
    "NotificationCallback",

    # Внешние возможности
    "AudioBackend",
    "DeviceEnumerator",
    "DeviceController",
    "KeyValueStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    "UnifiedConfigLoader",

    # Фабрики и утилиты
    "create_backend",
    "create_storage",
    "create_priority_monitor",
    "create_priority_editor",
    "get_highest_priority_device",

    # Версия
    "__version__"
]


def create_backend(loader: UnifiedConfigLoader) -> AudioBackend:
    """Создает SwitchAudioBridge по секциям switchaudio/system_profiler"""
    from .macos.switchaudio_bridge import SwitchAudioBridge

    backend_config = loader.get_backend_config()
    return SwitchAudioBridge(
        switchaudio_path=backend_config.switchaudio_path,
        timeout=backend_config.switchaudio_timeout,
        system_profiler_enabled=backend_config.system_profiler_enabled,
        system_profiler_timeout=backend_config.system_profiler_timeout,
    )


def create_storage(loader: UnifiedConfigLoader) -> KeyValueStorage:
    return JsonFileStorage(loader.get_storage_config().path)


def create_priority_monitor(loader: Optional[UnifiedConfigLoader] = None,
                            storage: Optional[KeyValueStorage] = None,
                            backend: Optional[AudioBackend] = None,
                            on_status: Optional[StatusCallback] = None,
                            on_notification: Optional[NotificationCallback] = None) -> PriorityMonitor:
    """
    Создает PriorityMonitor с конфигурацией

    Args:
        loader: Загрузчик конфигурации (по умолчанию - пользовательский файл)
        storage: Хранилище (по умолчанию - JSON файл из конфигурации)
        backend: Бэкенд устройств (по умолчанию - SwitchAudioSource)

    Returns:
        PriorityMonitor: монитор, читающий настройки перед каждым проходом
    """
    loader = loader or UnifiedConfigLoader()
    storage = storage or create_storage(loader)
    backend = backend or create_backend(loader)
    return PriorityMonitor(
        store=PriorityStore(storage),
        backend=backend,
        preferences=loader.get_priority_config,
        on_status=on_status,
        on_notification=on_notification,
    )


def create_priority_editor(loader: Optional[UnifiedConfigLoader] = None,
                           storage: Optional[KeyValueStorage] = None,
                           backend: Optional[AudioBackend] = None,
                           on_notification: Optional[NotificationCallback] = None) -> PriorityEditor:
    loader = loader or UnifiedConfigLoader()
    storage = storage or create_storage(loader)
    backend = backend or create_backend(loader)
    return PriorityEditor(
        store=PriorityStore(storage),
        backend=backend,
        preferences=loader.get_priority_config,
        on_notification=on_notification,
    )
