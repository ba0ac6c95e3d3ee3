"""
Единый загрузчик конфигурации AudioPriority
Встроенный default_config.yaml, поверх него - пользовательский файл
"""

import copy
import logging
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(__file__).resolve().parent / "default_config.yaml"
USER_CONFIG_FILE = Path("~/.audio_priority/config.yaml")
CONFIG_ENV_VAR = "AUDIO_PRIORITY_CONFIG"


@dataclass
class AppConfig:
    """Основные настройки приложения"""
    name: str
    version: str


@dataclass
class PriorityConfig:
    """Пользовательские настройки, читаются в начале каждого прохода"""
    auto_switch_enabled: bool = True
    also_switch_system_sound: bool = False
    polling_interval: float = 5.0


@dataclass
class StorageConfig:
    """Где лежит хранилище списков приоритетов"""
    path: str


@dataclass
class BackendConfig:
    """Настройки SwitchAudioSource и system_profiler"""
    switchaudio_path: Optional[str]
    switchaudio_timeout: float
    system_profiler_enabled: bool
    system_profiler_timeout: float


@dataclass
class LoggingConfig:
    """Настройки логирования"""
    level: str
    dir: str
    console: bool
    max_bytes: int
    backup_count: int


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class UnifiedConfigLoader:
    """Загрузчик конфигурации с перечитыванием при изменении файла"""

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        if config_file is None:
            config_file = os.environ.get(CONFIG_ENV_VAR) or USER_CONFIG_FILE
        self.config_file = Path(config_file).expanduser()
        self._config_cache: Optional[Dict[str, Any]] = None
        self._last_modified: Optional[float] = None

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}

    def _load_config(self) -> Dict[str, Any]:
        """Загружает конфигурацию с проверкой изменений"""
        if self._config_cache is None or self._is_config_modified():
            config = self._read_yaml(DEFAULT_CONFIG_FILE)
            if self.config_file.exists():
                try:
                    config = _deep_merge(config, self._read_yaml(self.config_file))
                    self._last_modified = self.config_file.stat().st_mtime
                except (OSError, yaml.YAMLError) as e:
                    logger.error(f"❌ Ошибка чтения {self.config_file}, используем значения по умолчанию: {e}")
                    self._last_modified = None
            else:
                self._last_modified = None
            self._config_cache = config
        return self._config_cache

    def _is_config_modified(self) -> bool:
        """Проверяет, был ли файл конфигурации изменен (или появился/исчез)"""
        if not self.config_file.exists():
            return self._last_modified is not None
        current_mtime = self.config_file.stat().st_mtime
        return self._last_modified is None or current_mtime > self._last_modified

    def reload(self):
        """Принудительно перезагружает конфигурацию"""
        self._config_cache = None
        self._last_modified = None

    # =====================================================
    # СЕКЦИИ
    # =====================================================

    def get_app_config(self) -> AppConfig:
        app_data = self._load_config().get('app') or {}
        return AppConfig(
            name=app_data.get('name', 'AudioPriority'),
            version=str(app_data.get('version', '0.0.0')),
        )

    def get_priority_config(self) -> PriorityConfig:
        """Настройки приоритетов (auto-switch, системный звук, интервал опроса)"""
        data = self._load_config().get('priority') or {}
        return PriorityConfig(
            auto_switch_enabled=bool(data.get('auto_switch_enabled', True)),
            also_switch_system_sound=bool(data.get('also_switch_system_sound', False)),
            polling_interval=float(data.get('polling_interval', 5.0)),
        )

    def get_storage_config(self) -> StorageConfig:
        data = self._load_config().get('storage') or {}
        return StorageConfig(path=data.get('path', '~/.audio_priority/storage.json'))

    def get_backend_config(self) -> BackendConfig:
        config = self._load_config()
        switchaudio = config.get('switchaudio') or {}
        profiler = config.get('system_profiler') or {}
        return BackendConfig(
            switchaudio_path=switchaudio.get('path') or None,
            switchaudio_timeout=float(switchaudio.get('timeout', 10)),
            system_profiler_enabled=bool(profiler.get('enabled', True)),
            system_profiler_timeout=float(profiler.get('timeout', 10)),
        )

    def get_logging_config(self) -> LoggingConfig:
        data = self._load_config().get('logging') or {}
        return LoggingConfig(
            level=str(data.get('level', 'INFO')).upper(),
            dir=data.get('dir', '~/Library/Logs/AudioPriority'),
            console=bool(data.get('console', True)),
            max_bytes=int(data.get('max_bytes', 10 * 1024 * 1024)),
            backup_count=int(data.get('backup_count', 5)),
        )
