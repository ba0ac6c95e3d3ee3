"""
Хранилище строковых значений по ключу (аналог LocalStorage)

Все значения - JSON строки. Файловое хранилище держит их в одном JSON объекте
и перезаписывает файл целиком.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from ..core.types import StorageError

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """Интерфейс хранилища: get/set/remove именованной строки"""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...


class InMemoryStorage(KeyValueStorage):
    """Хранилище в памяти (тесты, пробные запуски)"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self):
        return list(self._items.keys())


class JsonFileStorage(KeyValueStorage):
    """Хранилище в JSON файле"""

    def __init__(self, file_path: str):
        self.file_path = Path(os.path.expanduser(file_path))

        # Создаем директорию для хранилища
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> Dict[str, str]:
        """Читает файл при каждом обращении - его может менять другой процесс"""
        if not self.file_path.exists():
            logger.debug(f"🔍 Хранилище не существует: {self.file_path}")
            return {}

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"❌ Хранилище повреждено, начинаем с пустого: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error("❌ Хранилище повреждено (не объект), начинаем с пустого")
            return {}

        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _flush(self, items: Dict[str, str]):
        """Атомарная запись: временный файл + os.replace"""
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.file_path.parent), prefix=".storage-", suffix=".json"
            )
        except OSError as e:
            raise StorageError(f"Failed to write {self.file_path}: {e}") from e

        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(items, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.file_path)
        except (OSError, TypeError, ValueError) as e:
            self._remove_temp_file(tmp_path)
            raise StorageError(f"Failed to write {self.file_path}: {e}") from e

    def _remove_temp_file(self, tmp_path: str):
        try:
            os.remove(tmp_path)
        except OSError as e:
            logger.warning(f"⚠️ Не удалось удалить временный файл {tmp_path}: {e}")

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._flush(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._flush(items)
