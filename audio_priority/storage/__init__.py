"""
Хранилища строковых значений по ключу
"""

from .local_storage import KeyValueStorage, InMemoryStorage, JsonFileStorage

__all__ = ["KeyValueStorage", "InMemoryStorage", "JsonFileStorage"]
