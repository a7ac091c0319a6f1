# gadgetstore/storefront/storage.py
"""
Persistence adapters of the storefront stores. Browser local storage is the
role these play: a flat key -> JSON value map.
"""
import json
import logging
import os
from copy import deepcopy
from typing import Any, Dict, Protocol

from django.core.serializers.json import DjangoJSONEncoder

logger = logging.getLogger(__name__)


class StorageAdapter(Protocol):
    def load(self, key: str, default: Any = None) -> Any: ...

    def save(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage(StorageAdapter):
    """Process-local storage, used by tests and short-lived clients."""

    def __init__(self, initial: Dict[str, Any] = None):
        self._data: Dict[str, Any] = deepcopy(initial) if initial else {}

    def load(self, key, default=None):
        if key not in self._data:
            return default
        return deepcopy(self._data[key])

    def save(self, key, value):
        self._data[key] = deepcopy(value)

    def delete(self, key):
        self._data.pop(key, None)


class JsonFileStorage(StorageAdapter):
    """
    Keeps every key in one JSON document on disk. A missing or unreadable
    file reads as empty. Decimals and datetimes are written as strings.
    """

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding='utf-8') as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as fh:
            json.dump(data, fh, cls=DjangoJSONEncoder)
        os.replace(tmp_path, self.path)

    def load(self, key, default=None):
        return self._read().get(key, default)

    def save(self, key, value):
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key):
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)
