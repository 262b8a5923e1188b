"""Local persisted key-value store and the example / translation caches on top of it.

The store mirrors browser local storage: a flat mapping of string keys to JSON
values, loaded once when opened and written back synchronously on every set.
"""
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from log import get_logger
from models import EXAMPLES_CACHE_KEY, TRANSLATIONS_CACHE_KEY

logger = get_logger("wordtype.cache")

STORE_FILE = Path(os.environ.get("WORDTYPE_STORE_FILE", "").strip() or Path(__file__).parent / "local_storage.json")


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


class MemoryStore:
    """In-process store, used by tests and short-lived sessions."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(data or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class JsonFileStore:
    """File-backed store. Opened at construction, flushed on every write."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or STORE_FILE)
        self._data: Dict[str, Any] = {}
        self.load()

    def load(self):
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                self._data = data
                logger.info("Loaded local store", extra={"component": "cache", "count": len(data)})
        except Exception:
            logger.exception("Failed to load local store", extra={"component": "cache", "detail": str(self.path)})
            self._data = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self.flush()

    def flush(self):
        try:
            self.path.write_text(json.dumps(self._data, ensure_ascii=False), encoding="utf-8")
        except Exception:
            logger.exception("Failed to save local store", extra={"component": "cache", "detail": str(self.path)})


def _mapping(store: KeyValueStore, key: str) -> dict:
    value = store.get(key)
    return dict(value) if isinstance(value, dict) else {}


class ExampleCache:
    """word (lowercased) -> bare English example sentences. Translations are never stored."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    @staticmethod
    def key(word: str) -> str:
        return word.lower()

    def get(self, word: str) -> List[str]:
        cached = _mapping(self.store, EXAMPLES_CACHE_KEY).get(self.key(word))
        if not isinstance(cached, list):
            return []
        return [s for s in cached if isinstance(s, str) and s]

    def put(self, word: str, sentences: List[str]):
        cache = _mapping(self.store, EXAMPLES_CACHE_KEY)
        cache[self.key(word)] = list(sentences)
        self.store.set(EXAMPLES_CACHE_KEY, cache)


class TranslationCache:
    """source text (trimmed, lowercased) -> Chinese translation."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    @staticmethod
    def key(text: str) -> str:
        return text.strip().lower()

    def get(self, text: str) -> Optional[str]:
        cached = _mapping(self.store, TRANSLATIONS_CACHE_KEY).get(self.key(text))
        return cached if isinstance(cached, str) and cached else None

    def put(self, text: str, translation: str):
        cache = _mapping(self.store, TRANSLATIONS_CACHE_KEY)
        cache[self.key(text)] = translation
        self.store.set(TRANSLATIONS_CACHE_KEY, cache)
