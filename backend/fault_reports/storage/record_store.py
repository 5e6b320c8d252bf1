from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ..errors import NotFound, StorageFailure

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Key-value persistence for JSON documents."""

    @abstractmethod
    def create(self, key: str, document: dict[str, Any]) -> None: ...

    @abstractmethod
    def get(self, key: str) -> dict[str, Any]: ...

    @abstractmethod
    def list(self) -> list[dict[str, Any]]: ...

    @abstractmethod
    def update(self, key: str, changes: dict[str, Any]) -> dict[str, Any]: ...

    @abstractmethod
    def exists(self, key: str) -> bool: ...


def is_valid_key(key: str) -> bool:
    if not key or key in {".", ".."}:
        return False
    return "/" not in key and "\\" not in key and "\x00" not in key


class JsonDirectoryStore(RecordStore):
    """One ``<key>.json`` file per record inside ``directory``."""

    _SUFFIX = ".json"

    def __init__(self, directory: Path):
        self._lock = threading.RLock()
        self.directory = Path(directory).expanduser().resolve()

    def _ensure_dir(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not is_valid_key(key):
            raise NotFound(f"Record not found: {key}")
        return self.directory / f"{key}{self._SUFFIX}"

    def _read_json(self, path: Path) -> dict[str, Any]:
        text = path.read_text(encoding="utf-8")
        obj = json.loads(text)
        if not isinstance(obj, dict):
            raise ValueError(f"{path.name} does not hold a JSON object")
        return obj

    def _write_json(self, path: Path, obj: dict[str, Any]) -> None:
        path.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")

    def create(self, key: str, document: dict[str, Any]) -> None:
        with self._lock:
            path = self._path(key)
            try:
                self._ensure_dir()
                self._write_json(path, document)
            except OSError as exc:
                logger.exception("failed to write record %s", key)
                raise StorageFailure("Error saving record") from exc

    def exists(self, key: str) -> bool:
        if not is_valid_key(key):
            return False
        return self._path(key).is_file()

    def get(self, key: str) -> dict[str, Any]:
        with self._lock:
            path = self._path(key)
            if not path.is_file():
                raise NotFound(f"Record not found: {key}")
            try:
                return self._read_json(path)
            except (OSError, ValueError) as exc:
                logger.exception("failed to read record %s", key)
                raise StorageFailure("Error reading record") from exc

    def list(self) -> list[dict[str, Any]]:
        with self._lock:
            if not self.directory.exists():
                return []
            try:
                entries = list(self.directory.iterdir())
            except OSError as exc:
                logger.exception("failed to enumerate %s", self.directory)
                raise StorageFailure("Error reading records") from exc

            documents: list[dict[str, Any]] = []
            for path in entries:
                if path.suffix != self._SUFFIX or not path.is_file():
                    continue
                try:
                    documents.append(self._read_json(path))
                except ValueError:
                    logger.warning("skipping unreadable record file %s", path.name)
                except OSError as exc:
                    logger.exception("failed to read %s", path.name)
                    raise StorageFailure("Error reading records") from exc
            return documents

    def update(self, key: str, changes: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            document = self.get(key)
            document.update(changes)
            try:
                self._write_json(self._path(key), document)
            except OSError as exc:
                logger.exception("failed to rewrite record %s", key)
                raise StorageFailure("Error saving record") from exc
            return document
