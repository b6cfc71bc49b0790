"""
Local JSON File Storage

DESIGN DECISION: The default backend is a single JSON document on disk,
mapping keys to string values. It plays the role browser local storage
plays for a web page: private to the user, no setup, easy to back up.

Writes go to a temporary file first and are swapped in with os.replace,
so a crash mid-write never leaves a half-written document behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog

from networth.services.storage.interface import KeyValueStore, PersistenceError


logger = structlog.get_logger(__name__)


class JsonFileKeyValueStore(KeyValueStore):
    """Key-value store persisted as one JSON object in a local file."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Cannot read {self._path}: {e}") from e

        if not text.strip():
            return {}

        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt data file {self._path}: {e}") from e

        if not isinstance(document, dict):
            raise PersistenceError(
                f"Corrupt data file {self._path}: expected a JSON object"
            )
        return document

    def _write_document(self, document: dict[str, str]) -> None:
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=directory,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, ensure_ascii=False)
                os.replace(tmp_path, self._path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("file_store_write_failed", path=str(self._path), error=str(e))
            raise PersistenceError(f"Cannot write {self._path}: {e}") from e

    def load(self, key: str) -> Optional[str]:
        return self._read_document().get(key)

    def save(self, key: str, value: str) -> None:
        document = self._read_document()
        document[key] = value
        self._write_document(document)

    def delete(self, key: str) -> None:
        document = self._read_document()
        if key in document:
            del document[key]
            self._write_document(document)
