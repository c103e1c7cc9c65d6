"""JSON-file storage for the desktop session."""

import json
import os
import tempfile
from pathlib import Path

from todogether.core.exceptions import StorageError
from todogether.core.logging import get_logger
from todogether.storage.factory import StorageFactory

logger = get_logger(__name__)


@StorageFactory.register("file")
class FileStorage:
    """Key-value storage kept as one JSON object on disk.

    Every write rewrites the whole document through a temporary file and
    ``os.replace``, so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt storage file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Corrupt storage file {self.path}: expected an object")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e

    def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except StorageError as e:
            # Unreadable document: start over rather than refuse every write
            logger.warning("storage_file_reset", path=str(self.path), error=e.message)
            data = {}
        data[key] = value
        self._write_all(data)
        logger.debug("storage_key_written", key=key, path=str(self.path))

    def delete(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
            logger.debug("storage_key_deleted", key=key, path=str(self.path))
