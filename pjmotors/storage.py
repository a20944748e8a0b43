import logging
from pathlib import Path, PurePosixPath

from pjmotors.errors import StorageError

logger = logging.getLogger(__name__)


class FileStore:
    """Uploaded files on disk, one directory per car under ``root``.

    Callers only ever see paths relative to the root, so the root can be
    moved without touching stored records.
    """

    def __init__(self, root):
        self.root = Path(root).resolve()

    def _resolve(self, relative_path: str) -> Path:
        path = (self.root / PurePosixPath(relative_path)).resolve()
        if path != self.root and self.root not in path.parents:
            raise StorageError(f"Path escapes uploads root: {relative_path}")
        return path

    def exists(self, car_id: int, filename: str) -> bool:
        return (self.root / str(car_id) / filename).exists()

    def save(self, car_id: int, filename: str, data: bytes) -> str:
        relative_path = str(PurePosixPath(str(car_id), filename))
        path = self._resolve(relative_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Could not write {relative_path}: {e}") from e
        logger.debug(f"wrote {len(data)} bytes to {relative_path}")
        return relative_path

    def read(self, relative_path: str) -> bytes:
        try:
            return self._resolve(relative_path).read_bytes()
        except OSError as e:
            raise StorageError("File missing on disk") from e

    def remove(self, relative_path: str) -> bool:
        """Delete a file; failures are logged and reported as False."""
        try:
            self._resolve(relative_path).unlink()
        except (OSError, StorageError) as e:
            logger.warning(f"could not remove {relative_path}: {e}")
            return False
        return True

    def remove_car_dir(self, car_id: int) -> None:
        directory = self.root / str(car_id)
        try:
            directory.rmdir()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"could not remove directory for car {car_id}: {e}")
