"""
Photo Store
Writes captured frames to disk as skiphone-<epoch_ms>.jpg
"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional, Union

from .errors import PhotoStoreError

logger = logging.getLogger(__name__)

PHOTO_DIR_NAME = 'SkiPhone'
PHOTO_PREFIX = 'skiphone-'
PHOTO_EXTENSION = 'jpg'


def photo_filename(epoch_ms: int, extension: str = PHOTO_EXTENSION) -> str:
    return f"{PHOTO_PREFIX}{epoch_ms}.{extension}"


class PhotoStore:
    """
    Filesystem photo store

    Images go into ``<pictures_dir>/SkiPhone``, created on first save.
    """

    def __init__(
            self,
            pictures_dir: Union[str, Path],
            time_ms: Optional[Callable[[], int]] = None
    ):
        """
        Args:
            pictures_dir: Parent pictures directory
            time_ms: Wall clock in epoch milliseconds (for deterministic names)
        """
        self.photo_dir = Path(pictures_dir) / PHOTO_DIR_NAME
        self.time_ms = time_ms if time_ms else (lambda: int(time.time() * 1000))
        self.saved_count = 0

    def save(self, data: bytes) -> Path:
        """
        Persist one image.

        Args:
            data: Encoded image bytes

        Returns:
            Path of the written file

        Raises:
            PhotoStoreError if the directory or file cannot be written
        """
        path = self.photo_dir / photo_filename(self.time_ms())
        try:
            self.photo_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise PhotoStoreError(f"Could not write {path}: {e}") from e

        self.saved_count += 1
        logger.info(f"✓ Photo saved: {path} ({len(data)} bytes)")
        return path

    def __repr__(self):
        return f"<PhotoStore(dir={self.photo_dir}, saved={self.saved_count})>"
