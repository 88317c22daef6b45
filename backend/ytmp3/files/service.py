"""Local storage for converted audio files.

Files are stored flat in: downloads/{id}.mp3

The id is a millisecond timestamp.  There is no metadata record; the path
itself is the only state.
"""
import logging
import time
from pathlib import Path
from typing import Optional, Set

logger = logging.getLogger(__name__)

AUDIO_EXTENSION = ".mp3"


class DownloadStore:
    """Allocates ids for converted files and manages them on disk."""

    _instance: Optional["DownloadStore"] = None
    _downloads_dir: str = "downloads"

    def __init__(self, downloads_dir: Optional[str] = None):
        """Initialize the store, creating the downloads directory."""
        if downloads_dir:
            self._downloads_dir = downloads_dir
        # ids handed out whose conversion has not finished yet
        self._reserved: Set[str] = set()
        self._ensure_downloads_dir()

    @classmethod
    def get_instance(cls, downloads_dir: Optional[str] = None) -> "DownloadStore":
        """Get or create the singleton instance."""
        if cls._instance is None:
            cls._instance = cls(downloads_dir)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (for testing)."""
        cls._instance = None

    @property
    def directory(self) -> Path:
        return Path(self._downloads_dir)

    def _ensure_downloads_dir(self) -> None:
        """Ensure the downloads directory exists."""
        self.directory.mkdir(parents=True, exist_ok=True)

    def new_id(self) -> str:
        """Allocate an id from the current time in milliseconds.

        The id is bumped past any id that has a file on disk or is still
        reserved by a conversion in flight.  The caller must hand it back
        with :meth:`release` once the conversion is over.
        """
        candidate = int(time.time() * 1000)
        while (
            str(candidate) in self._reserved
            or (self.directory / f"{candidate}{AUDIO_EXTENSION}").exists()
        ):
            candidate += 1
        file_id = str(candidate)
        self._reserved.add(file_id)
        return file_id

    def release(self, file_id: str) -> None:
        """Drop the reservation taken by :meth:`new_id` (no-op if absent)."""
        self._reserved.discard(file_id)

    def path_for(self, file_id: str) -> Optional[Path]:
        """Return the path for *file_id*, or None if the id is malformed.

        Only all-digit ids are accepted, which keeps lookups inside the
        downloads directory.
        """
        if not file_id or not file_id.isdigit() or not file_id.isascii():
            return None
        return self.directory / f"{file_id}{AUDIO_EXTENSION}"

    def exists(self, file_id: str) -> bool:
        path = self.path_for(file_id)
        return path is not None and path.is_file()

    def size(self, file_id: str) -> int:
        """Size of the stored file in bytes.

        Raises:
            FileNotFoundError: If no file is stored under *file_id*.
        """
        path = self.path_for(file_id)
        if path is None:
            raise FileNotFoundError(file_id)
        return path.stat().st_size

    def delete(self, file_id: str) -> bool:
        """Delete the file for *file_id*; returns False if it was already gone."""
        path = self.path_for(file_id)
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info(f"Deleted file: {path}")
        return True

    def sweep(self, max_age_seconds: float, now: Optional[float] = None) -> int:
        """Delete every file whose mtime is more than *max_age_seconds* old.

        This covers leftovers of failed conversions as well as finished MP3s
        that were never downloaded.  Files that disappear mid-sweep (a
        download finishing at the same moment) are skipped.

        Returns:
            Number of files deleted
        """
        if now is None:
            now = time.time()

        deleted = 0
        for path in self.directory.iterdir():
            try:
                if not path.is_file():
                    continue
                if now - path.stat().st_mtime <= max_age_seconds:
                    continue
                path.unlink()
            except FileNotFoundError:
                continue
            deleted += 1
            logger.debug(f"Swept expired file: {path}")

        if deleted:
            logger.info(f"Swept {deleted} expired files from {self.directory}")
        return deleted
