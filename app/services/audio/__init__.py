"""
Audio file storage.
Keeps synthesized and uploaded clips on disk under the public audio directory.
"""

import asyncio
import logging
from pathlib import Path
from typing import Iterable, Optional
from uuid import uuid4

from app.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class AudioStorage:
    """Writes clips to ``AUDIO_DIR`` and maps them to ``/audio/<name>`` URLs."""

    def __init__(self, audio_dir: Optional[Path] = None, url_prefix: Optional[str] = None):
        self.audio_dir = Path(audio_dir or settings.AUDIO_DIR)
        self.url_prefix = (url_prefix or settings.AUDIO_URL_PREFIX).rstrip("/")
        self.audio_dir.mkdir(parents=True, exist_ok=True)

    def new_filename(self, prefix: str = "response", suffix: str = ".mp3") -> str:
        return f"{prefix}-{uuid4().hex}{suffix}"

    def url_for(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    def path_for_url(self, url: str) -> Optional[Path]:
        """Resolve a stored URL back to a file inside the audio directory."""
        if not url or not url.startswith(self.url_prefix + "/"):
            return None
        name = Path(url[len(self.url_prefix) + 1:]).name
        if not name:
            return None
        return self.audio_dir / name

    async def save(self, audio_data: bytes, prefix: str = "response", suffix: str = ".mp3") -> str:
        """Write the clip and return its public URL once the write has finished."""
        filename = self.new_filename(prefix, suffix)
        path = self.audio_dir / filename

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, path.write_bytes, audio_data)

        logger.debug(f"Saved audio file {path} ({len(audio_data)} bytes)")
        return self.url_for(filename)

    def delete(self, url: str) -> bool:
        """
        Remove the file behind ``url``.

        Cleanup is best effort: failures are logged and reported as False.
        """
        path = self.path_for_url(url)
        if path is None:
            logger.warning(f"Ignoring audio URL outside {self.url_prefix}: {url}")
            return False

        try:
            path.unlink()
            return True
        except FileNotFoundError:
            logger.warning(f"Audio file already missing: {path}")
            return False
        except OSError as e:
            logger.error(f"Failed to delete audio file {path}: {e}")
            return False

    def delete_many(self, urls: Iterable[str]) -> int:
        return sum(1 for url in urls if self.delete(url))
