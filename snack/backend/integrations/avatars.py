"""
Avatar Storage.

Profile pictures are checked with Pillow and written under a local media
directory that the app serves as static files. Each user gets a folder;
a file name is the upload time, so a new picture never overwrites the
URL a browser may have cached.
"""

import asyncio
import io
import time
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from snack.backend.core.config import find_project_root, get_app_config
from snack.backend.core.logging import get_logger

logger = get_logger(__name__)

# Pillow format name -> file extension
FORMAT_EXTENSIONS = {
    "JPEG": "jpg",
    "PNG": "png",
    "GIF": "gif",
    "WEBP": "webp",
}


def detect_image_format(data: bytes) -> str | None:
    """Pillow's format name for data, or None when it is not a readable image."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.verify()
            return image.format
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError):
        return None


class AvatarStore:
    """Writes avatars under directory and maps them to URLs under base_url."""

    def __init__(self, directory: Path, base_url: str) -> None:
        self.directory = directory
        self.base_url = base_url.rstrip("/")

    def _path_for(self, url: str | None) -> Path | None:
        """The local file behind one of our URLs; None for anything else."""
        if not url or not url.startswith(f"{self.base_url}/"):
            return None
        path = (self.directory / url[len(self.base_url) + 1:]).resolve()
        if not path.is_relative_to(self.directory.resolve()):
            return None
        return path

    async def save(self, user_id: str, data: bytes, extension: str) -> str:
        """Store the image and return its public URL."""
        name = f"{user_id}/{time.time_ns()}.{extension}"
        path = self.directory / name

        def write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(write)
        logger.info("Avatar stored", extra={"user_id": user_id, "bytes": len(data)})
        return f"{self.base_url}/{name}"

    async def delete(self, url: str | None) -> bool:
        """Remove a stored avatar. URLs hosted elsewhere are left alone."""
        path = self._path_for(url)
        if path is None:
            return False
        await asyncio.to_thread(path.unlink, missing_ok=True)
        return True


def avatar_directory() -> Path:
    directory = Path(get_app_config().integrations.avatars.directory)
    return directory if directory.is_absolute() else find_project_root() / directory


def get_avatar_store() -> AvatarStore:
    """FastAPI dependency providing the avatar store."""
    app_config = get_app_config()
    avatars = app_config.integrations.avatars
    return AvatarStore(
        directory=avatar_directory(),
        base_url=f"{app_config.application.public_url.rstrip('/')}{avatars.url_path}",
    )
