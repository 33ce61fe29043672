"""Local file persistence for uploaded résumés."""
from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path, PurePath

import aiofiles
import aiofiles.os

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


class LocalFileStorage:
    """Write-once storage of uploaded buffers under generated names."""

    async def save(self, buffer: bytes, filename: str, destination_dir: Path) -> str:
        """Persist ``buffer`` and return the name relative to ``destination_dir``."""

        destination_dir.mkdir(parents=True, exist_ok=True)
        stored_name = self._build_name(filename)

        async with aiofiles.open(destination_dir / stored_name, "xb") as handle:
            await handle.write(buffer)

        logger.info("Stored upload %s (%d bytes)", stored_name, len(buffer))
        return stored_name

    async def delete(self, relative_path: str, destination_dir: Path) -> None:
        path = destination_dir / PurePath(relative_path).name
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            logger.warning("Upload %s already removed", relative_path)

    @staticmethod
    def _build_name(filename: str) -> str:
        original = PurePath(filename)
        stem = _UNSAFE_CHARS.sub("-", original.stem).strip("-")[:80] or "upload"
        return f"{stem}-{uuid.uuid4().hex}{original.suffix.lower()}"
