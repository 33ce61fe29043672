"""Résumé upload gating and storage."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path, PurePath

from app.errors import FileTooLarge, InvalidFileType, ResumeRequired
from services.storage import LocalFileStorage


@dataclass(frozen=True)
class ResumeFile:
    buffer: bytes
    filename: str
    size: int


class ResumeHandler:
    """Validate an optional résumé against job policy, then store it."""

    def __init__(
        self,
        storage: LocalFileStorage,
        *,
        upload_directory: Path,
        allowed_extensions: Iterable[str] = (".pdf",),
        max_size_bytes: int = 5 * 1024 * 1024,
    ) -> None:
        self.storage = storage
        self.upload_directory = upload_directory
        self.allowed_extensions = {extension.lower() for extension in allowed_extensions}
        self.max_size_bytes = max_size_bytes

    def check(self, requires_resume: bool, resume: ResumeFile | None) -> None:
        """Raise when the upload breaks policy; never touches storage."""

        if resume is None:
            if requires_resume:
                raise ResumeRequired()
            return
        if PurePath(resume.filename).suffix.lower() not in self.allowed_extensions:
            raise InvalidFileType()
        if resume.size > self.max_size_bytes:
            raise FileTooLarge()

    async def handle(self, requires_resume: bool, resume: ResumeFile | None) -> str | None:
        """Validate and store the résumé, returning its relative path or None."""

        self.check(requires_resume, resume)
        if resume is None:
            return None
        return await self.storage.save(resume.buffer, resume.filename, self.upload_directory)

    async def discard(self, resume_url: str) -> None:
        await self.storage.delete(resume_url, self.upload_directory)
