from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import UploadFile


class UploadStorage(ABC):
    @abstractmethod
    async def save_upload(self, file: UploadFile) -> Path:  # pragma: no cover - interface
        raise NotImplementedError

    @abstractmethod
    def delete_upload(self, path: Path) -> None:  # pragma: no cover - interface
        raise NotImplementedError


@asynccontextmanager
async def stored_upload(storage: UploadStorage, file: UploadFile) -> AsyncIterator[Path]:
    """Persist an upload for the duration of the block and delete it afterwards, even on error."""
    path = await storage.save_upload(file)
    try:
        yield path
    finally:
        storage.delete_upload(path)
