import logging
import shutil
from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from snapcook.app.services.storage.base import UploadStorage

logger = logging.getLogger(__name__)


class LocalUploadStorage(UploadStorage):
    def __init__(self, upload_root: Path):
        self.upload_root = upload_root
        self.upload_root.mkdir(parents=True, exist_ok=True)

    def _write(self, file: UploadFile, destination: Path) -> None:
        with destination.open("wb") as buffer:
            file.file.seek(0)
            shutil.copyfileobj(file.file, buffer)

    async def save_upload(self, file: UploadFile) -> Path:
        extension = Path(file.filename or "upload").suffix
        destination = self.upload_root / f"{uuid4().hex}{extension}"
        try:
            await run_in_threadpool(self._write, file, destination)
        except BaseException:
            destination.unlink(missing_ok=True)
            raise
        return destination

    def delete_upload(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.exception("Failed to delete uploaded file %s", path)
            raise
