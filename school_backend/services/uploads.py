import logging
import uuid
from pathlib import Path

from fastapi import UploadFile

from school_backend.core.config import Settings

logger = logging.getLogger(__name__)


class UploadTooLargeError(Exception):
    def __init__(self, limit_bytes: int):
        super().__init__(f'File size exceeds the limit of {limit_bytes // (1024 * 1024)}MB!')
        self.limit_bytes = limit_bytes


def save_passport_image(upload_file: UploadFile | None, settings: Settings) -> str | None:
    """Store an uploaded passport photo and return its file name.

    Returns ``None`` when no file was sent. The name is relative to
    ``settings.upload_dir``, which is also served under ``/uploads``.
    """
    if upload_file is None or not upload_file.filename:
        return None

    data = upload_file.file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise UploadTooLargeError(settings.max_upload_bytes)

    original_name = Path(upload_file.filename).name
    file_name = f"{uuid.uuid4().hex}-{original_name}"

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    (upload_dir / file_name).write_bytes(data)

    logger.info('Stored passport image %s (%d bytes)', file_name, len(data))
    return file_name


def discard_upload(file_name: str | None, settings: Settings) -> None:
    if not file_name:
        return
    path = Path(settings.upload_dir) / file_name
    path.unlink(missing_ok=True)
