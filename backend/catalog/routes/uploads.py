"""
Multipart helpers shared by the file-bearing routes.
"""

from typing import Dict, Optional

from fastapi import UploadFile

from catalog.config import settings
from catalog.services.media_service import MediaPayload


async def read_payload(file: Optional[UploadFile]) -> Optional[MediaPayload]:
    """
    Read an uploaded file into memory.

    Returns None when the field was not sent or was sent without a file
    (browsers submit an empty part for an untouched file input). At most
    max_file_size + 1 bytes are read so an oversized upload is still
    detected without buffering all of it.
    """
    if file is None or not file.filename:
        return None
    try:
        content = await file.read(settings.max_file_size + 1)
    finally:
        await file.close()
    return MediaPayload(
        filename=file.filename,
        content=content,
        content_type=file.content_type,
    )


async def read_payloads(files: Dict[str, Optional[UploadFile]]) -> Dict[str, MediaPayload]:
    """read_payload() for several named slots, dropping the empty ones."""
    payloads: Dict[str, MediaPayload] = {}
    for slot, file in files.items():
        payload = await read_payload(file)
        if payload is not None:
            payloads[slot] = payload
    return payloads
