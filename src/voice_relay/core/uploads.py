from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

import anyio
from fastapi import UploadFile

from voice_relay.consts import ALLOWED_AUDIO_EXTENSIONS, UPLOAD_CHUNK_BYTES
from voice_relay.core.types import AudioUpload
from voice_relay.errors import UnsupportedAudioTypeError, UploadRejectedError, UploadTooLargeError

logger = logging.getLogger(__name__)


def audio_extension(filename: str, allowed: Iterable[str] = ALLOWED_AUDIO_EXTENSIONS) -> str:
    """
    Return the lower-cased extension of ``filename`` if it is an accepted
    audio type, else raise UnsupportedAudioTypeError.
    """
    suffix = os.path.splitext(filename or "")[1].lower().lstrip(".")
    if not suffix or suffix not in set(allowed):
        raise UnsupportedAudioTypeError(
            "Unsupported file type. Only audio files are allowed",
            cause=f"accepted extensions: {', '.join(allowed)}",
        )
    return suffix


def ensure_single_part(parts: Sequence[Any], field: str = "audio") -> None:
    """Reject a form that carries the audio field more than once."""
    if len(parts) > 1:
        raise UploadRejectedError(
            "Only one audio file is allowed",
            cause=f"received {len(parts)} '{field}' parts",
        )


async def receive_audio(
    upload: Optional[UploadFile],
    *,
    max_bytes: int,
    upload_dir: str | None = None,
) -> AudioUpload:
    """
    Validate the multipart ``audio`` part and spool it to a transient file.

    The caller owns the returned AudioUpload and must discard it.
    """
    if upload is None or not upload.filename:
        raise UploadRejectedError("No audio file provided")

    ext = audio_extension(upload.filename)

    fd, name = tempfile.mkstemp(prefix="voice-", suffix=f".{ext}", dir=upload_dir)
    os.close(fd)
    path = Path(name)

    size = 0
    try:
        async with await anyio.open_file(path, "wb") as out:
            while True:
                chunk = await upload.read(UPLOAD_CHUNK_BYTES)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    raise UploadTooLargeError(
                        "Audio file too large",
                        cause=f"limit is {max_bytes} bytes",
                    )
                await out.write(chunk)
    except BaseException:
        path.unlink(missing_ok=True)
        raise

    logger.info(
        "Received audio upload: filename=%s content_type=%s size=%d bytes",
        upload.filename,
        upload.content_type,
        size,
    )
    return AudioUpload(filename=upload.filename, extension=ext, size_bytes=size, path=path)
