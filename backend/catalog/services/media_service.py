"""
Catalog Backend: Media Upload Service (Cloudinary)
===================================================

What:  Validates image payloads and stores them on Cloudinary, returning a
       durable public URL.
How:   The upload is read into memory by the route (one transport for every
       caller), checked locally, then handed to the official cloudinary SDK
       in a worker thread bounded by a timeout. Tenacity governs retries;
       the default of one attempt gives single-shot semantics.
Who:   Called by CategoryService (one slot: "img") and ProductService (up to
       five slots: image1..image5).
When:  After request validation and existence checks, before the database
       write.

Validation order:
    1. Size (empty, or above MAX_FILE_SIZE)
    2. Extension (.jpg, .jpeg, .png)
    3. Declared content type
    4. Provider credentials present

Failure contract:
    Every failure surfaces as UploadError; a caller never receives a partial
    or placeholder URL. Payload problems are 400s, provider problems 500s.

Multi-slot uploads:
    upload_slots() dispatches every slot concurrently and waits for all of
    them. If any slot fails, the slots that did succeed are discarded
    (best-effort delete) and the first failure is raised.
"""

import asyncio
import io
import logging
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import cloudinary
import cloudinary.api
import cloudinary.exceptions
import cloudinary.uploader
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from catalog.config import settings
from catalog.exceptions import UploadError

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}

# Errors worth another attempt when retries are configured
TRANSIENT_ERRORS = (
    cloudinary.exceptions.Error,
    ConnectionError,
    asyncio.TimeoutError,
)


@dataclass(frozen=True)
class MediaPayload:
    """An uploaded file held in memory."""

    filename: str
    content: bytes
    content_type: Optional[str] = None


@dataclass(frozen=True)
class UploadedMedia:
    """A stored asset. Only `url` is persisted; `public_id` enables cleanup."""

    url: str
    public_id: str


class MediaService:
    """
    Stateless Cloudinary uploader.

    Credentials are passed per call rather than through cloudinary.config(),
    so separate instances never share provider state.
    """

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        folder: Optional[str] = None,
    ):
        self.cloud_name = settings.cloudinary_cloud_name if cloud_name is None else cloud_name
        self.api_key = settings.cloudinary_api_key if api_key is None else api_key
        self.api_secret = settings.cloudinary_api_secret if api_secret is None else api_secret
        self.folder = settings.cloudinary_folder if folder is None else folder

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _credentials(self) -> Dict[str, str]:
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
        }

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str, slot: Optional[str] = None) -> str:
        """Returns the normalized extension or raises UploadError (400)."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise UploadError(
                message="Only .jpeg, .jpg and .png files are allowed.",
                slot=slot,
                status_code=400,
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_content_type(self, content_type: Optional[str], slot: Optional[str] = None) -> None:
        # Clients that omit the header are judged on the extension alone
        if content_type and content_type.lower() not in ALLOWED_MIME_TYPES:
            raise UploadError(
                message="Only .jpeg, .jpg and .png files are allowed.",
                slot=slot,
                status_code=400,
                context={"content_type": content_type},
            )

    def validate_size(self, size: int, slot: Optional[str] = None) -> None:
        if size == 0:
            raise UploadError(
                message="Uploaded file is empty.",
                slot=slot,
                status_code=400,
            )
        if size > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise UploadError(
                message=f"File size is too large. Maximum filesize is {max_mb:.0f}MB.",
                slot=slot,
                status_code=400,
                context={"actual_size": size, "max_size": settings.max_file_size},
            )

    def validate(self, payload: MediaPayload, slot: Optional[str] = None) -> None:
        """Runs every local check; raises UploadError (400) on the first failure."""
        self.validate_size(len(payload.content), slot)
        self.validate_extension(payload.filename, slot)
        self.validate_content_type(payload.content_type, slot)

    # ── Upload ────────────────────────────────────────────────────────────

    async def upload(self, payload: MediaPayload, slot: Optional[str] = None) -> UploadedMedia:
        """
        Validate and store one image.

        Returns:
            UploadedMedia with the provider's https URL.

        Raises:
            UploadError (400) for payload problems, (500) when Cloudinary is
            not configured, rejects the file, or does not answer in time.
        """
        self.validate(payload, slot)

        if not self.is_configured:
            logger.error("Upload rejected for %s: Cloudinary credentials are not configured", slot or payload.filename)
            raise UploadError(
                message="Image storage is not configured.",
                slot=slot,
                status_code=500,
            )

        trace_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()
        logger.info(
            "[%s] Uploading %s (%d bytes) for slot %s",
            trace_id,
            payload.filename,
            len(payload.content),
            slot or "-",
        )

        try:
            response = await self._upload_with_retry(payload)
        except asyncio.TimeoutError:
            logger.error(
                "[%s] Upload timed out after %.0fs for %s",
                trace_id,
                settings.upload_timeout_seconds,
                slot or payload.filename,
            )
            raise UploadError(
                message=self._failure_message(slot),
                slot=slot,
                context={"trace_id": trace_id, "error_type": "timeout"},
            )
        except Exception as e:
            logger.error("[%s] Upload failed for %s: %s", trace_id, slot or payload.filename, e)
            raise UploadError(
                message=self._failure_message(slot),
                slot=slot,
                context={"trace_id": trace_id, "error_type": type(e).__name__},
            )

        url = response.get("secure_url") or response.get("url")
        public_id = response.get("public_id")
        if not url or not public_id:
            logger.error("[%s] Provider response missing url/public_id: %s", trace_id, sorted(response))
            raise UploadError(
                message=self._failure_message(slot),
                slot=slot,
                context={"trace_id": trace_id},
            )

        logger.info(
            "[%s] Upload completed in %.0fms: %s",
            trace_id,
            (time.perf_counter() - start_time) * 1000,
            url,
        )
        return UploadedMedia(url=url, public_id=public_id)

    async def _upload_with_retry(self, payload: MediaPayload) -> Dict[str, Any]:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            stop=stop_after_attempt(settings.upload_retry_attempts),
            wait=wait_exponential_jitter(
                initial=settings.upload_retry_min_wait,
                max=settings.upload_retry_max_wait,
                jitter=1,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await asyncio.wait_for(
                    asyncio.to_thread(self._upload_sync, payload),
                    timeout=settings.upload_timeout_seconds,
                )
        raise RuntimeError("unreachable")  # pragma: no cover

    def _upload_sync(self, payload: MediaPayload) -> Dict[str, Any]:
        stream = io.BytesIO(payload.content)
        stream.name = payload.filename
        return cloudinary.uploader.upload(
            stream,
            folder=self.folder,
            resource_type="image",
            timeout=settings.upload_timeout_seconds,
            **self._credentials(),
        )

    @staticmethod
    def _failure_message(slot: Optional[str]) -> str:
        if slot and slot.startswith("image"):
            return f"Error uploading {slot}"
        return "File upload failed."

    async def upload_slots(self, payloads: Mapping[str, MediaPayload]) -> Dict[str, UploadedMedia]:
        """
        Upload several named slots concurrently.

        Every slot is validated before any network call, so a bad payload in
        image5 never leaves image1 orphaned on the provider.

        Returns:
            {slot: UploadedMedia} for every slot in `payloads`.

        Raises:
            UploadError of the first failing slot (in slot order) after all
            uploads have settled and the successful ones were discarded.
        """
        if not payloads:
            return {}

        for slot, payload in payloads.items():
            self.validate(payload, slot)

        slots = list(payloads)
        results = await asyncio.gather(
            *(self.upload(payloads[slot], slot=slot) for slot in slots),
            return_exceptions=True,
        )

        uploaded: Dict[str, UploadedMedia] = {}
        failures: List[BaseException] = []
        for slot, result in zip(slots, results):
            if isinstance(result, UploadedMedia):
                uploaded[slot] = result
            else:
                failures.append(result)

        if failures:
            logger.warning(
                "%d of %d slot uploads failed; discarding %d stored image(s)",
                len(failures),
                len(slots),
                len(uploaded),
            )
            await self.discard(uploaded.values())
            first = failures[0]
            if isinstance(first, UploadError):
                raise first
            raise UploadError(context={"error_type": type(first).__name__})

        return uploaded

    # ── Cleanup ───────────────────────────────────────────────────────────

    async def discard(self, uploads: Iterable[UploadedMedia]) -> None:
        """
        Best-effort delete of stored assets whose database write failed.

        Never raises: a leftover asset costs storage, not correctness.
        """
        for media in list(uploads):
            try:
                await asyncio.wait_for(
                    asyncio.to_thread(
                        cloudinary.uploader.destroy,
                        media.public_id,
                        invalidate=True,
                        **self._credentials(),
                    ),
                    timeout=settings.upload_timeout_seconds,
                )
                logger.info("Discarded orphaned image %s", media.public_id)
            except Exception as e:
                logger.warning("Failed to discard image %s: %s", media.public_id, e)

    async def health_check(self) -> str:
        """available | unavailable | not_configured"""
        if not self.is_configured:
            return "not_configured"
        try:
            await asyncio.wait_for(
                asyncio.to_thread(cloudinary.api.ping, **self._credentials()),
                timeout=settings.upload_timeout_seconds,
            )
            return "available"
        except Exception as e:
            logger.warning("Cloudinary health check failed: %s", e)
            return "unavailable"


media_service = MediaService()
