import asyncio
import io
import uuid
import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool
from core.config import Settings
from core.exceptions import ImageRejected, StorageError
from utils.logger import get_logger

logger = get_logger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")
MAX_IMAGE_BYTES = 5 * 1024 * 1024
MAX_IMAGES = 5


def has_image_signature(data: bytes) -> bool:
    """Check JPEG, PNG or WebP magic numbers."""
    if len(data) < 12:
        return False

    if data[:3] == b"\xff\xd8\xff":
        return True

    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return True

    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return True

    return False


async def read_image(upload: UploadFile) -> bytes:
    """
    Read an upload and validate type, extension, size and content signature.

    Raises:
        ImageRejected: any check fails
    """
    filename = (upload.filename or "").lower()

    if upload.content_type not in ALLOWED_CONTENT_TYPES or not filename.endswith(ALLOWED_EXTENSIONS):
        raise ImageRejected("Invalid file type. Only JPEG, PNG, and WebP images are allowed")

    data = await upload.read(MAX_IMAGE_BYTES + 1)
    if len(data) > MAX_IMAGE_BYTES:
        raise ImageRejected("File too large. Maximum size is 5MB")

    if not has_image_signature(data):
        logger.warning(
            "Image rejected - signature mismatch",
            extra={"upload_filename": filename, "first_bytes": data[:12].hex()}
        )
        raise ImageRejected("Invalid image file. File type does not match its content")

    return data


class ImageService:
    """
    Stores validated images on Cloudinary and returns their public URLs.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        if not settings.is_testing:
            cloudinary.config(
                cloud_name=settings.CLOUDINARY_CLOUD_NAME,
                api_key=settings.CLOUDINARY_API_KEY,
                api_secret=settings.CLOUDINARY_API_SECRET,
                secure=True
            )

    def _store(self, data: bytes, folder: str) -> str:
        if self.settings.is_testing:
            return f"https://res.cloudinary.com/test/image/upload/sellit/{folder}/{uuid.uuid4().hex}.jpg"

        try:
            result = cloudinary.uploader.upload(
                io.BytesIO(data),
                folder=f"sellit/{folder}",
                resource_type="image",
                transformation=[
                    {"width": 800, "height": 800, "crop": "fill", "quality": "auto"}
                ]
            )
        except CloudinaryError as e:
            logger.error(
                f"Image upload failed: {str(e)}",
                extra={"folder": folder, "error_type": type(e).__name__},
                exc_info=True
            )
            raise StorageError(f"Image upload failed: {str(e)}") from e

        url = result.get("secure_url")
        if not url:
            raise StorageError("Image upload failed: no URL returned")
        return url

    async def upload(self, upload: UploadFile, folder: str) -> str:
        data = await read_image(upload)
        return await run_in_threadpool(self._store, data, folder)

    async def upload_many(self, uploads: list[UploadFile], folder: str) -> list[str]:
        # Validate everything before anything is stored
        payloads = [await read_image(upload) for upload in uploads]
        return list(await asyncio.gather(
            *(run_in_threadpool(self._store, data, folder) for data in payloads)
        ))
