import logging
import uuid
from typing import BinaryIO, List, Optional

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from django.conf import settings
from rest_framework_simplejwt.tokens import AccessToken

from gadgetstore.core.entities import Account
from gadgetstore.core.exceptions import ImageUploadError
from gadgetstore.core.ports import IImageHost

logger = logging.getLogger(__name__)


# ====================================================================
# GATEWAYS: concrete implementations talking to external services.
# ====================================================================

class CloudinaryImageHost(IImageHost):
    """
    Signed uploads through the Cloudinary SDK.
    Only the returned secure URL is kept by the catalog.
    """

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, timeout: int = 30):
        self.timeout = timeout
        cloudinary.config(cloud_name=cloud_name, api_key=api_key, api_secret=api_secret, secure=True)

    def upload(self, file: BinaryIO, folder: str = "products") -> str:
        try:
            # return_error keeps the upstream HTTP code instead of a bare exception
            result = cloudinary.uploader.upload(
                file, folder=folder, resource_type="auto", timeout=self.timeout, return_error=True
            )
        except CloudinaryError as e:
            logger.error("Image host unreachable: %s", e)
            raise ImageUploadError(f"Image upload failed: {e}", status_code=502)

        error = result.get("error")
        if error:
            status_code = error.get("http_code") or 502
            logger.error("Image host rejected upload (%s): %s", status_code, error.get("message"))
            raise ImageUploadError(f"Image upload failed: {error.get('message')}", status_code=status_code)

        secure_url = result.get("secure_url")
        if not secure_url:
            raise ImageUploadError("Image upload failed: no URL returned", status_code=502)
        logger.info("Uploaded image to %s", secure_url)
        return secure_url


class InMemoryImageHost(IImageHost):
    """Stand-in image host for development and tests. Records every upload."""

    def __init__(self, base_url: str = "https://images.local"):
        self.base_url = base_url.rstrip("/")
        self.uploads: List[str] = []

    def upload(self, file: BinaryIO, folder: str = "products") -> str:
        url = f"{self.base_url}/{folder}/{uuid.uuid4().hex}"
        self.uploads.append(url)
        logger.debug("Stored %s as %s", getattr(file, "name", "upload"), url)
        return url


def build_image_host() -> IImageHost:
    """Cloudinary when credentials are configured, the in-memory host otherwise."""
    cloud_name: Optional[str] = getattr(settings, "CLOUDINARY_CLOUD_NAME", "")
    if cloud_name:
        return CloudinaryImageHost(
            cloud_name=cloud_name,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
        )
    logger.warning("CLOUDINARY_CLOUD_NAME is not set; product images are not persisted remotely")
    return InMemoryImageHost()


# ====================================================================
# TOKENS
# ====================================================================

class TokenIssuer:
    """Signs the session token carried by the auth cookie: {id, role}, one-day lifetime."""

    def issue(self, account: Account) -> str:
        token = AccessToken.for_user(account)
        token["role"] = account.role
        return str(token)
