"""Cloudinary integration for profile photos."""

from __future__ import annotations

import io
import logging
import re
import time
from typing import Any, Dict, Optional

import cloudinary.exceptions
import cloudinary.uploader

from ..domain.errors import InternalError, UploadError

logger = logging.getLogger(__name__)

_PUBLIC_ID_RE = re.compile(r"/v\d+/(.+)\.[a-zA-Z0-9]+$")


class CloudinaryImageStorage:
    """Stores profile photos on Cloudinary, cropped to a 400x400 face-centred square."""

    ALLOWED_FORMATS = ["jpg", "jpeg", "png", "webp"]

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        folder: str = "roomhub/profile-photos",
    ) -> None:
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }
        self.folder = folder
        self.enabled = bool(cloud_name and api_key and api_secret)

    def store(self, content: bytes, account_id: int) -> str:
        if not self.enabled:
            raise InternalError("Image storage is not configured")
        options: Dict[str, Any] = {
            **self._credentials,
            "folder": self.folder,
            "public_id": f"user_{account_id}_{int(time.time() * 1000)}",
            "transformation": [
                {"width": 400, "height": 400, "crop": "fill", "gravity": "face"},
                {"quality": "auto", "fetch_format": "auto"},
            ],
            "allowed_formats": self.ALLOWED_FORMATS,
            "resource_type": "image",
            "secure": True,
        }
        try:
            result = cloudinary.uploader.upload(io.BytesIO(content), **options)
        except cloudinary.exceptions.Error as exc:
            logger.exception("Cloudinary upload failed for account %s", account_id)
            raise UploadError("Could not process the image") from exc
        url = result.get("secure_url")
        if not url:
            raise UploadError("Image host returned no URL")
        return url

    def delete(self, url: str) -> None:
        """Remove a stored image. Failures are logged, never raised."""
        public_id = self.extract_public_id(url)
        if not public_id or not self.enabled:
            return
        try:
            cloudinary.uploader.destroy(public_id, **self._credentials)
        except cloudinary.exceptions.Error:
            logger.exception("Could not delete Cloudinary image %s", public_id)

    @staticmethod
    def extract_public_id(url: str) -> Optional[str]:
        match = _PUBLIC_ID_RE.search(url or "")
        return match.group(1) if match else None
