"""
Cloudinary image hosting service.
Uploads image bytes with a signed request and returns the public URL.
"""

import base64
import hashlib
import http.client
import json
import time
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from image_checker.config import get_settings
from image_checker.exceptions import UpstreamError
from image_checker.schemas.media import UploadedImage
from image_checker.utils.logger import get_logger

logger = get_logger(__name__)


class ImageHostError(UpstreamError):
    """Exception raised when an upload to Cloudinary fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message, service="cloudinary")


class ImageHostService:
    """Service for storing images on Cloudinary."""

    def __init__(self) -> None:
        """Initialize the image host service."""
        self.settings = get_settings()
        self.base_url = "api.cloudinary.com"

    @property
    def upload_endpoint(self) -> str:
        return f"/v1_1/{self.settings.cloudinary_cloud_name}/image/upload"

    def sign(self, params: Dict[str, Any]) -> str:
        """
        Compute the Cloudinary request signature.

        The signed string is the alphabetically sorted ``key=value`` pairs
        joined with ``&``, followed by the API secret, hashed with SHA-1.
        """
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, ""))
        return hashlib.sha1(f"{to_sign}{self.settings.cloudinary_api_secret}".encode("utf-8")).hexdigest()

    def upload(self, content: bytes, content_type: str, filename: Optional[str] = None) -> UploadedImage:
        """
        Upload an image and return where it is hosted.

        Args:
            content: Raw image bytes
            content_type: MIME type of the image
            filename: Original filename, for logging only

        Returns:
            UploadedImage with the secure URL and Cloudinary public id

        Raises:
            ImageHostError: If credentials are missing or the upload fails
        """
        if not (self.settings.cloudinary_cloud_name
                and self.settings.cloudinary_api_key
                and self.settings.cloudinary_api_secret):
            raise ImageHostError("Cloudinary credentials not configured")

        logger.info("Uploading image", filename=filename, size_bytes=len(content))

        params: Dict[str, Any] = {"timestamp": int(time.time())}
        if self.settings.cloudinary_folder:
            params["folder"] = self.settings.cloudinary_folder

        encoded = base64.b64encode(content).decode("ascii")
        body = urlencode({
            **params,
            "file": f"data:{content_type};base64,{encoded}",
            "api_key": self.settings.cloudinary_api_key,
            "signature": self.sign(params)
        })
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json"
        }

        conn = http.client.HTTPSConnection(self.base_url, timeout=self.settings.upstream_timeout)
        try:
            conn.request("POST", self.upload_endpoint, body, headers)
            response = conn.getresponse()
            data = response.read()
            payload = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error("Failed to parse Cloudinary response", error=str(e))
            raise ImageHostError(f"Failed to parse Cloudinary response: {e}") from e
        except (OSError, http.client.HTTPException) as e:
            logger.error("Cloudinary request failed", error=str(e))
            raise ImageHostError(f"Cloudinary request failed: {e}") from e
        finally:
            conn.close()

        if response.status != 200:
            error = payload.get("error", {}) if isinstance(payload, dict) else {}
            message = error.get("message") if isinstance(error, dict) else None
            logger.error("Cloudinary upload rejected", status=response.status, error=message)
            raise ImageHostError(message or f"Cloudinary returned status {response.status}: {response.reason}")

        url = payload.get("secure_url") or payload.get("url")
        if not url:
            raise ImageHostError("Cloudinary response did not include an image URL")

        logger.info("Image uploaded", filename=filename, public_id=payload.get("public_id"))
        return UploadedImage(url=url, public_id=payload.get("public_id"))
