"""
SerpAPI reverse image search service.
"""

import http.client
import json
from typing import Any, Dict
from urllib.parse import urlencode

from image_checker.config import get_settings
from image_checker.exceptions import CheckValidationError, UpstreamError
from image_checker.utils.logger import get_logger

logger = get_logger(__name__)


class ReverseImageSearchError(UpstreamError):
    """Exception raised when the SerpAPI search fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message, service="serpapi")


class ReverseImageSearchService:
    """Service for finding visually similar images with SerpAPI's Google Reverse Image engine."""

    def __init__(self) -> None:
        """Initialize the reverse image search service."""
        self.settings = get_settings()
        self.base_url = self.settings.serpapi_host
        self.search_endpoint = "/search.json"
        self.engine = "google_reverse_image"

    def search(self, image_url: str) -> Dict[str, Any]:
        """
        Look up images visually similar to the one at ``image_url``.

        Args:
            image_url: Publicly reachable URL of the image

        Returns:
            SerpAPI response payload, unmodified

        Raises:
            CheckValidationError: If no image URL is given
            ReverseImageSearchError: If the API key is missing or the request fails
        """
        if not image_url or not image_url.strip():
            raise CheckValidationError("Image URL not provided")
        if not self.settings.serpapi_key:
            raise ReverseImageSearchError("SerpAPI key not configured")

        logger.info("Performing reverse image search", image_url=image_url)

        query = urlencode({
            "engine": self.engine,
            "image_url": image_url.strip(),
            "api_key": self.settings.serpapi_key
        })
        conn = http.client.HTTPSConnection(self.base_url, timeout=self.settings.upstream_timeout)

        try:
            conn.request("GET", f"{self.search_endpoint}?{query}", headers={"Accept": "application/json"})
            response = conn.getresponse()
            data = response.read()

            if response.status != 200:
                error_msg = self._error_message(data) or f"SerpAPI returned status {response.status}: {response.reason}"
                logger.error("Reverse image search failed", status=response.status, reason=response.reason)
                raise ReverseImageSearchError(error_msg)

            result = json.loads(data.decode("utf-8"))

        except ReverseImageSearchError:
            raise
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error("Failed to parse SerpAPI response", error=str(e))
            raise ReverseImageSearchError(f"Failed to parse SerpAPI response: {e}") from e
        except (OSError, http.client.HTTPException) as e:
            # Covers connection failures and socket timeouts
            logger.error("SerpAPI request failed", error=str(e))
            raise ReverseImageSearchError(f"SerpAPI request failed: {e}") from e
        finally:
            conn.close()

        if isinstance(result, dict) and result.get("error"):
            logger.error("SerpAPI reported an error", error=result["error"])
            raise ReverseImageSearchError(str(result["error"]))

        logger.info("Reverse image search completed",
                   image_results=len(result.get("image_results", [])) if isinstance(result, dict) else 0)
        return result

    @staticmethod
    def _error_message(data: bytes) -> str:
        """Extract the ``error`` field SerpAPI puts in failed responses, if present."""
        try:
            payload = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return ""
        if isinstance(payload, dict):
            return str(payload.get("error") or "")
        return ""
