"""
HTTP client for the document-extraction API.
"""

import mimetypes
from pathlib import Path
from typing import Any

import requests

from .config import REQUEST_TIMEOUT, UPLOAD_FIELD_NAME, logger
from .exceptions import AuthenticationError, ExtractionAPIError


class ExtractionClient:
    """Submits invoice images to the extraction API with a bearer token."""

    def __init__(
        self,
        api_url: str,
        token: str,
        timeout: float = REQUEST_TIMEOUT,
        field_name: str = UPLOAD_FIELD_NAME,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self.field_name = field_name
        self.headers = {
            "Authorization": f"Bearer {token}",
        }

    def submit(self, image_path: Path) -> Any:
        """
        Upload one image as multipart form data and return the decoded JSON.

        Raises:
            AuthenticationError: the API answered 401
            ExtractionAPIError: network failure, any other error status,
                unreadable image, or a body that is not JSON
        """
        image_path = Path(image_path)
        content_type = mimetypes.guess_type(image_path.name)[0] or "application/octet-stream"
        logger.debug(f"Submitting {image_path.name} to {self.api_url}")

        try:
            with open(image_path, "rb") as f:
                response = requests.post(
                    self.api_url,
                    headers=self.headers,
                    files={self.field_name: (image_path.name, f, content_type)},
                    timeout=self.timeout,
                )
        except requests.RequestException as e:
            raise ExtractionAPIError(f"Request failed: {e}") from e
        except OSError as e:
            raise ExtractionAPIError(f"Could not read {image_path.name}: {e}") from e

        if response.status_code == 401:
            raise AuthenticationError(
                "Error 401: authentication token is invalid or expired. "
                "Update the token and try again."
            )

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise ExtractionAPIError(str(e), status_code=response.status_code) from e

        try:
            return response.json()
        except ValueError as e:
            raise ExtractionAPIError(
                "API response is not valid JSON", status_code=response.status_code
            ) from e
