"""AI inference HTTP client.

ONLY the AI service call - posts an image reference to the inference
endpoint and returns the JSON verdict.
"""

import logging
from typing import Any, Dict

import httpx

from ....core.exceptions import InferenceFailed

logger = logging.getLogger(__name__)


class InferenceClient:
    """Client for the external AI inference service."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, api_key: str = ""):
        self._http = http_client
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def infer(self, image_url: str, metadata: Dict[str, Any]) -> Dict[str, Any]:
        """Run inference on an image.

        Raises:
            InferenceFailed: If the service is unreachable, answers with an
                error status or returns something other than a JSON object
        """
        url = f"{self.base_url}/inference"
        try:
            response = await self._http.post(
                url,
                json={"imageUrl": image_url, "metadata": metadata},
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.error(f"AI inference request failed: {e!r}")
            raise InferenceFailed(f"AI service unreachable: {e!r}") from e

        if response.is_error:
            logger.error(f"AI inference returned HTTP {response.status_code}")
            raise InferenceFailed(
                f"AI service returned HTTP {response.status_code}",
                details={"status_code": response.status_code},
            )

        try:
            result = response.json()
        except ValueError as e:
            raise InferenceFailed("AI service returned a non-JSON response") from e
        if not isinstance(result, dict):
            raise InferenceFailed("AI service returned an unexpected payload")
        return result

    async def aclose(self) -> None:
        await self._http.aclose()
