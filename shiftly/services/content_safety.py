import logging
from typing import Any, Optional

import httpx

from ..config import (
    CONTENT_SAFETY_API_VERSION,
    CONTENT_SAFETY_ENDPOINT,
    CONTENT_SAFETY_KEY,
    CONTENT_SAFETY_SEVERITY_THRESHOLD,
)
from ..exceptions import ContentSafetyError

logger = logging.getLogger(__name__)


class ContentSafetyClient:
    """Client for the Azure AI Content Safety text:analyze API"""

    def __init__(
        self,
        endpoint: str,
        key: str,
        api_version: str = CONTENT_SAFETY_API_VERSION,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.endpoint = endpoint[:-1] if endpoint.endswith("/") else endpoint
        self.key = key
        self.api_version = api_version
        self.transport = transport
        self.timeout = timeout

    @property
    def analyze_url(self) -> str:
        return f"{self.endpoint}/contentsafety/text:analyze?api-version={self.api_version}"

    async def analyze_text(self, text: str) -> list[dict[str, Any]]:
        """
        Analyze text and return the per-category severities:
        [{"category": "Hate", "severity": 0}, ...]
        """
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(
                    self.analyze_url,
                    headers={
                        "Ocp-Apim-Subscription-Key": self.key,
                        "Content-Type": "application/json",
                    },
                    json={"text": text},
                )
        except httpx.HTTPError as e:
            logger.error(f"❌ Content Safety request failed: {str(e)}")
            raise ContentSafetyError(f"Content Safety request failed: {str(e)}") from e

        if response.status_code >= 400:
            try:
                details = response.json()
            except ValueError:
                details = response.text[:500]
            logger.error(f"❌ Content Safety API error {response.status_code}: {details}")
            raise ContentSafetyError(
                "Content Safety analysis failed",
                status_code=response.status_code,
                details=details,
            )

        return response.json().get("categoriesAnalysis", [])


def is_violation(
    categories: list[dict[str, Any]], threshold: int = CONTENT_SAFETY_SEVERITY_THRESHOLD
) -> bool:
    """True when any category's severity is at or above threshold (string or int severities)"""
    for category in categories:
        severity = category.get("severity")
        if severity is None:
            continue
        try:
            if int(float(severity)) >= threshold:
                return True
        except (TypeError, ValueError):
            logger.warning(f"⚠️ Unreadable severity for {category.get('category')}: {severity!r}")
    return False


def get_content_safety_client() -> Optional[ContentSafetyClient]:
    """Client from configuration, or None when Content Safety is not configured"""
    if not CONTENT_SAFETY_ENDPOINT or not CONTENT_SAFETY_KEY:
        return None
    return ContentSafetyClient(CONTENT_SAFETY_ENDPOINT, CONTENT_SAFETY_KEY)
