import asyncio
import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import httpx

from catalog_hub.core.exceptions import IntegrationException

logger = logging.getLogger(__name__)


class HttpMethod(str, Enum):
    """Enum defining supported HTTP methods."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class RequestConfig:
    """Configuration for API requests including retry and timeout settings."""

    def __init__(
        self,
        max_retries: int = 3,
        timeout: float = 30,
        backoff_factor: float = 0.5,
        retry_status_codes: List[int] = None,
        retry_on_timeout: bool = True
    ):
        """
        Initialize RequestConfig with retry and timeout settings.

        Args:
            max_retries: Maximum number of retry attempts
            timeout: Request timeout in seconds
            backoff_factor: Backoff factor for exponential retry delay
            retry_status_codes: List of HTTP status codes to retry on
            retry_on_timeout: Whether to retry on timeout
        """
        self.max_retries = max_retries
        self.timeout = timeout
        self.backoff_factor = backoff_factor
        self.retry_status_codes = retry_status_codes or [429, 500, 502, 503, 504]
        self.retry_on_timeout = retry_on_timeout

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RequestConfig":
        """Build a request configuration from an adaptor config dictionary."""
        return cls(
            max_retries=config.get("max_retries", 3),
            timeout=config.get("timeout", 30),
            backoff_factor=config.get("backoff_factor", 0.5),
        )


class APIConnector:
    """
    HTTP connector shared by partner adaptors.

    Wraps an ``httpx.AsyncClient`` and adds retry with exponential backoff
    for idempotent requests. Transport failures surface as
    ``IntegrationException``; HTTP error statuses are returned to the
    caller untouched so it can decide what a non-success response means.
    """

    def __init__(self, client: httpx.AsyncClient, config: Optional[RequestConfig] = None):
        self.client = client
        self.config = config or RequestConfig()

    async def request(
        self,
        method: HttpMethod,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        retry: bool = True,
    ) -> httpx.Response:
        """
        Makes an HTTP request with retry logic.

        Args:
            method: HTTP method to use
            url: URL to make the request to
            params: Optional query parameters
            data: Optional JSON request body
            headers: Optional request headers
            retry: Whether the request may be repeated. Only idempotent
                   requests should be retried.

        Returns:
            httpx.Response: The final response

        Raises:
            IntegrationException: If the partner could not be reached
        """
        attempts = self.config.max_retries + 1 if retry else 1
        last_error: Optional[Exception] = None

        for attempt in range(attempts):
            try:
                response = await self.client.request(
                    method.value,
                    url,
                    params=params,
                    json=data,
                    headers=headers,
                    timeout=self.config.timeout,
                )
            except httpx.TimeoutException as e:
                last_error = e
                if not self.config.retry_on_timeout:
                    break
                logger.warning(f"Timeout calling {method.value} {url} (attempt {attempt + 1}/{attempts})")
            except httpx.TransportError as e:
                last_error = e
                logger.warning(f"Transport error calling {method.value} {url} (attempt {attempt + 1}/{attempts}): {str(e)}")
            else:
                if response.status_code in self.config.retry_status_codes and attempt < attempts - 1:
                    logger.warning(
                        f"Retryable status {response.status_code} from {method.value} {url} "
                        f"(attempt {attempt + 1}/{attempts})"
                    )
                else:
                    return response

            if attempt < attempts - 1:
                await asyncio.sleep(self.config.backoff_factor * (2 ** attempt))

        raise IntegrationException(
            detail=f"Request to {url} failed",
            context={"method": method.value, "url": url},
            original_exception=last_error,
        )

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a URL and decode its JSON body.

        Raises:
            IntegrationException: On transport failure, non-success status
                                  or an undecodable body
        """
        response = await self.request(HttpMethod.GET, url, params=params)
        if not response.is_success:
            raise IntegrationException(
                detail=f"Unexpected status {response.status_code} from {url}",
                context={"url": url, "status_code": response.status_code},
            )
        try:
            return response.json()
        except ValueError as e:
            raise IntegrationException(
                detail=f"Invalid JSON payload from {url}",
                context={"url": url},
                original_exception=e,
            )

    @staticmethod
    def validate_url(url: str) -> bool:
        """
        Validates that a URL is properly formatted.

        Args:
            url: The URL to validate

        Returns:
            bool: True if the URL is valid, False otherwise
        """
        try:
            result = urlparse(url)
            return all([result.scheme, result.netloc])
        except ValueError as e:
            logger.error(f"URL validation error: {str(e)}")
            return False

    @staticmethod
    def build_url(base_url: str, path: str, version: Optional[str] = None) -> str:
        """
        Builds a complete URL from components.

        Args:
            base_url: The base URL of the API
            path: The path to the specific resource
            version: Optional API version string

        Returns:
            str: The complete URL
        """
        url = base_url.rstrip('/')
        if version:
            url += f"/{version.strip('/')}"
        url += f"/{path.lstrip('/')}"
        return url


def parse_bool_payload(response: httpx.Response) -> Optional[bool]:
    """
    Reads a bare boolean answer sent as text or JSON.

    Returns:
        The boolean value, or None when the body is not a boolean.
    """
    text = response.text.strip()
    if text.lower() in ("true", "false"):
        return text.lower() == "true"
    try:
        payload = json.loads(text)
    except ValueError:
        return None
    if isinstance(payload, bool):
        return payload
    if isinstance(payload, str) and payload.strip().lower() in ("true", "false"):
        return payload.strip().lower() == "true"
    return None
