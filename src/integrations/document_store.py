"""
Document store client.

HTTP client for the platform's document store, which holds lesson content
and user profiles. Implements both the LessonStore and the
DevicePreferenceStore interfaces used by the fidelity engine.

Endpoints:
    GET   /lessons/{lesson_id}                       -> {"content": [...]}
    GET   /content?moduleId=..&deviceType=..         -> {"documents": [...]}
    GET   /content?moduleId=..&isDefault=true        -> {"documents": [...]}
    GET   /users/{user_id}                           -> user profile document
    PATCH /users/{user_id}                           -> field-path update

Usage:
    async with DocumentStoreClient.from_settings() as store:
        items = await store.fetch_lesson_content("lesson-42")
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx
from loguru import logger

from src.fidelity.errors import ContentNotFoundError, StoreUnavailableError
from src.fidelity.models import AvatarFidelityTier, ContentItem, DeviceClass
from src.fidelity.stores import parse_avatar_preference, parse_content_items


class DocumentStoreClient:
    """HTTP client for lesson content and user device preferences."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout_seconds: float = 10.0,
        retry_attempts: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Document store base URL
            api_key: Optional key sent as X-API-Key
            timeout_seconds: Per-request timeout
            retry_attempts: Attempts per request on timeout
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        headers = {"Accept": "application/json"}
        if api_key:
            headers["X-API-Key"] = api_key

        self.base_url = base_url.rstrip("/")
        self.retry_attempts = max(1, retry_attempts)
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Any = None, **kwargs: Any) -> DocumentStoreClient:
        if settings is None:
            from config import get_settings

            settings = get_settings()
        return cls(
            base_url=settings.store_base_url,
            api_key=settings.store_api_key,
            timeout_seconds=settings.store_timeout_seconds,
            retry_attempts=settings.store_retry_attempts,
            **kwargs,
        )

    async def __aenter__(self) -> "DocumentStoreClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    # =========================================================================
    # Lessons
    # =========================================================================

    async def fetch_lesson_content(self, lesson_id: str) -> list[ContentItem]:
        """
        Fetch a lesson's content items.

        Raises:
            ContentNotFoundError: Lesson does not exist
            StoreUnavailableError: Store unreachable or returned an error
        """
        response = await self._request("GET", f"/lessons/{lesson_id}")
        if response.status_code == 404:
            raise ContentNotFoundError(lesson_id)
        data = self._json(response)
        raw_items = data.get("content") or []
        return parse_content_items(raw_items, source=lesson_id)

    async def fetch_adaptive_content(self, module_id: str, device_class: DeviceClass) -> dict[str, Any]:
        """
        Fetch the module content document for a device class.

        Tries the document targeting the device class first, then the
        module's default document.

        Raises:
            ContentNotFoundError: Neither document exists
        """
        targeted = await self._query_documents({"moduleId": module_id, "deviceType": device_class.value})
        if targeted:
            return targeted[0]

        logger.debug(f"No {device_class.value} content for module {module_id}, trying default")
        defaults = await self._query_documents({"moduleId": module_id, "isDefault": "true"})
        if defaults:
            return defaults[0]
        raise ContentNotFoundError(module_id)

    async def _query_documents(self, params: dict[str, str]) -> list[dict[str, Any]]:
        response = await self._request("GET", "/content", params=params)
        return list(self._json(response).get("documents") or [])

    # =========================================================================
    # Device Preferences
    # =========================================================================

    async def fetch_device_preference(
        self, user_id: str, device_class: DeviceClass
    ) -> Optional[AvatarFidelityTier]:
        """Read the user's avatar fidelity override for a device class, if any."""
        response = await self._request("GET", f"/users/{user_id}")
        if response.status_code == 404:
            logger.debug(f"No profile for user {user_id}")
            return None
        return parse_avatar_preference(self._json(response), device_class)

    async def save_device_preference(
        self, user_id: str, device_class: DeviceClass, tier: AvatarFidelityTier
    ) -> None:
        """Store the user's avatar fidelity override for a device class."""
        response = await self._request(
            "PATCH",
            f"/users/{user_id}",
            json={f"devicePreferences.{device_class.value}": {"avatarFidelity": tier.value}},
        )
        self._raise_for_status(response)
        logger.info(f"Saved {device_class.value} avatar preference {tier.value} for user {user_id}")

    # =========================================================================
    # Transport
    # =========================================================================

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, retrying timeouts with exponential backoff."""
        last_error: Exception | None = None

        for attempt in range(self.retry_attempts):
            try:
                return await self.client.request(method, url, **kwargs)
            except httpx.TimeoutException as e:
                last_error = e
                if attempt + 1 < self.retry_attempts:
                    wait_time = 2 ** attempt * 0.1
                    logger.warning(
                        f"Document store timeout on {method} {url} "
                        f"(attempt {attempt + 1}/{self.retry_attempts}), retrying in {wait_time:.1f}s"
                    )
                    await asyncio.sleep(wait_time)
            except httpx.RequestError as e:
                logger.error(f"Connection error on {method} {url}: {e}")
                raise StoreUnavailableError(str(e)) from e

        logger.error(f"Document store timed out after {self.retry_attempts} attempts: {method} {url}")
        raise StoreUnavailableError(f"Timed out: {method} {url}") from last_error

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        self._raise_for_status(response)
        try:
            data = response.json()
        except ValueError as e:
            raise StoreUnavailableError(f"Invalid JSON from {response.request.url}") from e
        if not isinstance(data, dict):
            raise StoreUnavailableError(f"Unexpected payload from {response.request.url}")
        return data

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Document store returned {response.status_code} for {response.request.url}")
            raise StoreUnavailableError(str(e)) from e
