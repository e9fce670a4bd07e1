"""
HTTP client for the Skatteverket VAT declaration API.

Wraps the draft (utkast), check (kontrollera), lock (las), submitted
(inlamnat) and decided (beslutat) endpoints behind typed async methods.
"""

import asyncio
import random
from functools import wraps
from typing import Any, Dict, Optional, Tuple, Type
from urllib.parse import quote

import aiohttp
import structlog

from ..config.settings import SkatteverketAPIConfig
from .models import (
    HealthResponse,
    VatDecision,
    VatDecisionList,
    VatDraft,
    VatDraftList,
    VatDraftRequest,
    VatSubmission,
    VatSubmissionList,
    VatValidationResponse,
)

logger = structlog.get_logger(__name__)

TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (
    aiohttp.ClientConnectionError,
    asyncio.TimeoutError,
)


class SkatteverketClientError(Exception):
    """Base exception for Skatteverket client errors."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.original_error = original_error


def retry_with_backoff(max_delay: float = 10.0, retry_on=TRANSIENT_ERRORS):
    """
    Decorator for retry with exponential backoff.

    Attempt count and initial delay are read from the client instance
    (``max_retries`` / ``retry_base_delay``) so they follow configuration.
    Only ``retry_on`` exceptions are retried; anything else propagates at
    once.

    Args:
        max_delay: Maximum delay between retries in seconds
        retry_on: Exception types considered transient
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(self, *args, **kwargs):
            max_retries = self.max_retries
            last_exception: Optional[BaseException] = None

            for attempt in range(max_retries):
                try:
                    return await func(self, *args, **kwargs)
                except retry_on as e:
                    last_exception = e

                    if attempt < max_retries - 1:
                        delay = min(
                            self.retry_base_delay * (2**attempt) + random.uniform(0, 0.1),  # nosec B311
                            max_delay,
                        )
                        logger.warning(
                            "Request failed, retrying",
                            attempt=attempt + 1,
                            max_retries=max_retries,
                            delay=round(delay, 2),
                            error=str(e) or type(e).__name__,
                        )
                        await asyncio.sleep(delay)
                    else:
                        logger.error("All retry attempts failed", error=str(e) or type(e).__name__)

            raise last_exception

        return wrapper

    return decorator


def _draft_path(prefix: str, redovisare: str, period: str) -> str:
    return f"{prefix}/{quote(redovisare, safe='')}/{quote(period, safe='')}"


class SkatteverketClient:
    """
    Async client for the Skatteverket VAT API.

    The aiohttp session is created lazily on first use and closed by
    ``disconnect()`` (or leaving the ``async with`` block).
    """

    def __init__(self, config: Optional[SkatteverketAPIConfig] = None):
        """
        Initialize the client.

        Args:
            config: API connection settings
        """
        self.config = config or SkatteverketAPIConfig()
        self.max_retries = self.config.max_retries
        self.retry_base_delay = self.config.retry_base_delay_seconds
        self._base_url = self.config.base_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None
        self._connection_lock = asyncio.Lock()

    async def connect(self) -> None:
        """Create the HTTP session."""
        async with self._connection_lock:
            if self._session is not None and not self._session.closed:
                return

            self._session = aiohttp.ClientSession(
                headers=self._get_headers(),
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
            )
            logger.info("Skatteverket API session opened", base_url=self._base_url)

    async def disconnect(self) -> None:
        """Close the HTTP session."""
        async with self._connection_lock:
            if self._session is None:
                return
            try:
                await self._session.close()
                logger.info("Skatteverket API session closed")
            finally:
                self._session = None

    @property
    def connected(self) -> bool:
        return self._session is not None and not self._session.closed

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    @retry_with_backoff()
    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        allow_not_found: bool = False,
    ) -> Tuple[int, Any]:
        """
        Perform one HTTP call.

        Returns:
            ``(status, decoded JSON body or None)``

        Raises:
            SkatteverketClientError: On a non-success status (404 excepted
                when ``allow_not_found``)
        """
        if not self.connected:
            await self.connect()

        async with self._session.request(method, f"{self._base_url}{path}", json=json) as resp:
            if resp.status == 404 and allow_not_found:
                return resp.status, None

            if resp.status >= 400:
                error_text = (await resp.text()).strip()
                message = f"HTTP {resp.status}: {error_text}" if error_text else f"HTTP {resp.status}"
                raise SkatteverketClientError(message, status=resp.status)

            payload = await resp.json(content_type=None)
            return resp.status, payload

    def _wrap_error(self, error: Exception, description: str) -> SkatteverketClientError:
        logger.error(description, error=str(error) or type(error).__name__)
        if isinstance(error, SkatteverketClientError):
            return SkatteverketClientError(
                f"{description}: {error.message}",
                status=error.status,
                original_error=error.original_error or error,
            )
        return SkatteverketClientError(
            f"{description}: {str(error) or type(error).__name__}",
            original_error=error,
        )

    async def ping(self) -> HealthResponse:
        """Check that the API answers."""
        logger.debug("Pinging Skatteverket API")
        try:
            _, payload = await self._request("GET", "/api/ping")
            if payload is None:
                return HealthResponse(status="unknown")
            return HealthResponse.model_validate(payload)
        except Exception as e:
            raise self._wrap_error(e, "Failed to connect to Skatteverket API")

    async def get_drafts(self) -> VatDraftList:
        """List all drafts."""
        logger.debug("Getting VAT drafts")
        try:
            _, payload = await self._request("POST", "/api/utkast")
            return VatDraftList.model_validate(payload or {})
        except Exception as e:
            raise self._wrap_error(e, "Failed to retrieve VAT drafts")

    async def get_draft(self, redovisare: str, period: str) -> Optional[VatDraft]:
        """
        Fetch one draft.

        Returns:
            The draft, or None if there is none for the reporter and period
        """
        logger.debug("Getting VAT draft", redovisare=redovisare, period=period)
        try:
            status, payload = await self._request(
                "GET", _draft_path("/api/utkast", redovisare, period), allow_not_found=True
            )
            if status == 404:
                return None
            return VatDraft.model_validate(payload or {})
        except Exception as e:
            raise self._wrap_error(e, f"Failed to retrieve VAT draft for {redovisare}/{period}")

    async def create_or_update_draft(
        self, redovisare: str, period: str, request: VatDraftRequest
    ) -> VatDraft:
        """Create a draft, or replace the amounts of an existing one."""
        logger.debug("Creating/updating VAT draft", redovisare=redovisare, period=period)
        try:
            _, payload = await self._request(
                "POST",
                _draft_path("/api/utkast", redovisare, period),
                json=request.to_wire(),
            )
            if payload is None:
                raise SkatteverketClientError("Empty response body")
            return VatDraft.model_validate(payload)
        except Exception as e:
            raise self._wrap_error(
                e, f"Failed to create/update VAT draft for {redovisare}/{period}"
            )

    async def delete_draft(self, redovisare: str, period: str) -> bool:
        """
        Delete a draft.

        Returns:
            False if there was no such draft
        """
        logger.debug("Deleting VAT draft", redovisare=redovisare, period=period)
        try:
            status, _ = await self._request(
                "DELETE", _draft_path("/api/utkast", redovisare, period), allow_not_found=True
            )
            return status != 404
        except Exception as e:
            raise self._wrap_error(e, f"Failed to delete VAT draft for {redovisare}/{period}")

    async def validate_draft(self, redovisare: str, period: str) -> VatValidationResponse:
        """Run Skatteverket's checks against a draft."""
        logger.debug("Validating VAT draft", redovisare=redovisare, period=period)
        try:
            _, payload = await self._request(
                "POST", _draft_path("/api/kontrollera", redovisare, period)
            )
            return VatValidationResponse.model_validate(payload or {"valid": False})
        except Exception as e:
            raise self._wrap_error(e, f"Failed to validate VAT draft for {redovisare}/{period}")

    async def lock_draft(self, redovisare: str, period: str) -> bool:
        """Lock a draft for signing."""
        logger.debug("Locking VAT draft", redovisare=redovisare, period=period)
        try:
            await self._request("PUT", _draft_path("/api/las", redovisare, period))
            return True
        except Exception as e:
            raise self._wrap_error(e, f"Failed to lock VAT draft for {redovisare}/{period}")

    async def unlock_draft(self, redovisare: str, period: str) -> bool:
        """Unlock a draft so it can be edited again."""
        logger.debug("Unlocking VAT draft", redovisare=redovisare, period=period)
        try:
            await self._request("DELETE", _draft_path("/api/las", redovisare, period))
            return True
        except Exception as e:
            raise self._wrap_error(e, f"Failed to unlock VAT draft for {redovisare}/{period}")

    async def get_submissions(self) -> VatSubmissionList:
        logger.debug("Getting VAT submissions")
        try:
            _, payload = await self._request("POST", "/api/inlamnat")
            return VatSubmissionList.model_validate(payload or {})
        except Exception as e:
            raise self._wrap_error(e, "Failed to retrieve VAT submissions")

    async def get_submission(self, redovisare: str, period: str) -> Optional[VatSubmission]:
        logger.debug("Getting VAT submission", redovisare=redovisare, period=period)
        try:
            status, payload = await self._request(
                "GET", _draft_path("/api/inlamnat", redovisare, period), allow_not_found=True
            )
            if status == 404:
                return None
            return VatSubmission.model_validate(payload or {})
        except Exception as e:
            raise self._wrap_error(
                e, f"Failed to retrieve VAT submission for {redovisare}/{period}"
            )

    async def get_decisions(self) -> VatDecisionList:
        logger.debug("Getting VAT decisions")
        try:
            _, payload = await self._request("POST", "/api/beslutat")
            return VatDecisionList.model_validate(payload or {})
        except Exception as e:
            raise self._wrap_error(e, "Failed to retrieve VAT decisions")

    async def get_decision(self, redovisare: str, period: str) -> Optional[VatDecision]:
        logger.debug("Getting VAT decision", redovisare=redovisare, period=period)
        try:
            status, payload = await self._request(
                "GET", _draft_path("/api/beslutat", redovisare, period), allow_not_found=True
            )
            if status == 404:
                return None
            return VatDecision.model_validate(payload or {})
        except Exception as e:
            raise self._wrap_error(e, f"Failed to retrieve VAT decision for {redovisare}/{period}")

    async def __aenter__(self) -> "SkatteverketClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.disconnect()
