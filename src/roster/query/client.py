"""HTTP transport for the employee listing endpoint."""

from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from roster.config import config
from roster.config.logging_config import get_logger
from roster.exceptions import ListingRequestError
from .query_state import encode_params

logger = get_logger("client")


class PageMeta(BaseModel):
    """Pagination metadata returned with a listing page."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    current_page: int = 1
    from_: Optional[int] = Field(default=None, alias="from")
    to: Optional[int] = None
    total: int = 0
    last_page: int = 1
    per_page: int = 10


class FlashMessages(BaseModel):
    """One-shot status messages set by the server."""

    model_config = ConfigDict(extra="ignore")

    success: Optional[str] = None
    error: Optional[str] = None


class ListingPage(BaseModel):
    """
    One page of employees plus the optional side data.

    ``departments``, ``positions`` and ``filter_fields_config`` are only
    present when they were requested or changed.
    """

    model_config = ConfigDict(extra="allow")

    data: List[Dict[str, Any]] = Field(default_factory=list)
    meta: PageMeta = Field(default_factory=PageMeta)
    departments: Optional[List[Dict[str, Any]]] = None
    positions: Optional[List[Dict[str, Any]]] = None
    filter_fields_config: Optional[Dict[str, Any]] = None
    flash: Optional[FlashMessages] = None


class ListingClient:
    """
    Async client for the listing endpoint.

    Args:
        base_url: Server root, defaults to the configured API base URL.
        path: Listing route relative to ``base_url``.
        timeout: Request timeout in seconds.
        headers: Extra request headers.
        transport: Custom httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        path: Optional[str] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or config.api.base_url
        self.path = path or config.api.listing_path
        self.timeout = timeout if timeout is not None else config.api.request_timeout
        self.headers = {**config.api.headers, **(headers or {})}
        self.transport = transport

    async def fetch(self, params: Dict[str, Any]) -> ListingPage:
        """
        Request one listing page.

        Args:
            params: Flat parameter mapping from ``QueryState.to_params()``.

        Returns:
            Decoded ListingPage.

        Raises:
            ListingRequestError: On transport failure, non-2xx status or an
                undecodable body.
        """
        logger.debug(f"GET {self.path} {params}")
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                transport=self.transport,
            ) as client:
                response = await client.get(self.path, params=encode_params(params))
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as e:
            raise ListingRequestError(f"Listing request timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise ListingRequestError(f"Listing request failed with HTTP {status}", status_code=status) from e
        except httpx.HTTPError as e:
            raise ListingRequestError(f"Listing request failed: {e}") from e
        except ValueError as e:
            raise ListingRequestError(f"Listing response is not valid JSON: {e}") from e

        try:
            return ListingPage.model_validate(payload)
        except ValidationError as e:
            raise ListingRequestError(f"Unexpected listing response shape: {e}") from e
