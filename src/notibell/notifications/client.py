"""HTTP adapter for the dashboard notification service."""
from typing import Any, Dict, Optional

import httpx

from notibell.utils.concurrency.async_utils import retry_async
from notibell.utils.config_service import ConfigurationService
from notibell.utils.log_service import debug


class NotificationServiceError(Exception):
    """Raised when the notification service cannot be reached or answers badly"""
    pass


class NotificationClient:
    """Thin async client for the ``/notifications`` endpoints.

    Responses are returned as decoded JSON without any interpretation; see
    :mod:`notibell.notifications.normalizer` for that.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token or None
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_config(cls, config_service: ConfigurationService, **kwargs) -> "NotificationClient":
        return cls(
            base_url=config_service.get("api.base_url", str, "http://localhost:5000/api"),
            token=config_service.get("api.token", str, ""),
            timeout=float(config_service.get("api.timeout_s", default=10.0)),
            **kwargs,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NotificationClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        return await self._get_client().request(method, path, **kwargs)

    # transient transport failures on reads get one more try
    _send_idempotent = retry_async(
        attempts=2, base_delay=0.25, exceptions=(httpx.TransportError,)
    )(_send)

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        send = self._send_idempotent if method == "GET" else self._send
        try:
            response = await send(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationServiceError(
                f"{method} {path} failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise NotificationServiceError(f"{method} {path} failed: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise NotificationServiceError(f"{method} {path} returned invalid JSON") from e

    async def list_notifications(self, page: int = 1, page_size: int = 50, filter: str = "all") -> Any:
        """Fetch one page of notifications; the body shape is not guaranteed."""
        params = {"page": page, "limit": page_size, "filter": filter}
        debug(f"Fetching notifications {params}")
        return await self._request("GET", "/notifications", params=params)

    async def mark_all_read(self) -> Any:
        return await self._request("PATCH", "/notifications/mark-all-read")
