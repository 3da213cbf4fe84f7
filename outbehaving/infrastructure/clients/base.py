"""Shared HTTP plumbing for the backend-as-a-service gateway"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from outbehaving.config import Settings, settings as default_settings
from outbehaving.domain.exceptions import ConfigurationError, UnreadableResponseError
from outbehaving.infrastructure.errors import ErrorType, to_backend_error


@dataclass
class BackendConfig:
    """Connection parameters for the hosted backend"""

    url: str
    anon_key: str
    timeout: float = 10.0
    transport: Optional[httpx.AsyncBaseTransport] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides: Any) -> "BackendConfig":
        """
        Build from environment settings.

        Raises:
            ConfigurationError: backend URL or API key missing; the app
                must not start without them
        """
        settings = settings or default_settings
        missing = [
            name for name in ("supabase_url", "supabase_anon_key") if not getattr(settings, name)
        ]
        if missing:
            raise ConfigurationError(f"Missing backend configuration: {', '.join(missing).upper()}")
        return cls(
            url=settings.supabase_url.rstrip("/"),
            anon_key=settings.supabase_anon_key,
            timeout=settings.http_timeout_seconds,
            **overrides,
        )


class BackendClient:
    """Base for gateway clients: one fallible request per call, no retry"""

    def __init__(self, config: BackendConfig, access_token: Optional[str] = None):
        self.config = config
        self.access_token = access_token

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        token = access_token or self.access_token or self.config.anon_key
        return {
            "apikey": self.config.anon_key,
            "Authorization": f"Bearer {token}",
        }

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        access_token: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Perform a single request against the backend.

        Raises:
            BackendError: on transport failure or non-2xx status, already
                classified into the error taxonomy
        """
        request_headers = self._headers(access_token)
        request_headers.update(headers or {})

        async with httpx.AsyncClient(
            base_url=self.config.url,
            timeout=self.config.timeout,
            transport=self.config.transport,
        ) as client:
            try:
                response = await client.request(method, path, headers=request_headers, **kwargs)
                response.raise_for_status()
                return response
            except httpx.HTTPError as e:
                raise to_backend_error(e, operation) from e

    @staticmethod
    def _json(response: httpx.Response, operation: str) -> Any:
        """
        Decode a successful reply's JSON body.

        Raises:
            UnreadableResponseError: empty or non-JSON body, e.g. a 204 or a
                proxy's HTML page
        """
        try:
            return response.json()
        except ValueError as e:
            raise UnreadableResponseError(
                f"{operation} returned an unreadable body",
                ErrorType.SERVER,
                status_code=response.status_code,
                details=response.text or None,
            ) from e
