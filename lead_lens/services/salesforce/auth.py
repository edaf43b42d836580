# This project was developed with assistance from AI tools.
"""Client-credentials access token cache for the Salesforce REST API."""

import asyncio
import logging
import time
from dataclasses import dataclass

import httpx

from ...core.errors import CRMError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SalesforceToken:
    access_token: str
    instance_url: str
    expires_at: float


class SalesforceTokenCache:
    """Process-wide cache of one access token.

    ``get()`` returns the cached token until it is within ``refresh_margin``
    seconds of expiry. The lock keeps concurrent requests from stampeding
    the token endpoint; a refresh is idempotent either way.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        login_url: str,
        consumer_key: str,
        consumer_secret: str,
        ttl_seconds: int = 3600,
        refresh_margin_seconds: int = 300,
    ):
        self._http = http
        self._login_url = login_url.rstrip("/")
        self._consumer_key = consumer_key
        self._consumer_secret = consumer_secret
        self._ttl = ttl_seconds
        self._margin = refresh_margin_seconds
        self._token: SalesforceToken | None = None
        self._lock = asyncio.Lock()

    def _is_fresh(self, token: SalesforceToken | None) -> bool:
        return token is not None and time.monotonic() < token.expires_at - self._margin

    async def get(self) -> SalesforceToken:
        if self._is_fresh(self._token):
            return self._token
        async with self._lock:
            if not self._is_fresh(self._token):
                self._token = await self._fetch()
            return self._token

    def invalidate(self) -> None:
        self._token = None

    async def _fetch(self) -> SalesforceToken:
        url = f"{self._login_url}/services/oauth2/token"
        try:
            response = await self._http.post(
                url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._consumer_key,
                    "client_secret": self._consumer_secret,
                },
            )
        except httpx.HTTPError as exc:
            logger.error("Salesforce token request failed: %s", exc)
            raise CRMError(f"Salesforce token request failed: {exc}") from exc

        if response.status_code != 200:
            logger.error("Salesforce token request returned %s", response.status_code)
            raise CRMError(f"Salesforce token request failed: {response.status_code} {response.text}")

        body = response.json()
        logger.info("Salesforce access token refreshed (instance=%s)", body.get("instance_url"))
        return SalesforceToken(
            access_token=body["access_token"],
            instance_url=body["instance_url"].rstrip("/"),
            expires_at=time.monotonic() + self._ttl,
        )
