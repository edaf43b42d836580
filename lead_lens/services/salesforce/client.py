# This project was developed with assistance from AI tools.
"""Salesforce REST client backed by httpx.

The module exposes a singleton initialised at app startup via
``init_crm_client()``. With ``MOCK_SALESFORCE`` set the singleton is the
in-memory ``MockSalesforceClient`` instead, so routes never branch on mode.
"""

import logging
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from ...core.config import Settings
from ...core.errors import CRMError
from .auth import SalesforceTokenCache

logger = logging.getLogger(__name__)


class CRMClient(Protocol):
    """Query/update interface the contact services depend on."""

    async def query(self, soql: str) -> dict[str, Any]: ...

    async def update_records(self, sobject: str, records: list[dict[str, Any]]) -> list[dict[str, Any]]: ...

    async def describe(self, sobject: str) -> dict[str, Any]: ...

    async def aclose(self) -> None: ...


class SalesforceClient:
    """Thin async wrapper around the Salesforce REST endpoints we use."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        tokens: SalesforceTokenCache,
        api_version: str = "v62.0",
    ):
        self._http = http
        self._tokens = tokens
        self._api_version = api_version

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Authorized request; a 401 drops the cached token and retries once."""
        for attempt in (1, 2):
            token = await self._tokens.get()
            url = f"{token.instance_url}/services/data/{self._api_version}{path}"
            headers = {"Authorization": f"Bearer {token.access_token}"}
            try:
                response = await self._http.request(method, url, headers=headers, **kwargs)
            except httpx.HTTPError as exc:
                logger.error("Salesforce %s %s failed: %s", method, path.split("?")[0], exc)
                raise CRMError(f"Salesforce request failed: {exc}") from exc

            if response.status_code == 401 and attempt == 1:
                logger.info("Salesforce rejected access token, refreshing")
                self._tokens.invalidate()
                continue
            if response.status_code >= 300:
                logger.error(
                    "Salesforce %s %s returned %s", method, path.split("?")[0], response.status_code,
                )
                raise CRMError(f"Salesforce request failed: {response.status_code} {response.text}")
            return response
        raise CRMError("Salesforce request failed: unauthorized")

    async def query(self, soql: str) -> dict[str, Any]:
        response = await self._request("GET", f"/query?q={quote(soql, safe='')}")
        return response.json()

    async def update_records(self, sobject: str, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Composite PATCH with partial success; one result per input record, in order."""
        body = {
            "allOrNone": False,
            "records": [{"attributes": {"type": sobject}, **r} for r in records],
        }
        response = await self._request("PATCH", "/composite/sobjects", json=body)
        return response.json()

    async def describe(self, sobject: str) -> dict[str, Any]:
        response = await self._request("GET", f"/sobjects/{sobject}/describe")
        return response.json()

    async def aclose(self) -> None:
        await self._http.aclose()


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_client: CRMClient | None = None


def init_crm_client(cfg: Settings) -> CRMClient:
    """Initialise the singleton (called once from app lifespan)."""
    global _client  # noqa: PLW0603
    if cfg.MOCK_SALESFORCE:
        from .mock import MockSalesforceClient

        _client = MockSalesforceClient()
        logger.info("CRM client initialised (mock)")
        return _client

    http = httpx.AsyncClient(timeout=cfg.SF_HTTP_TIMEOUT)
    tokens = SalesforceTokenCache(
        http,
        login_url=cfg.SF_LOGIN_URL,
        consumer_key=cfg.SF_CONSUMER_KEY,
        consumer_secret=cfg.SF_CONSUMER_SECRET,
        ttl_seconds=cfg.SF_TOKEN_TTL_SECONDS,
        refresh_margin_seconds=cfg.SF_TOKEN_REFRESH_MARGIN_SECONDS,
    )
    _client = SalesforceClient(http, tokens, api_version=cfg.SF_API_VERSION)
    logger.info("CRM client initialised (login_url=%s, api=%s)", cfg.SF_LOGIN_URL, cfg.SF_API_VERSION)
    return _client


def get_crm_client() -> CRMClient:
    """Return the initialised CRM client singleton."""
    if _client is None:
        raise RuntimeError("CRM client not initialised -- call init_crm_client() first")
    return _client


async def close_crm_client() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
