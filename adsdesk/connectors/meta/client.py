"""AdsDesk — Graph API Client.

Thin async wrapper over one shared ``httpx.AsyncClient``: builds URLs,
attaches the per-call access token, follows pagination, and turns every
failure into a classified GraphAPIError. No retries at this layer.
"""

import time
from typing import Any, Dict, List, Optional

import httpx

from adsdesk.config import Settings, settings as default_settings
from adsdesk.connectors.meta.errors import GraphAPIError, classify_error
from adsdesk.core.logging import get_logger

logger = get_logger("meta.client")


class MetaClient:
    """Async HTTP client for the Graph API.

    The underlying ``httpx.AsyncClient`` is injected so one connection pool
    can be shared for the application lifetime (and mocked in tests).
    """

    def __init__(
        self, http_client: httpx.AsyncClient, settings: Optional[Settings] = None
    ):
        self.settings = settings or default_settings
        self.base_url = self.settings.graph_base
        self._client = http_client

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    # ── Core Request Method ──

    async def request(
        self,
        path_or_url: str,
        params: Dict[str, Any] | None = None,
        access_token: str | None = None,
    ) -> Dict[str, Any]:
        """GET a Graph path (or absolute paging URL) and return the JSON body."""
        params = dict(params or {})
        if access_token is not None:
            params["access_token"] = access_token
        base = (
            path_or_url
            if path_or_url.startswith(("http://", "https://"))
            else self.url(path_or_url)
        )
        # Paging URLs already carry their query string; merge rather than replace.
        url = str(httpx.URL(base).copy_merge_params(params))

        started = time.perf_counter()
        try:
            resp = await self._client.get(url, timeout=self.settings.http_timeout)
        except httpx.RequestError as e:
            logger.warning(f"Request to {base} failed: {e}")
            raise classify_error(None, f"Connection failed: {e}") from e

        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        logger.debug(
            f"GET {url.split('?', 1)[0]} → {resp.status_code}",
            extra={"duration_ms": duration_ms, "status_code": resp.status_code},
        )

        body = self._json_body(resp)
        if resp.is_error:
            raise classify_error(
                body, f"HTTP {resp.status_code} from Graph API", resp.status_code
            )
        if isinstance(body, dict) and "error" in body:
            raise classify_error(body, status_code=resp.status_code)
        if not isinstance(body, dict):
            raise GraphAPIError("Unexpected non-object response from Graph API", resp.status_code)
        return body

    @staticmethod
    def _json_body(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            return {}

    # ── Pagination ──

    async def paginated_get(
        self,
        path: str,
        params: Dict[str, Any] | None = None,
        access_token: str | None = None,
        max_pages: int | None = None,
    ) -> List[Dict[str, Any]]:
        """Fetch all pages of a list edge."""
        all_data: List[Dict[str, Any]] = []
        current = path
        page_params: Dict[str, Any] | None = params

        for _ in range(max_pages or self.settings.max_pages):
            result = await self.request(current, page_params, access_token)
            all_data.extend(result.get("data") or [])

            next_url = (result.get("paging") or {}).get("next")
            if not next_url:
                break
            # The next URL already carries every query parameter, token included.
            current, page_params, access_token = next_url, None, None

        logger.info(f"Fetched {len(all_data)} records from {path}")
        return all_data
