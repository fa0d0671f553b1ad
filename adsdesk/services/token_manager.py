"""AdsDesk — Access Token Lifecycle.

Upgrades short-lived user tokens to long-lived ones when app credentials are
configured, and works out when the resulting token expires.
"""

import time
from typing import Optional, Tuple

from adsdesk.connectors.meta.endpoints import MetaEndpoints
from adsdesk.connectors.meta.errors import GraphAPIError
from adsdesk.core.coercion import coerce_int
from adsdesk.core.logging import get_logger

logger = get_logger("services.token_manager")

LONG_LIVED_DEFAULT_SECONDS = 60 * 24 * 60 * 60


def _now_ms() -> int:
    return int(time.time() * 1000)


async def token_expiry_ms(endpoints: MetaEndpoints, access_token: str) -> Optional[int]:
    """Expiry in epoch milliseconds from debug_token, or None if unknown."""
    try:
        info = await endpoints.get_token_info(access_token)
    except GraphAPIError as e:
        logger.warning(f"Could not read token info: {e}")
        return None
    expires_at = coerce_int(info.get("expires_at"))
    return expires_at * 1000 if expires_at else None


async def exchange_for_long_lived(
    endpoints: MetaEndpoints, short_lived_token: str
) -> Tuple[str, Optional[int]]:
    """Exchange a token and return ``(token, expires_at_ms)``.

    Raises GraphAPIError if the exchange itself fails.
    """
    app = endpoints.settings
    long_lived = await endpoints.exchange_long_lived_token(
        short_lived_token, app.facebook_app_id, app.facebook_app_secret
    )
    token = long_lived.get("access_token") or short_lived_token
    expires_at = await token_expiry_ms(endpoints, token)
    if expires_at is None:
        expires_in = coerce_int(long_lived.get("expires_in"))
        expires_at = _now_ms() + (expires_in or LONG_LIVED_DEFAULT_SECONDS) * 1000
    return token, expires_at


async def prepare_token(
    endpoints: MetaEndpoints, access_token: str
) -> Tuple[str, Optional[int]]:
    """Best token available for storage, plus its expiry.

    Falls back to the original short-lived token when app credentials are
    missing or the exchange fails.
    """
    if endpoints.settings.has_app_credentials:
        try:
            return await exchange_for_long_lived(endpoints, access_token)
        except GraphAPIError as e:
            logger.warning(f"Could not exchange for long-lived token: {e}")
    else:
        logger.warning("Facebook app credentials not configured; keeping short-lived token")
    return access_token, await token_expiry_ms(endpoints, access_token)
