"""AdsDesk — Auth Routes.

Page and ad account discovery for a user token, plus token introspection.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from adsdesk.api.deps import get_endpoints, raise_http
from adsdesk.connectors.meta.endpoints import MetaEndpoints
from adsdesk.connectors.meta.errors import GraphAPIError, MalformedInputError

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/pages")
async def list_pages(
    user_access_token: Optional[str] = Query(None, alias="userAccessToken"),
    endpoints: MetaEndpoints = Depends(get_endpoints),
):
    if not user_access_token:
        raise_http(MalformedInputError("userAccessToken is required"))
    try:
        return await endpoints.get_pages(user_access_token)
    except (GraphAPIError, MalformedInputError) as e:
        raise_http(e)


@router.get("/pages/{page_id}/ad-accounts")
async def list_page_ad_accounts(
    page_id: str,
    user_access_token: Optional[str] = Query(None, alias="userAccessToken"),
    access_token: Optional[str] = Query(None, alias="accessToken"),
    endpoints: MetaEndpoints = Depends(get_endpoints),
):
    token = user_access_token or access_token
    if not token:
        raise_http(MalformedInputError("userAccessToken or accessToken is required"))
    try:
        return await endpoints.get_page_ad_accounts(page_id, token)
    except (GraphAPIError, MalformedInputError) as e:
        raise_http(e)


@router.get("/token-info")
async def token_info(
    access_token: Optional[str] = Query(None, alias="accessToken"),
    endpoints: MetaEndpoints = Depends(get_endpoints),
):
    if not access_token:
        raise_http(MalformedInputError("accessToken is required"))
    try:
        return await endpoints.get_token_info(access_token)
    except (GraphAPIError, MalformedInputError) as e:
        raise_http(e)
