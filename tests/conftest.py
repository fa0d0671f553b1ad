"""
Pytest configuration for AdsDesk tests.

Graph API and Telegram traffic is served by ``httpx.MockTransport`` handlers,
so no test touches the network.
"""
import json
from typing import Callable, Dict, List
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from adsdesk.config import Settings
from adsdesk.connectors.meta.client import MetaClient
from adsdesk.connectors.meta.endpoints import MetaEndpoints
from adsdesk.services.telegram import TelegramNotifier

GRAPH = "https://graph.test/v18.0"


@pytest.fixture
def test_settings(tmp_path):
    """Settings isolated from the developer's .env."""
    return Settings(
        _env_file=None,
        meta_base_url="https://graph.test",
        meta_api_version="v18.0",
        telegram_api_base="https://telegram.test",
        accounts_file=str(tmp_path / "accounts.json"),
    )


@pytest.fixture
def app_settings(tmp_path):
    """Settings with Facebook app credentials configured."""
    return Settings(
        _env_file=None,
        meta_base_url="https://graph.test",
        meta_api_version="v18.0",
        facebook_app_id="app-id",
        facebook_app_secret="app-secret",
        accounts_file=str(tmp_path / "accounts.json"),
    )


class GraphRecorder:
    """Routes requests by URL path to canned responses and records them."""

    def __init__(self):
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path: str, body=None, status_code: int = 200):
        if callable(body):
            self.routes[path] = body
        else:
            self.routes[path] = lambda request: httpx.Response(status_code, json=body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.split("/v18.0/", 1)[-1]
        handler = self.routes.get(path)
        if handler is None:
            return httpx.Response(
                404,
                json={"error": {"message": f"Unknown path {path}", "code": 803}},
            )
        return handler(request)

    def params_for(self, path: str) -> List[Dict[str, str]]:
        """Query params of every recorded request to ``path``."""
        found = []
        for request in self.requests:
            if request.url.path.endswith(f"/{path}"):
                query = parse_qs(urlparse(str(request.url)).query)
                found.append({k: v[0] for k, v in query.items()})
        return found


@pytest.fixture
def graph():
    return GraphRecorder()


@pytest.fixture
def endpoints(graph, test_settings):
    client = MetaClient(
        httpx.AsyncClient(transport=httpx.MockTransport(graph)), test_settings
    )
    return MetaEndpoints(client)


@pytest.fixture
def app_endpoints(graph, app_settings):
    client = MetaClient(
        httpx.AsyncClient(transport=httpx.MockTransport(graph)), app_settings
    )
    return MetaEndpoints(client)


def telegram_notifier(handler, settings) -> TelegramNotifier:
    return TelegramNotifier(
        httpx.AsyncClient(transport=httpx.MockTransport(handler)), settings
    )


def json_body(request: httpx.Request) -> dict:
    return json.loads(request.content.decode("utf-8"))
