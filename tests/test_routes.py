"""
HTTP-level tests: routes wired against mocked Graph and Bot APIs.
"""
import httpx
import pytest
from fastapi.testclient import TestClient

from adsdesk.main import app
from adsdesk.models.account_models import StoredAccount
from adsdesk.services.account_store import AccountStore

from conftest import telegram_notifier


def bot_api(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"ok": True})


@pytest.fixture
def store(test_settings):
    return AccountStore(test_settings.accounts_file)


@pytest.fixture
def client(endpoints, store, test_settings):
    app.state.endpoints = endpoints
    app.state.account_store = store
    app.state.notifier = telegram_notifier(bot_api, test_settings)
    return TestClient(app)


def add_stored(store, account_id="act_1", token="stored-token"):
    store.add(
        StoredAccount(id=f"stored_{account_id}", account_id=account_id, access_token=token)
    )


class TestHealth:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"


class TestCampaignRoutes:

    def test_missing_account_id(self, client):
        resp = client.get("/campaigns")
        assert resp.status_code == 400

    def test_missing_token(self, client):
        resp = client.get("/campaigns", params={"accountId": "act_1"})
        assert resp.status_code == 401
        assert "Access token not found" in resp.json()["detail"]["error"]

    def test_list_uses_stored_token(self, client, graph, store):
        add_stored(store)
        graph.add("act_1/campaigns", {"data": [{"id": "c1", "objective": "OUTCOME_SALES", "daily_budget": "50000000"}]})
        graph.add("act_1", {"id": "act_1", "timezone_name": "Asia/Ho_Chi_Minh"})
        graph.add("c1/insights", {"data": [{"spend": "12", "actions": [{"action_type": "omni_purchase", "value": "3"}]}]})
        resp = client.get("/campaigns", params={"accountId": "act_1", "datePreset": "last_7d"})
        assert resp.status_code == 200
        campaign = resp.json()[0]
        assert campaign["daily_budget"] == 500000.0
        assert campaign["spend"] == 12.0
        assert campaign["results"] == 3
        assert graph.params_for("c1/insights")[0]["date_preset"] == "last_7d"
        assert graph.params_for("act_1/campaigns")[0]["access_token"] == "stored-token"

    def test_token_expiry_is_401(self, client, graph):
        graph.add(
            "act_1/campaigns",
            {"error": {"message": "Error validating access token: Session has expired", "code": 190, "type": "OAuthException"}},
            400,
        )
        resp = client.get("/campaigns", params={"accountId": "act_1", "accessToken": "tok"})
        assert resp.status_code == 401
        detail = resp.json()["detail"]
        assert detail["token_expired"] is True
        assert detail["code"] == 190

    def test_generic_upstream_error_is_502(self, client, graph):
        graph.add("act_1/campaigns", {"error": {"message": "Rate limited", "code": 17}}, 400)
        resp = client.get("/campaigns", params={"accountId": "act_1", "accessToken": "tok"})
        assert resp.status_code == 502
        assert resp.json()["detail"]["token_expired"] is False

    def test_custom_range(self, client, graph):
        graph.add("act_1/campaigns", {"data": [{"id": "c1"}]})
        graph.add("act_1", {"id": "act_1"})
        graph.add("c1/insights", {"data": []})
        resp = client.get(
            "/campaigns",
            params={
                "accountId": "act_1",
                "accessToken": "tok",
                "datePreset": "custom",
                "startDate": "2024-03-01",
                "startTime": "00:00",
                "endDate": "2024-03-05",
                "endTime": "23:59",
            },
        )
        assert resp.status_code == 200
        assert "time_range" in graph.params_for("c1/insights")[0]

    def test_invalid_custom_range_makes_no_upstream_call(self, client, graph):
        resp = client.get(
            "/campaigns",
            params={
                "accountId": "act_1",
                "accessToken": "tok",
                "startDate": "2024-13-01",
                "startTime": "08:00",
                "endDate": "2024-03-10",
                "endTime": "09:00",
            },
        )
        assert resp.status_code == 400
        assert graph.requests == []

    @pytest.mark.parametrize(
        "timezone_name, window_param",
        [("America/New_York", "time_range"), ("Asia/Ho_Chi_Minh", "date_preset")],
    )
    def test_detail_translates_for_foreign_accounts(
        self, client, graph, timezone_name, window_param
    ):
        graph.add("c1", {"id": "c1", "objective": "OUTCOME_SALES"})
        graph.add("act_1", {"id": "act_1", "timezone_name": timezone_name})
        graph.add("c1/insights", {"data": []})
        resp = client.get(
            "/campaigns/c1",
            params={"accountId": "act_1", "accessToken": "tok", "datePreset": "yesterday"},
        )
        assert resp.status_code == 200
        assert "timeSeries" in resp.json()
        sent = graph.params_for("c1/insights")
        assert len(sent) == 2
        assert all(window_param in params for params in sent)

    def test_detail_without_account_uses_preset(self, client, graph):
        graph.add("c1", {"id": "c1"})
        graph.add("c1/insights", {"data": []})
        resp = client.get("/campaigns/c1", params={"accessToken": "tok", "datePreset": "yesterday"})
        assert resp.status_code == 200
        assert graph.params_for("c1/insights")[0]["date_preset"] == "yesterday"

    def test_echo_stubs(self, client):
        assert client.post("/campaigns", json={"name": "New"}).json()["campaign"] == {"name": "New"}
        assert client.delete("/campaigns/c1").json()["id"] == "c1"


class TestInsightRoutes:

    def test_aggregate_without_accounts(self, client):
        resp = client.get("/insights")
        assert resp.status_code == 200
        assert resp.json()["impressions"] == 0

    def test_account_insights_with_series(self, client, graph):
        def insights(request):
            if "time_increment" in request.url.params:
                return httpx.Response(200, json={"data": [{"date_start": "2024-03-01", "date_stop": "2024-03-01", "spend": "4"}]})
            return httpx.Response(200, json={"data": [{"spend": "4", "impressions": "10"}]})

        graph.add("act_1/insights", insights)
        resp = client.get("/insights", params={"accountId": "act_1", "accessToken": "tok"})
        body = resp.json()
        assert body["spend"] == 4.0
        assert body["timeSeries"][0]["date_start"] == "2024-03-01"


class TestAccountRoutes:

    def test_empty_list(self, client):
        assert client.get("/accounts").json() == []

    def test_add_requires_act_prefix(self, client):
        resp = client.post("/accounts", json={"accountId": "123", "accessToken": "tok"})
        assert resp.status_code == 400

    def test_add_rejects_duplicates(self, client, store):
        add_stored(store)
        resp = client.post("/accounts", json={"accountId": "act_1", "accessToken": "tok"})
        assert resp.status_code == 400

    def test_add_verifies_and_stores(self, client, graph, store):
        graph.add("debug_token", {"data": {"expires_at": 1700000000}})
        graph.add("act_9", {"id": "act_9", "name": "New Shop"})
        resp = client.post("/accounts", json={"accountId": "act_9", "accessToken": "tok"})
        assert resp.status_code == 200
        assert resp.json()["tokenExpiresAt"] == 1700000000000
        saved = store.get_by_account_id("act_9")
        assert saved.name == "New Shop"
        assert saved.id.startswith("stored_")

    def test_get_unknown_is_404(self, client):
        assert client.get("/accounts/act_404").status_code == 404

    def test_update_token(self, client, graph, store):
        add_stored(store)
        graph.add("debug_token", {"data": {}})
        graph.add("act_1", {"id": "act_1"})
        resp = client.put("/accounts/act_1/token", json={"accessToken": "fresh"})
        assert resp.status_code == 200
        assert store.resolve("act_1") == "fresh"

    def test_refresh_requires_app_credentials(self, client, store):
        add_stored(store)
        assert client.post("/accounts/act_1/refresh-token").status_code == 400

    def test_delete(self, client, store):
        add_stored(store)
        assert client.delete("/accounts/stored_act_1").json()["success"] is True
        assert store.all() == []


class TestTelegramRoutes:

    def test_missing_fields(self, client):
        assert client.post("/telegram/test", json={"token": "t"}).status_code == 400

    def test_report(self, client):
        resp = client.post(
            "/telegram/report",
            json={"token": "t", "chatId": "1", "title": "Daily", "message": "ok"},
        )
        assert resp.json() == {"success": True}
