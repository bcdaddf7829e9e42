"""Fixed-target routes such as GET /getLeaderboard."""

import httpx

from core.config import Config, FixedRouteSettings, ProxySettings
from core.headers import HeaderBuilder
from services.relay_service import RelayService

LEADERBOARD_URL = "https://api.jsonbin.test/v3/b/leaderboard/latest"


def leaderboard_config(**overrides) -> Config:
    route = FixedRouteSettings(
        path="/getLeaderboard",
        url=LEADERBOARD_URL,
        secret_header="X-Master-Key",
        secret_name="jsonbin_master_key",
        error_message="Failed to fetch leaderboard.",
        **overrides,
    )
    return Config(fixed_routes=[route])


def test_relays_raw_json_with_secret_header(make_client, logger):
    payload = {"record": {"players": [{"name": "ana", "score": 30}]}}
    client, calls = make_client(
        lambda request: httpx.Response(200, json=payload),
        config=leaderboard_config(),
        secrets={"jsonbin_master_key": "s3cr3t-value"},
    )

    r = client.get("/getLeaderboard")

    assert r.status_code == 200
    assert r.json() == payload
    assert len(calls) == 1
    assert str(calls[0].url) == LEADERBOARD_URL
    assert calls[0].headers["x-master-key"] == "s3cr3t-value"
    assert calls[0].extensions["timeout"]["read"] == 15.0
    assert logger.responses == [("/getLeaderboard", 200)]


def test_caller_cannot_choose_target(make_client):
    client, calls = make_client(
        config=leaderboard_config(),
        secrets={"jsonbin_master_key": "k"},
    )

    client.get("/getLeaderboard", params={"url": "https://evil.test/"}, headers={"Authorization": "x"})

    assert str(calls[0].url) == LEADERBOARD_URL
    assert "authorization" not in calls[0].headers


def test_missing_secret_fails_without_upstream_call(make_client, logger):
    client, calls = make_client(config=leaderboard_config())

    r = client.get("/getLeaderboard")

    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch leaderboard."}
    assert calls == []
    assert logger.errors[0][:2] == ("/getLeaderboard", 500)


def test_upstream_failures_collapse_to_500(make_client):
    client, _ = make_client(
        lambda request: httpx.Response(401, json={"message": "bad key"}),
        config=leaderboard_config(),
        secrets={"jsonbin_master_key": "k"},
    )

    r = client.get("/getLeaderboard")

    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch leaderboard."}


def test_timeout_collapses_to_500(make_client):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client, _ = make_client(
        handler,
        config=leaderboard_config(),
        secrets={"jsonbin_master_key": "k"},
    )

    r = client.get("/getLeaderboard")

    assert r.status_code == 500


def test_non_json_body_is_502_when_json_required(make_client):
    client, _ = make_client(
        lambda request: httpx.Response(200, text="<html>maintenance</html>"),
        config=leaderboard_config(require_json=True),
        secrets={"jsonbin_master_key": "k"},
    )

    r = client.get("/getLeaderboard")

    assert r.status_code == 502
    assert "non-JSON" in r.json()["error"]


def test_non_json_body_passes_through_by_default(make_client):
    client, _ = make_client(
        lambda request: httpx.Response(200, text="ok", headers={"content-type": "text/plain"}),
        config=leaderboard_config(),
        secrets={"jsonbin_master_key": "k"},
    )

    r = client.get("/getLeaderboard")

    assert r.status_code == 200
    assert r.text == "ok"


def test_spoofed_browser_user_agent_and_static_headers(make_client):
    route = FixedRouteSettings(
        path="/getLeaderboard",
        url="https://games.test/leaderboard",
        headers={"Accept": "application/json"},
        spoof_browser=True,
    )
    client, calls = make_client(config=Config(fixed_routes=[route]))

    r = client.get("/getLeaderboard")

    assert r.status_code == 200
    assert calls[0].headers["user-agent"].startswith("Mozilla/5.0")
    assert calls[0].headers["accept"] == "application/json"


def test_fixed_only_deployment_hides_generic_relay(make_client):
    config = leaderboard_config()
    config = config.model_copy(update={"proxy": ProxySettings(enable_generic=False)})
    client, calls = make_client(config=config, secrets={"jsonbin_master_key": "k"})

    r = client.get("/api/proxy", params={"url": "https://api.test/"})

    assert r.status_code == 404
    assert "GET /getLeaderboard" in r.json()["availableEndpoints"]
    assert "POST /api/proxy" not in r.json()["availableEndpoints"]
    assert calls == []


def test_relay_service_prepares_fixed_route():
    config = leaderboard_config()
    service = RelayService(config, HeaderBuilder(config.relay), {"jsonbin_master_key": "s3cret"}.get)

    prepared = service.prepare_fixed("/getLeaderboard")

    assert prepared.route_name == "/getLeaderboard"
    assert prepared.method == "GET"
    assert prepared.target_url == LEADERBOARD_URL
    assert prepared.headers["X-Master-Key"] == "s3cret"
