from core.config import Config
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, redact_url, write_cli_log


def test_write_cli_log_appends_key_values(tmp_path):
    log_file = tmp_path / "logs" / "proxy.log"

    write_cli_log("RELAY", "GET https://api.test/", log_file=log_file, route="proxy")
    write_cli_log("ERROR", "timed out", log_file=log_file, route="proxy", status=503)

    lines = log_file.read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("RELAY: GET https://api.test/ route=proxy")
    assert lines[1].endswith("ERROR: timed out route=proxy status=503")


def test_clear_logs(tmp_path):
    log_file = tmp_path / "proxy.log"
    log_file.write_text("old\n")

    clear_logs(log_file)

    assert log_file.read_text() == ""


def test_redact_url_masks_credentials():
    redacted = redact_url("https://api.test/data?api_key=abcdef1234567890&page=2")

    assert "abcdef1234567890" not in redacted
    assert "page=2" in redacted


def test_redact_url_without_query_is_unchanged():
    assert redact_url("https://api.test/data") == "https://api.test/data"


def test_dashboard_tracks_relay_status(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("ui.dashboard.write_cli_log", lambda *args, **kwargs: None)
    dashboard = Dashboard(Config())

    dashboard.log_request("GET", "https://api.test/", route="proxy", request_id="r1")
    dashboard.log_error("proxy", 503, "Upstream timed out after 30s", request_id="r1")

    assert dashboard._counts == {"requests": 1, "ok": 0, "failed": 1}
    assert dashboard._relays[0].status == 503
    assert dashboard._errors == ["proxy 503: Upstream timed out after 30s"]


def test_dashboard_completes_the_matching_relay(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("ui.dashboard.write_cli_log", lambda *args, **kwargs: None)
    dashboard = Dashboard(Config())

    dashboard.log_request("GET", "https://api.test/slow", route="proxy", request_id="older")
    dashboard.log_request("GET", "https://api.test/fast", route="proxy", request_id="newer")
    dashboard.log_response("proxy", 200, request_id="older")

    statuses = {relay.request_id: relay.status for relay in dashboard._relays}
    assert statuses == {"older": 200, "newer": None}
