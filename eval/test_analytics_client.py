"""Tests for the analytics client and its config file."""
import json
import unittest.mock as mock
import urllib.error
import urllib.parse

import pytest

from pdk import __version__
from pdk.analytics.client import Client
from pdk.analytics.config import AnalyticsConfig, load_config, save_config
from pdk.errors import AnalyticsError


# ── Helpers ──────────────────────────────────────────────────────────


def _response(status):
    resp = mock.MagicMock()
    resp.status = status
    resp.__enter__.return_value = resp
    return resp


def _sent_fields(urlopen):
    req = urlopen.call_args[0][0]
    return dict(urllib.parse.parse_qsl(req.data.decode("utf-8")))


# ── Client ───────────────────────────────────────────────────────────


def test_build_hit_fields():
    client = Client(AnalyticsConfig(user_id="abc-123"), tracking_id="UA-1")

    hit = client.build_hit("build", {"cd1": "module"})

    assert hit["t"] == "screenview"
    assert hit["cd"] == "build"
    assert hit["cid"] == "abc-123"
    assert hit["tid"] == "UA-1"
    assert hit["av"] == __version__
    assert hit["cd1"] == "module"


def test_screenview_posts_form():
    client = Client(AnalyticsConfig(user_id="abc-123"), endpoint="https://example.test/collect")

    with mock.patch("urllib.request.urlopen", return_value=_response(200)) as urlopen:
        client.screenview("validate", {})

    req = urlopen.call_args[0][0]
    assert req.full_url == "https://example.test/collect"
    assert req.get_method() == "POST"
    fields = _sent_fields(urlopen)
    assert fields["cd"] == "validate"
    assert fields["cid"] == "abc-123"


def test_disabled_client_sends_nothing():
    client = Client(AnalyticsConfig(disabled=True))

    with mock.patch("urllib.request.urlopen") as urlopen:
        client.screenview("build", {})

    urlopen.assert_not_called()


def test_transport_failure_raises_analytics_error():
    client = Client(AnalyticsConfig())

    with mock.patch("urllib.request.urlopen", side_effect=urllib.error.URLError("offline")):
        with pytest.raises(AnalyticsError):
            client.screenview("build", {})


def test_non_2xx_raises_analytics_error():
    client = Client(AnalyticsConfig())

    with mock.patch("urllib.request.urlopen", return_value=_response(500)):
        with pytest.raises(AnalyticsError, match="HTTP 500"):
            client.screenview("build", {})


# ── Config ───────────────────────────────────────────────────────────


def test_first_load_creates_config(tmp_path, monkeypatch):
    monkeypatch.delenv("PDK_DISABLE_ANALYTICS", raising=False)
    path = tmp_path / "pdk" / "analytics.json"

    cfg = load_config(str(path))

    assert cfg.disabled is False
    assert cfg.user_id
    saved = json.loads(path.read_text())
    assert saved["user_id"] == cfg.user_id
    assert load_config(str(path)).user_id == cfg.user_id


def test_saved_opt_out_is_honoured(tmp_path, monkeypatch):
    monkeypatch.delenv("PDK_DISABLE_ANALYTICS", raising=False)
    path = tmp_path / "analytics.json"
    save_config(AnalyticsConfig(disabled=True, user_id="u1"), str(path))

    cfg = load_config(str(path))

    assert cfg.disabled is True
    assert cfg.user_id == "u1"


@pytest.mark.parametrize("value,disabled", [("1", True), ("true", True), ("0", False), ("", False)])
def test_env_var_disables(tmp_path, monkeypatch, value, disabled):
    monkeypatch.setenv("PDK_DISABLE_ANALYTICS", value)

    cfg = load_config(str(tmp_path / "analytics.json"))

    assert cfg.disabled is disabled


def test_malformed_config_falls_back(tmp_path, monkeypatch):
    monkeypatch.delenv("PDK_DISABLE_ANALYTICS", raising=False)
    path = tmp_path / "analytics.json"
    path.write_text("{not json")

    cfg = load_config(str(path))

    assert cfg.disabled is False
    assert cfg.user_id


def test_non_utf8_config_falls_back(tmp_path, monkeypatch):
    """A corrupt file must not stop the CLI from starting."""
    monkeypatch.delenv("PDK_DISABLE_ANALYTICS", raising=False)
    path = tmp_path / "analytics.json"
    path.write_bytes(b'{"user_id": "\xff\xfe"}')

    cfg = load_config(str(path))

    assert cfg.disabled is False
    assert cfg.user_id


def test_malformed_config_is_repaired(tmp_path, monkeypatch):
    """The fresh user id is saved so it stays the same on the next run."""
    monkeypatch.delenv("PDK_DISABLE_ANALYTICS", raising=False)
    path = tmp_path / "analytics.json"
    path.write_text("{not json")

    first = load_config(str(path))
    second = load_config(str(path))

    assert second.user_id == first.user_id
    assert json.loads(path.read_text())["user_id"] == first.user_id


def test_missing_user_id_is_added_and_opt_out_kept(tmp_path, monkeypatch):
    monkeypatch.delenv("PDK_DISABLE_ANALYTICS", raising=False)
    path = tmp_path / "analytics.json"
    path.write_text(json.dumps({"disabled": True}))

    cfg = load_config(str(path))

    saved = json.loads(path.read_text())
    assert cfg.disabled is True
    assert saved == {"disabled": True, "user_id": cfg.user_id}


def test_config_path_env_override(tmp_path, monkeypatch):
    path = tmp_path / "custom.json"
    monkeypatch.setenv("PDK_ANALYTICS_CONFIG", str(path))
    monkeypatch.delenv("PDK_DISABLE_ANALYTICS", raising=False)

    load_config()

    assert path.exists()
