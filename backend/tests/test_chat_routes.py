import pytest

from cuaderno.clients.mabot_client import CONFIG_KEYS
from cuaderno.config import settings
from tests.utils import signup


@pytest.fixture()
def subject_id(api, auth_headers):
    program = api.post("/programs", json={"name": "BSc Biology"}, headers=auth_headers).json()
    return api.post("/subjects", json={"name": "Biology", "program_id": program["id"]}, headers=auth_headers).json()["id"]


def test_start_subject_chat_and_send(api, auth_headers, subject_id, gateway):
    started = api.post("/chat/sessions/subject", json={"subject_id": subject_id, "topic": "cells"}, headers=auth_headers)
    assert started.status_code == 201, started.text
    chat = started.json()
    assert chat["title"] == "Biology"
    assert chat["is_current"] is True
    assert "cells" in chat["messages"][0]["text"]

    res = api.post(f"/chat/sessions/{chat['id']}/messages", json={"message": "What is a cell?"}, headers=auth_headers)

    assert res.status_code == 200, res.text
    body = res.json()
    assert body["ok"] is True
    assert body["reply"]["text"] == "Hello"
    assert body["chat"]["message_count"] == 3
    assert body["chat"]["context_uploaded"] is True
    assert body["chat"]["gateway_session_id"] == "gw-1"
    assert "Student: Ana." in gateway.input_bodies()[0]["messages"][0]["contents"][0]["value"]


def test_gateway_failure_is_a_visible_reply_not_an_http_error(api, auth_headers, gateway):
    gateway.input_replies = [(503, {})]
    chat = api.post("/chat/sessions/agenda", headers=auth_headers).json()

    res = api.post(f"/chat/sessions/{chat['id']}/messages", json={"message": "Hi"}, headers=auth_headers)

    assert res.status_code == 200
    assert res.json()["ok"] is False
    assert res.json()["reply"]["text"].endswith("HTTP 503")
    assert res.json()["chat"]["context_uploaded"] is False


def test_blank_message_is_rejected(api, auth_headers):
    chat = api.post("/chat/sessions/agenda", headers=auth_headers).json()

    res = api.post(f"/chat/sessions/{chat['id']}/messages", json={"message": "   "}, headers=auth_headers)

    assert res.status_code == 422


def test_list_select_and_delete(api, auth_headers, subject_id):
    first = api.post("/chat/sessions/subject", json={"subject_id": subject_id}, headers=auth_headers).json()
    second = api.post("/chat/sessions/agenda", headers=auth_headers).json()

    listed = api.get("/chat/sessions", headers=auth_headers).json()
    assert [c["id"] for c in listed] == [first["id"], second["id"]]
    assert [c["is_current"] for c in listed] == [False, True]

    selected = api.post(f"/chat/sessions/{first['id']}/select", headers=auth_headers).json()
    assert selected["is_current"] is True

    assert api.delete(f"/chat/sessions/{first['id']}", headers=auth_headers).status_code == 204
    assert api.get(f"/chat/sessions/{first['id']}", headers=auth_headers).status_code == 404
    assert [c["is_current"] for c in api.get("/chat/sessions", headers=auth_headers).json()] == [False]


def test_chats_are_private_to_each_user(api, auth_headers):
    chat = api.post("/chat/sessions/agenda", headers=auth_headers).json()
    other = signup(api, email="ben@example.com")

    assert api.get("/chat/sessions", headers=other).json() == []
    assert api.get(f"/chat/sessions/{chat['id']}", headers=other).status_code == 404


def test_subject_chat_requires_owned_subject(api, auth_headers, subject_id):
    other = signup(api, email="ben@example.com")

    res = api.post("/chat/sessions/subject", json={"subject_id": subject_id}, headers=other)

    assert res.status_code == 404


def test_status_and_local_config_overrides(api, auth_headers, store, monkeypatch):
    monkeypatch.setattr(settings, "MABOT_BASE_URL", "")
    monkeypatch.setattr(settings, "MABOT_USERNAME", "")
    monkeypatch.setattr(settings, "MABOT_PASSWORD", "")

    updated = api.put("/chat/config", json={
        "base_url": "http://mabot.test", "username": "bot-user", "password": "bot-pass",
    }, headers=auth_headers)
    assert updated.status_code == 200
    assert updated.json() == {"configured": True, "warning": None}
    assert store.get(CONFIG_KEYS["base_url"]) == "http://mabot.test"

    status = api.get("/chat/status", headers=auth_headers).json()
    assert status["configured"] is True

    reset = api.delete("/chat/config", headers=auth_headers).json()
    assert reset["configured"] is False
    assert "MABOT_BASE_URL" in reset["warning"]
    assert store.get(CONFIG_KEYS["base_url"]) is None


def test_unconfigured_gateway_still_allows_chat_creation(api, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "MABOT_BASE_URL", "")
    api.delete("/chat/config", headers=auth_headers)
    chat = api.post("/chat/sessions/agenda", headers=auth_headers)
    assert chat.status_code == 201

    res = api.post(f"/chat/sessions/{chat.json()['id']}/messages", json={"message": "Hi"}, headers=auth_headers)

    assert res.json()["ok"] is False
    assert "Mabot not configured" in res.json()["reply"]["text"]


def test_health_reports_assistant_configuration(api):
    res = api.get("/healthz")

    assert res.status_code == 200
    assert res.json() == {"status": "ok", "assistant_configured": True}
