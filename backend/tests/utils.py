import json

import httpx
from fastapi.testclient import TestClient


def assistant_reply(*texts, chat_id="gw-1"):
    return {
        "chat_id": chat_id,
        "messages": [{"role": "assistant", "contents": [{"type": "text", "value": t}]} for t in texts],
    }


class FakeGateway:
    """
    httpx.MockTransport handler that behaves like the Mabot gateway.

    Queue entries in input_replies to script /io/input: a (status, body) tuple,
    a ready httpx.Response, or an exception to raise.
    """

    def __init__(self):
        self.requests = []
        self.login_status = 200
        self.refresh_status = 200
        self.input_replies = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/auth/login":
            if self.login_status != 200:
                return httpx.Response(self.login_status, json={"detail": "bad credentials"})
            return httpx.Response(200, json={"access_token": "access-login", "refresh_token": "refresh-login"})
        if path == "/auth/refresh":
            if self.refresh_status != 200:
                return httpx.Response(self.refresh_status, json={"detail": "expired"})
            return httpx.Response(200, json={"access_token": "access-refreshed", "refresh_token": "refresh-refreshed"})
        if path == "/io/input":
            if not self.input_replies:
                return httpx.Response(200, json=assistant_reply("Hello"))
            reply = self.input_replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
            if isinstance(reply, httpx.Response):
                return reply
            status, body = reply
            return httpx.Response(status, json=body)
        return httpx.Response(404)

    def calls(self, path: str):
        return [r for r in self.requests if r.url.path == path]

    def input_bodies(self):
        return [json.loads(r.content) for r in self.calls("/io/input")]


def signup(api: TestClient, email: str = "ana@example.com", password: str = "secret123", full_name: str = "Ana") -> dict:
    res = api.post("/auth/signup", json={"email": email, "password": password, "full_name": full_name})
    assert res.status_code == 201, res.text
    return {"Authorization": f"Bearer {res.json()['access_token']}"}
