#!/usr/bin/env python3
"""
Smoke test for the chat path:
- Context assembly (subject + agenda)
- Gateway login, send, 401 -> refresh -> retry
- Chat session bookkeeping (context sent once, gateway session id reused)

Set USE_FAKES=0 to talk to the Mabot gateway configured in the environment.
Expects a migrated database (alembic upgrade head).
"""

import os
import sys
import json
from datetime import date, timedelta
from pathlib import Path

# Make "backend" importable
backend_dir = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(backend_dir))

import httpx

from cuaderno.clients.mabot_client import GatewayConfig, GatewayCredentialsStore, MabotClient
from cuaderno.database import get_db_context
from cuaderno.repositories import (
    GoalRepository, MaterialRepository, ProgramRepository, SubjectRepository, UserRepository,
)
from cuaderno.schemas.user import UserCreate
from cuaderno.services.chat_service import ChatSessionManager
from cuaderno.services.context_service import ContextAssembler
from cuaderno.services.local_store import LocalStore


USE_FAKES = os.getenv("USE_FAKES", "1") == "1"
SMOKE_EMAIL = "smoke_chat@example.com"

# ---------- Fake gateway ----------
class _FakeGateway:
    """Answers like the real gateway; rejects the first /io/input with 401 to exercise refresh."""

    def __init__(self):
        self.calls = []
        self._rejected_once = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append(path)
        if path.endswith("/auth/login"):
            return httpx.Response(200, json={"access_token": "a1", "refresh_token": "r1"})
        if path.endswith("/auth/refresh"):
            return httpx.Response(200, json={"access_token": "a2", "refresh_token": "r2"})
        if path.endswith("/io/input"):
            if not self._rejected_once:
                self._rejected_once = True
                return httpx.Response(401, json={"detail": "expired"})
            body = json.loads(request.content)
            last = body["messages"][-1]["contents"][0]["value"]
            return httpx.Response(200, json={
                "chat_id": body.get("chat_id") or "gw-1",
                "messages": [{"role": "assistant", "contents": [{"type": "text", "value": f"Echo: {last}"}]}],
            })
        return httpx.Response(404)

# ---------- Wiring helpers ----------
def make_client(store: LocalStore):
    creds = GatewayCredentialsStore(store)
    if USE_FAKES:
        fake = _FakeGateway()
        config = GatewayConfig(base_url="http://mabot.test", username="smoke", password="smoke")
        http = httpx.Client(transport=httpx.MockTransport(fake))
        return MabotClient(config, creds, http_client=http), fake
    return MabotClient(GatewayConfig.resolve(store), creds), None

def seed(db):
    users = UserRepository()
    user = users.get_by_email(db, SMOKE_EMAIL) or users.create(
        db, UserCreate(email=SMOKE_EMAIL, password_hash="!", full_name="Smoke Tester")
    )
    program = ProgramRepository().create_owned(db, user.id, {"name": "Smoke Degree"})
    subject = SubjectRepository().create_owned(db, user.id, {"name": "Biology", "program_id": program.id})
    MaterialRepository().create_owned(db, user.id, {
        "subject_id": subject.id, "title": "Cells", "type": "notes",
        "content": "Cells are the basic unit of life.",
    })
    monday = date.today() - timedelta(days=date.today().weekday())
    GoalRepository().create_owned(db, user.id, {
        "subject_id": subject.id, "target_hours": 5, "current_hours": 3,
        "week_start": monday, "week_end": monday + timedelta(days=6),
    })
    return user, subject

# ---------- Checks ----------
def test_context_assembly(db, user, subject):
    print("📚 Context assembly")
    assembler = ContextAssembler()
    subject_ctx = assembler.assemble_subject_context(db, user.id, subject.id)
    agenda_ctx = assembler.assemble_agenda_context(db, user.id)
    print("  " + subject_ctx.replace("\n", "\n  ")[:300])
    print("  " + agenda_ctx.replace("\n", "\n  ")[:300])
    assert "Cells" in subject_ctx
    assert "Biology: 3/5h" in agenda_ctx
    print("✅ Context OK\n")

def test_chat_turns(db, user, subject):
    print("💬 Chat turns")
    store = LocalStore()
    client, fake = make_client(store)
    manager = ChatSessionManager(ContextAssembler(), client)
    chat = manager.start_subject_chat(subject.id, subject.name, "cells")

    for text in ["What is a cell?", "And a tissue?"]:
        reply, ok = manager.send_user_message(db, chat.id, text, user_id=user.id, display_name="Smoke Tester")
        print(f"  U: {text!r}\n  A: {reply.text[:90]!r} (ok={ok})\n")
        assert ok, reply.text

    assert chat.context_uploaded
    assert chat.gateway_session_id
    assert len(chat.messages) == 5, "greeting + 2 user + 2 assistant"
    if fake is not None:
        print(f"  Gateway calls: {fake.calls}")
        assert fake.calls.count("/auth/refresh") == 1
    client.close()
    print("✅ Chat OK\n")

def main():
    print("🚀 Smoke testing chat (USE_FAKES=%s)" % ("1" if USE_FAKES else "0"))
    print("=" * 52)
    with get_db_context() as db:
        user, subject = seed(db)
        test_context_assembly(db, user, subject)
        test_chat_turns(db, user, subject)
    print("🎉 All chat smoke tests passed!")

if __name__ == "__main__":
    main()
