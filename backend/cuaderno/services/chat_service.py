# cuaderno/services/chat_service.py
"""
In-memory chat sessions with the study assistant.

A ChatSessionManager owns one user's chats (subject chats and agenda chats),
their transcripts and the gateway session id each one maps to. Chats are not
persisted; they live as long as the process (or until the user signs out).
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Literal, Optional, Tuple
import logging
import threading
import time

from sqlalchemy.orm import Session

from cuaderno.clients.mabot_client import MabotClient
from cuaderno.services.context_service import ContextAssembler
from cuaderno.services.prompts import AGENDA_GREETING, subject_greeting

logger = logging.getLogger(__name__)

ERROR_PREFIX = "Error: failed to connect to the AI assistant."
EMPTY_REPLY = "..."


class ChatNotFoundError(LookupError):
    pass


class ChatBusyError(RuntimeError):
    """A message is already in flight for this chat."""


@dataclass(frozen=True)
class ChatMessage:
    id: str
    role: Literal["user", "assistant"]
    text: str
    timestamp: datetime


@dataclass
class ChatSession:
    id: str
    title: str
    context_type: Literal["subject", "agenda"]
    subject_id: Optional[int] = None
    subject_name: Optional[str] = None
    topic: Optional[str] = None
    messages: List[ChatMessage] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
    last_activity: datetime = field(default_factory=datetime.utcnow)
    gateway_session_id: Optional[str] = None
    context_uploaded: bool = False
    busy: bool = False


class _TimeIds:
    """Millisecond timestamps as ids, bumped when two are issued in the same millisecond."""

    def __init__(self):
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> str:
        with self._lock:
            now = int(time.time() * 1000)
            self._last = now if now > self._last else self._last + 1
            return str(self._last)


class ChatSessionManager:
    def __init__(self, assembler: ContextAssembler, client: MabotClient):
        self.assembler = assembler
        self.client = client
        self._chats: Dict[str, ChatSession] = {}
        self._current_id: Optional[str] = None
        self._ids = _TimeIds()
        self._lock = threading.Lock()

    # ---- lookup ----
    def list_chats(self) -> List[ChatSession]:
        """Chats in creation order."""
        return list(self._chats.values())

    def get_chat(self, chat_id: str) -> ChatSession:
        chat = self._chats.get(chat_id)
        if chat is None:
            raise ChatNotFoundError(chat_id)
        return chat

    @property
    def current(self) -> Optional[ChatSession]:
        return self._chats.get(self._current_id) if self._current_id else None

    def select_chat(self, chat_id: str) -> ChatSession:
        chat = self.get_chat(chat_id)
        self._current_id = chat.id
        return chat

    # ---- lifecycle ----
    def _append(self, chat: ChatSession, role: str, text: str) -> ChatMessage:
        msg = ChatMessage(id=self._ids.next(), role=role, text=text, timestamp=datetime.utcnow())
        chat.messages.append(msg)
        chat.last_activity = msg.timestamp
        return msg

    def _open(self, chat: ChatSession, greeting: str) -> ChatSession:
        self._append(chat, "assistant", greeting)
        self._chats[chat.id] = chat
        self._current_id = chat.id
        logger.info(f"Started {chat.context_type} chat {chat.id} ({chat.title})")
        return chat

    def start_subject_chat(self, subject_id: int, subject_name: str, topic: Optional[str] = None) -> ChatSession:
        topic = (topic or "").strip() or None
        chat = ChatSession(
            id=self._ids.next(),
            title=subject_name,
            context_type="subject",
            subject_id=subject_id,
            subject_name=subject_name,
            topic=topic,
        )
        return self._open(chat, subject_greeting(subject_name, topic))

    def start_agenda_chat(self) -> ChatSession:
        chat = ChatSession(id=self._ids.next(), title="Agenda", context_type="agenda")
        return self._open(chat, AGENDA_GREETING)

    def delete_chat(self, chat_id: str) -> bool:
        removed = self._chats.pop(chat_id, None) is not None
        if removed and self._current_id == chat_id:
            self._current_id = None
        return removed

    def clear(self) -> None:
        self._chats.clear()
        self._current_id = None

    # ---- messaging ----
    def _context_for(self, db: Session, chat: ChatSession, user_id: int) -> str:
        if chat.context_type == "agenda":
            return self.assembler.assemble_agenda_context(db, user_id)
        return self.assembler.assemble_subject_context(db, user_id, chat.subject_id, chat.topic)

    def send_user_message(
        self,
        db: Session,
        chat_id: str,
        text: str,
        *,
        user_id: int,
        display_name: str = "the student",
    ) -> Tuple[ChatMessage, bool]:
        """
        Run one chat turn. Returns (assistant reply or error message, ok).

        The user message is appended before any network call; the reply is appended
        after it. Context goes out only until the first successful exchange.
        """
        if not text or not text.strip():
            raise ValueError("message must not be blank")

        chat = self.get_chat(chat_id)
        with self._lock:
            if chat.busy:
                raise ChatBusyError(chat_id)
            chat.busy = True

        try:
            self._append(chat, "user", text)

            context_text = None
            if not chat.context_uploaded:
                context_text = self._context_for(db, chat, user_id)

            result = self.client.send_message(chat, text, context_text, display_name=display_name)

            if result.ok:
                chat.context_uploaded = True
                if result.chat_id:
                    chat.gateway_session_id = result.chat_id
                reply_text = result.text or EMPTY_REPLY
            else:
                logger.warning(f"Chat {chat.id} turn failed: {result.error}")
                reply_text = f"{ERROR_PREFIX} {result.error}"

            if chat_id not in self._chats:
                # deleted while the turn was in flight; nothing to append to
                return ChatMessage(id=self._ids.next(), role="assistant", text=reply_text, timestamp=datetime.utcnow()), result.ok

            return self._append(chat, "assistant", reply_text), result.ok
        finally:
            chat.busy = False


class ChatRegistry:
    """One ChatSessionManager per signed-in user, sharing the assembler and gateway client."""

    def __init__(self, assembler: ContextAssembler, client: MabotClient):
        self.assembler = assembler
        self.client = client
        self._managers: Dict[int, ChatSessionManager] = {}
        self._lock = threading.Lock()

    def for_user(self, user_id: int) -> ChatSessionManager:
        with self._lock:
            manager = self._managers.get(user_id)
            if manager is None:
                manager = ChatSessionManager(self.assembler, self.client)
                self._managers[user_id] = manager
            return manager

    def discard(self, user_id: int) -> None:
        with self._lock:
            manager = self._managers.pop(user_id, None)
        if manager:
            manager.clear()
