# cuaderno/routers/chat.py
from __future__ import annotations
from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from cuaderno.clients.mabot_client import CONFIG_KEYS, GatewayConfig, MabotClient
from cuaderno.database import get_db
from cuaderno.deps import get_chat_registry, get_current_user, get_local_store, get_mabot_client
from cuaderno.models.user import User
from cuaderno.repositories.program import SubjectRepository
from cuaderno.schemas.chat import (
    ChatMessageResponse,
    ChatSessionResponse,
    ChatSummary,
    GatewayConfigUpdate,
    GatewayStatusResponse,
    SendMessageRequest,
    SendMessageResponse,
    StartSubjectChatRequest,
)
from cuaderno.services.auth_service import display_name
from cuaderno.services.chat_service import (
    ChatBusyError,
    ChatMessage,
    ChatNotFoundError,
    ChatRegistry,
    ChatSession,
    ChatSessionManager,
)
from cuaderno.services.local_store import LocalStore

router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)


# ----- DI providers -----
def get_subject_repo() -> SubjectRepository:
    return SubjectRepository()

def get_manager(
    user: User = Depends(get_current_user),
    registry: ChatRegistry = Depends(get_chat_registry),
) -> ChatSessionManager:
    return registry.for_user(user.id)


# ----- Serialization -----
def _message(msg: ChatMessage) -> ChatMessageResponse:
    return ChatMessageResponse(id=msg.id, role=msg.role, text=msg.text, timestamp=msg.timestamp)

def _summary_fields(chat: ChatSession, manager: ChatSessionManager) -> dict:
    current = manager.current
    return {
        "id": chat.id,
        "title": chat.title,
        "context_type": chat.context_type,
        "subject_id": chat.subject_id,
        "subject_name": chat.subject_name,
        "topic": chat.topic,
        "created_at": chat.created_at,
        "last_activity": chat.last_activity,
        "message_count": len(chat.messages),
        "is_current": current is not None and current.id == chat.id,
    }

def _detail(chat: ChatSession, manager: ChatSessionManager) -> ChatSessionResponse:
    return ChatSessionResponse(
        **_summary_fields(chat, manager),
        messages=[_message(m) for m in chat.messages],
        gateway_session_id=chat.gateway_session_id,
        context_uploaded=chat.context_uploaded,
    )

def _get_or_404(manager: ChatSessionManager, chat_id: str) -> ChatSession:
    try:
        return manager.get_chat(chat_id)
    except ChatNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")


# ----- Chats -----
@router.get("/sessions", response_model=List[ChatSummary], summary="List chats in creation order")
def list_chats(manager: ChatSessionManager = Depends(get_manager)):
    return [ChatSummary(**_summary_fields(c, manager)) for c in manager.list_chats()]


@router.post("/sessions/subject", response_model=ChatSessionResponse, status_code=status.HTTP_201_CREATED)
def start_subject_chat(
    payload: StartSubjectChatRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    manager: ChatSessionManager = Depends(get_manager),
    subjects: SubjectRepository = Depends(get_subject_repo),
):
    subject = subjects.get_owned(db, user.id, payload.subject_id)
    if not subject:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
    chat = manager.start_subject_chat(subject.id, subject.name, payload.topic)
    return _detail(chat, manager)


@router.post("/sessions/agenda", response_model=ChatSessionResponse, status_code=status.HTTP_201_CREATED)
def start_agenda_chat(manager: ChatSessionManager = Depends(get_manager)):
    return _detail(manager.start_agenda_chat(), manager)


@router.get("/sessions/{chat_id}", response_model=ChatSessionResponse)
def get_chat(chat_id: str, manager: ChatSessionManager = Depends(get_manager)):
    return _detail(_get_or_404(manager, chat_id), manager)


@router.post("/sessions/{chat_id}/select", response_model=ChatSessionResponse, summary="Make a chat the current one")
def select_chat(chat_id: str, manager: ChatSessionManager = Depends(get_manager)):
    _get_or_404(manager, chat_id)
    return _detail(manager.select_chat(chat_id), manager)


@router.delete("/sessions/{chat_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_chat(chat_id: str, manager: ChatSessionManager = Depends(get_manager)):
    if not manager.delete_chat(chat_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")
    return


@router.post("/sessions/{chat_id}/messages", response_model=SendMessageResponse, summary="Send one message and get the reply")
def send_message(
    chat_id: str,
    payload: SendMessageRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    manager: ChatSessionManager = Depends(get_manager),
):
    """
    Gateway failures are not HTTP errors: the reply carries the error text and ok is False.
    409 while a previous message for the same chat is still in flight.
    """
    try:
        reply, ok = manager.send_user_message(
            db, chat_id, payload.message, user_id=user.id, display_name=display_name(user)
        )
    except ChatNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")
    except ChatBusyError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A message is already being sent for this chat")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    # the chat may have been deleted while the turn was in flight
    chat = _get_or_404(manager, chat_id)
    return SendMessageResponse(ok=ok, reply=_message(reply), chat=_detail(chat, manager))


# ----- Gateway configuration -----
def _status(client: MabotClient) -> GatewayStatusResponse:
    return GatewayStatusResponse(configured=client.config.configured, warning=client.config.warning())


@router.get("/status", response_model=GatewayStatusResponse, summary="Whether the AI assistant is configured")
def gateway_status(
    user: User = Depends(get_current_user),
    client: MabotClient = Depends(get_mabot_client),
):
    return _status(client)


@router.put("/config", response_model=GatewayStatusResponse, summary="Store local gateway overrides")
def update_gateway_config(
    payload: GatewayConfigUpdate,
    user: User = Depends(get_current_user),
    store: LocalStore = Depends(get_local_store),
    client: MabotClient = Depends(get_mabot_client),
):
    """Blank values remove an override so the environment value applies again."""
    changes = payload.model_dump(exclude_unset=True)
    to_set = {CONFIG_KEYS[k]: v for k, v in changes.items() if v}
    to_drop = [CONFIG_KEYS[k] for k, v in changes.items() if not v]
    if to_set:
        store.set_many(to_set)
    if to_drop:
        store.delete(to_drop)
    client.reconfigure(GatewayConfig.resolve(store))
    logger.info({"step": "gateway_config_updated", "user": user.id, "fields": sorted(changes)})
    return _status(client)


@router.delete("/config", response_model=GatewayStatusResponse, summary="Drop local gateway overrides")
def reset_gateway_config(
    user: User = Depends(get_current_user),
    store: LocalStore = Depends(get_local_store),
    client: MabotClient = Depends(get_mabot_client),
):
    store.delete(list(CONFIG_KEYS.values()))
    client.reconfigure(GatewayConfig.resolve(store))
    logger.info({"step": "gateway_config_reset", "user": user.id})
    return _status(client)
