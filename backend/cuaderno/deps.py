# cuaderno/deps.py
"""
Shared FastAPI dependencies: the current-user accessor and the process-wide
singletons (object storage, local store, gateway client, chat registry).
"""
from __future__ import annotations
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from cuaderno.clients.mabot_client import GatewayConfig, GatewayCredentialsStore, MabotClient
from cuaderno.clients.storage_client import ObjectStorage
from cuaderno.database import get_db
from cuaderno.models.user import User
from cuaderno.services.auth_service import AuthService
from cuaderno.services.chat_service import ChatRegistry
from cuaderno.services.context_service import ContextAssembler
from cuaderno.services.local_store import LocalStore


def get_auth_service() -> AuthService:
    return AuthService()


@lru_cache(maxsize=None)
def get_storage() -> ObjectStorage:
    return ObjectStorage()


@lru_cache(maxsize=None)
def get_local_store() -> LocalStore:
    return LocalStore()


@lru_cache(maxsize=None)
def get_mabot_client() -> MabotClient:
    store = get_local_store()
    return MabotClient(GatewayConfig.resolve(store), GatewayCredentialsStore(store))


@lru_cache(maxsize=None)
def get_chat_registry() -> ChatRegistry:
    return ChatRegistry(ContextAssembler(storage=get_storage()), get_mabot_client())


# ---- Current user ----
def _extract_bearer(authorization: Optional[str]) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing or invalid Authorization header")
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid bearer token")
    return token


def get_current_user(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    token = _extract_bearer(authorization)
    user = auth.resolve_user(db, token)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    return user
