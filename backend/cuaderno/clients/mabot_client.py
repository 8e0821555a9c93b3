# cuaderno/clients/mabot_client.py
"""
HTTP client for the Mabot chatbot gateway.

Keeps one authenticated gateway session per process (access + refresh token,
persisted in the local store) and exchanges chat turns with /io/input.
Nothing here raises to the caller: every failure is a GatewayResult with ok=False.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional
import logging
import threading
import time

import httpx

from cuaderno.config import settings
from cuaderno.schemas.gateway import (
    MessageInput,
    MessageOutput,
    RefreshRequest,
    TokenResponse,
    extract_assistant_text,
    text_entry,
)
from cuaderno.services.prompts import build_instruction

if TYPE_CHECKING:
    from cuaderno.services.chat_service import ChatSession
    from cuaderno.services.local_store import LocalStore

logger = logging.getLogger(__name__)

# local_settings keys
CONFIG_KEYS = {
    "base_url": "mabot_base_url",
    "username": "mabot_username",
    "password": "mabot_password",
}
ACCESS_TOKEN_KEY = "mabot_access_token"
REFRESH_TOKEN_KEY = "mabot_refresh_token"

NOT_READY_ERROR = "Mabot not configured or auth failed"


@dataclass(frozen=True)
class GatewayConfig:
    base_url: str = ""
    username: str = ""
    password: str = ""
    bot_username: str = "cuaderbot"
    platform: str = "web"
    timeout: float = 60.0

    @classmethod
    def resolve(cls, store: Optional["LocalStore"] = None) -> "GatewayConfig":
        """Local overrides (local_settings) win over environment settings."""
        overrides: Dict[str, Optional[str]] = store.get_many(CONFIG_KEYS.values()) if store else {}

        def pick(field: str, fallback: str) -> str:
            return (overrides.get(CONFIG_KEYS[field]) or fallback or "").strip()

        return cls(
            base_url=pick("base_url", settings.MABOT_BASE_URL).rstrip("/"),
            username=pick("username", settings.MABOT_USERNAME),
            password=pick("password", settings.MABOT_PASSWORD),
            bot_username=settings.MABOT_BOT_USERNAME,
            platform=settings.MABOT_PLATFORM,
            timeout=settings.MABOT_TIMEOUT,
        )

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    def problems(self) -> List[str]:
        missing = []
        if not self.base_url:
            missing.append("MABOT_BASE_URL")
        if not self.username:
            missing.append("MABOT_USERNAME")
        if not self.password:
            missing.append("MABOT_PASSWORD")
        return missing

    def warning(self) -> Optional[str]:
        """Banner text while the gateway is not fully configured, else None."""
        missing = self.problems()
        if not missing:
            return None
        return (
            f"AI assistant is not configured (missing {', '.join(missing)}). "
            f"Set the environment variables or store local overrides via PUT /chat/config."
        )


@dataclass(frozen=True)
class GatewayCredentials:
    access_token: str = ""
    refresh_token: str = ""


class GatewayCredentialsStore:
    """get/set/clear for the gateway token pair, persisted in the local store."""

    def __init__(self, store: "LocalStore"):
        self.store = store

    def get(self) -> GatewayCredentials:
        values = self.store.get_many([ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY])
        return GatewayCredentials(
            access_token=values.get(ACCESS_TOKEN_KEY) or "",
            refresh_token=values.get(REFRESH_TOKEN_KEY) or "",
        )

    def set(self, access_token: str, refresh_token: str) -> None:
        # one transaction: never a new access token next to a stale refresh token
        self.store.set_many({ACCESS_TOKEN_KEY: access_token, REFRESH_TOKEN_KEY: refresh_token})

    def clear(self) -> None:
        self.store.delete([ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY])


@dataclass
class GatewayResult:
    ok: bool
    output: Optional[MessageOutput] = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def chat_id(self) -> Optional[str]:
        return self.output.chat_id if self.output else None

    @property
    def text(self) -> str:
        return extract_assistant_text(self.output) if self.output else ""


class MabotClient:
    def __init__(
        self,
        config: GatewayConfig,
        credentials: GatewayCredentialsStore,
        http_client: Optional[httpx.Client] = None,
    ):
        self.config = config
        self.credentials = credentials
        self._http = http_client
        self._owns_http = http_client is None
        self._tokens = credentials.get()
        # login, refresh and clear are serialized; the client is shared by every user's chats
        self._auth_lock = threading.RLock()

    # ---- lifecycle ----
    @property
    def http(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client(timeout=self.config.timeout)
        return self._http

    def close(self) -> None:
        if self._owns_http and self._http is not None:
            self._http.close()
            self._http = None

    def reconfigure(self, config: GatewayConfig) -> None:
        """Switch gateway/account; tokens from the previous account are dropped."""
        with self._auth_lock:
            self.config = config
            self.clear_tokens()

    def clear_tokens(self) -> None:
        with self._auth_lock:
            self._tokens = GatewayCredentials()
            self.credentials.clear()

    @property
    def access_token(self) -> str:
        return self._tokens.access_token

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}/{path.lstrip('/')}"

    def _store_tokens(self, response: httpx.Response) -> bool:
        """Validate a token response and persist it. False on any problem."""
        if not response.is_success:
            return False
        try:
            tokens = TokenResponse.model_validate(response.json())
        except ValueError:
            return False
        self._tokens = GatewayCredentials(tokens.access_token, tokens.refresh_token)
        self.credentials.set(tokens.access_token, tokens.refresh_token)
        return True

    # ---- auth ----
    def login(self) -> bool:
        with self._auth_lock:
            return self._login()

    def _login(self) -> bool:
        cfg = self.config
        if not cfg.configured or not cfg.username or not cfg.password:
            return False
        try:
            res = self.http.post(
                self._url("/auth/login"),
                data={"username": cfg.username, "password": cfg.password, "grant_type": "password"},
            )
        except httpx.HTTPError as e:
            logger.error({"step": "mabot_login_error", "error": e.__class__.__name__})
            return False
        ok = self._store_tokens(res)
        logger.info({"step": "mabot_login", "ok": ok, "status": res.status_code})
        return ok

    def refresh(self) -> bool:
        with self._auth_lock:
            return self._refresh()

    def _refresh(self) -> bool:
        if not self.config.configured or not self._tokens.refresh_token:
            return False
        try:
            res = self.http.post(
                self._url("/auth/refresh"),
                json=RefreshRequest(refresh_token=self._tokens.refresh_token).model_dump(),
            )
        except httpx.HTTPError as e:
            logger.error({"step": "mabot_refresh_error", "error": e.__class__.__name__})
            return False
        ok = self._store_tokens(res)
        logger.info({"step": "mabot_refresh", "ok": ok, "status": res.status_code})
        return ok

    def ensure_authenticated(self) -> bool:
        if not self.config.configured:
            return False
        with self._auth_lock:
            if self._tokens.access_token:
                return True
            return self._login()

    def renew_after_unauthorized(self, rejected_token: str) -> bool:
        """
        Recover from a 401 on rejected_token. True when a usable access token is held.

        Concurrent callers share one refresh: if the token was already replaced
        while waiting for the lock, the replacement is used as is. On failure only
        the rejected pair is dropped, so the next send starts with a fresh login.
        """
        with self._auth_lock:
            current = self._tokens.access_token
            if current and current != rejected_token:
                return True
            if self._refresh():
                return True
            if self._tokens.access_token == rejected_token:
                self._tokens = GatewayCredentials()
                self.credentials.clear()
            return False

    # ---- messages ----
    def build_envelope(
        self,
        chat: "ChatSession",
        user_text: str,
        context_text: Optional[str] = None,
        *,
        display_name: str = "the student",
    ) -> MessageInput:
        platform_chat_id = chat.gateway_session_id or f"{self.config.platform}_{chat.id}_{int(time.time() * 1000)}"

        messages = [text_entry(build_instruction(chat, display_name), parse_mode="Markdown")]
        if context_text and context_text.strip():
            messages.append(text_entry(context_text))
        messages.append(text_entry(user_text))

        return MessageInput(
            platform=self.config.platform,
            chat_id=chat.gateway_session_id,
            platform_chat_id=platform_chat_id,
            bot_username=self.config.bot_username,
            prefix_with_bot_name=False,
            messages=messages,
        )

    def _post_input(self, payload: dict, access_token: str) -> httpx.Response:
        return self.http.post(
            self._url("/io/input"),
            json=payload,
            headers={"Authorization": f"Bearer {access_token}"},
        )

    def send_message(
        self,
        chat: "ChatSession",
        user_text: str,
        context_text: Optional[str] = None,
        *,
        display_name: str = "the student",
    ) -> GatewayResult:
        if not self.ensure_authenticated():
            return GatewayResult(ok=False, error=NOT_READY_ERROR)

        payload = self.build_envelope(chat, user_text, context_text, display_name=display_name).to_payload()
        started = time.time()
        try:
            token = self.access_token
            res = self._post_input(payload, token)
            if res.status_code == 401:
                # exactly one refresh and one retry
                if not self.renew_after_unauthorized(token):
                    logger.warning({"step": "mabot_unauthorized", "chat": chat.id})
                    return GatewayResult(ok=False, error="Unauthorized", status_code=401)
                res = self._post_input(payload, self.access_token)
        except httpx.HTTPError as e:
            logger.error({"step": "mabot_send_error", "chat": chat.id, "error": repr(e)})
            return GatewayResult(ok=False, error=f"Network error: {e.__class__.__name__}")

        if not res.is_success:
            logger.error({"step": "mabot_send_failed", "chat": chat.id, "status": res.status_code, "body": res.text[:500]})
            return GatewayResult(ok=False, error=f"HTTP {res.status_code}", status_code=res.status_code)

        try:
            output = MessageOutput.model_validate(res.json())
        except ValueError:
            logger.error({"step": "mabot_bad_response", "chat": chat.id, "status": res.status_code})
            return GatewayResult(ok=False, error="Invalid response from assistant", status_code=res.status_code)

        logger.info({
            "step": "mabot_send_ok",
            "chat": chat.id,
            "gateway_chat_id": output.chat_id,
            "with_context": bool(context_text and context_text.strip()),
            "latency_ms": round((time.time() - started) * 1000.0, 1),
        })
        return GatewayResult(ok=True, output=output, status_code=res.status_code)
