"""
Request/response shapes for the in-memory chat sessions.
"""

from datetime import datetime
from typing import List, Optional, Literal
from pydantic import BaseModel, Field, field_validator

from .base import BaseSchema


class ChatMessageResponse(BaseSchema):
    id: str
    role: Literal["user", "assistant"]
    text: str
    timestamp: datetime


class ChatSummary(BaseSchema):
    """Sidebar entry: a chat without its transcript."""
    id: str
    title: str
    context_type: Literal["subject", "agenda"]
    subject_id: Optional[int] = None
    subject_name: Optional[str] = None
    topic: Optional[str] = None
    created_at: datetime
    last_activity: datetime
    message_count: int
    is_current: bool = False


class ChatSessionResponse(ChatSummary):
    messages: List[ChatMessageResponse]
    gateway_session_id: Optional[str] = None
    context_uploaded: bool = False


class StartSubjectChatRequest(BaseSchema):
    subject_id: int = Field(..., ge=1)
    topic: Optional[str] = Field(None, max_length=255)


class SendMessageRequest(BaseModel):
    # Not a BaseSchema: the user's text is forwarded verbatim
    message: str = Field(..., min_length=1, description="User message text")

    @field_validator("message")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("message must not be blank")
        return v


class SendMessageResponse(BaseSchema):
    ok: bool = Field(..., description="False when the gateway turn failed; reply then carries the error")
    reply: ChatMessageResponse
    chat: ChatSessionResponse


class GatewayStatusResponse(BaseSchema):
    configured: bool
    warning: Optional[str] = None


class GatewayConfigUpdate(BaseSchema):
    """Local overrides; omitted fields are left as they are."""
    base_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
