"""
Wire schemas for the Mabot chatbot gateway.

These intentionally do not inherit BaseSchema: gateway text must pass through
untouched (no whitespace stripping), and unknown fields the gateway adds are ignored.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GatewaySchema(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TokenResponse(GatewaySchema):
    """Body of /auth/login and /auth/refresh. Both tokens are required."""
    access_token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)


class RefreshRequest(GatewaySchema):
    refresh_token: str


class GatewayContent(GatewaySchema):
    type: str = "text"
    value: Any = None
    parse_mode: Optional[str] = None


class GatewayMessage(GatewaySchema):
    role: str
    contents: List[GatewayContent] = Field(default_factory=list)


class MessageInput(GatewaySchema):
    """Envelope posted to /io/input."""
    platform: str
    chat_id: Optional[str] = None
    platform_chat_id: str
    bot_username: str
    prefix_with_bot_name: bool = False
    messages: List[GatewayMessage]

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump(exclude_none=True)
        payload["chat_id"] = self.chat_id  # explicit null on the first turn
        return payload


class MessageOutput(GatewaySchema):
    """Body returned by /io/input."""
    chat_id: Optional[str] = None
    messages: List[GatewayMessage] = Field(default_factory=list)

    @field_validator("chat_id", mode="before")
    @classmethod
    def _coerce_chat_id(cls, v):
        if v is None or v == "":
            return None
        return str(v)


def text_entry(value: str, *, role: str = "user", parse_mode: Optional[str] = None) -> GatewayMessage:
    """One message entry carrying a single text content."""
    return GatewayMessage(role=role, contents=[GatewayContent(type="text", value=value, parse_mode=parse_mode)])


def extract_assistant_text(output: MessageOutput) -> str:
    """
    Concatenate every text segment of every assistant message, separated by a blank line.
    Returns "" when the gateway produced no assistant text.
    """
    parts: List[str] = []
    for message in output.messages:
        if message.role != "assistant":
            continue
        for content in message.contents:
            if content.type == "text" and isinstance(content.value, str):
                parts.append(content.value)
    return "\n\n".join(parts)
