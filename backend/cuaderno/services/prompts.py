"""
Fixed texts for chat sessions: greetings shown when a chat starts and the
instruction entry that opens every gateway turn.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from cuaderno.services.chat_service import ChatSession

AGENDA_GREETING = "Ready. I am your academic agenda. Ask me about events, schedules, or goals."


def subject_greeting(subject_name: str, topic: Optional[str] = None) -> str:
    topic_hint = f" (topic: {topic})" if topic else ""
    return f"New chat for {subject_name}{topic_hint}. What would you like to explore?"


def build_instruction(chat: "ChatSession", display_name: str) -> str:
    if chat.context_type == "agenda":
        return (
            "ROLE: You are the student's academic agenda assistant.\n"
            f"Student: {display_name}.\n"
            "Use ONLY the provided calendar, schedules, and goals data. "
            "If missing, ask for details or suggest adding them in Plan.\n"
            "Answer concisely and in the user's language.\n"
            "Then suggest a relevant next action (e.g., schedule a session, review material).\n"
            "Question:"
        )

    ctx = chat.subject_name or "the selected subject"
    topic_hint = f" (topic: {chat.topic})" if chat.topic else ""
    return (
        "ROLE: You are an AI study assistant.\n"
        f"Student: {display_name}.\n"
        f"Primary context: {ctx}{topic_hint}.\n"
        "Use ONLY the provided materials and notes. If insufficient, ask for more uploads (via Library).\n"
        "Answer in the user's language and keep it clear.\n"
        "Then suggest a relevant follow-up action (e.g., review a material, quiz yourself on the topic).\n"
        "Question:"
    )
