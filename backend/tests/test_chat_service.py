import pytest

from cuaderno.repositories import MaterialRepository
from cuaderno.services.chat_service import (
    ERROR_PREFIX,
    ChatBusyError,
    ChatNotFoundError,
    ChatRegistry,
    ChatSessionManager,
)
from cuaderno.services.context_service import ContextAssembler
from cuaderno.services.prompts import AGENDA_GREETING


@pytest.fixture()
def manager(mabot_client):
    return ChatSessionManager(ContextAssembler(), mabot_client)


@pytest.fixture()
def cells(db, student, biology):
    MaterialRepository().create_owned(db, student.id, {
        "subject_id": biology.id, "title": "Cells", "type": "notes", "content": "Cells are the unit of life.",
    })
    db.commit()


def _send(manager, db, chat, text, student):
    return manager.send_user_message(db, chat.id, text, user_id=student.id, display_name="Ana")


# ---------- lifecycle ----------
def test_subject_greeting_names_subject_without_topic(manager):
    chat = manager.start_subject_chat(7, "Biology")

    greeting = chat.messages[0]
    assert greeting.role == "assistant"
    assert "Biology" in greeting.text
    assert "topic" not in greeting.text
    assert chat.context_uploaded is False
    assert manager.current is chat


def test_subject_greeting_mentions_topic(manager):
    chat = manager.start_subject_chat(7, "Biology", "  mitosis ")

    assert chat.topic == "mitosis"
    assert "Biology" in chat.messages[0].text
    assert "mitosis" in chat.messages[0].text


def test_agenda_chat_greeting(manager):
    chat = manager.start_agenda_chat()

    assert chat.context_type == "agenda"
    assert chat.messages[0].text == AGENDA_GREETING


def test_chats_listed_in_creation_order_with_unique_ids(manager):
    first = manager.start_subject_chat(1, "Biology")
    second = manager.start_agenda_chat()
    third = manager.start_subject_chat(2, "Chemistry")

    assert [c.id for c in manager.list_chats()] == [first.id, second.id, third.id]
    assert len({first.id, second.id, third.id}) == 3
    assert manager.current is third


def test_deleting_current_chat_leaves_no_current(manager):
    first = manager.start_subject_chat(1, "Biology")
    second = manager.start_agenda_chat()

    assert manager.delete_chat(second.id)

    assert manager.current is None
    assert [c.id for c in manager.list_chats()] == [first.id]
    assert manager.delete_chat(second.id) is False


def test_select_unknown_chat_raises(manager):
    with pytest.raises(ChatNotFoundError):
        manager.select_chat("nope")


# ---------- messaging ----------
def test_context_goes_out_only_on_first_successful_turn(manager, gateway, db, student, biology, cells):
    chat = manager.start_subject_chat(biology.id, "Biology")

    reply, ok = _send(manager, db, chat, "What is a cell?", student)
    _send(manager, db, chat, "And a tissue?", student)

    assert ok and reply.text == "Hello"
    first, second = gateway.input_bodies()
    assert len(first["messages"]) == 3
    assert "Cells are the unit of life." in first["messages"][1]["contents"][0]["value"]
    assert len(second["messages"]) == 2
    assert second["chat_id"] == "gw-1"
    assert chat.context_uploaded is True
    assert chat.gateway_session_id == "gw-1"


def test_transcript_order_user_before_reply(manager, db, student, biology):
    chat = manager.start_subject_chat(biology.id, "Biology")

    _send(manager, db, chat, "Hi", student)

    assert [m.role for m in chat.messages] == ["assistant", "user", "assistant"]
    assert chat.messages[1].text == "Hi"
    ids = [int(m.id) for m in chat.messages]
    assert ids == sorted(ids) and len(set(ids)) == 3
    assert chat.last_activity == chat.messages[-1].timestamp


def test_failed_turn_appends_error_and_keeps_context_pending(manager, gateway, db, student, biology):
    gateway.input_replies = [(500, {"detail": "boom"})]
    chat = manager.start_subject_chat(biology.id, "Biology")

    reply, ok = _send(manager, db, chat, "Hi", student)

    assert not ok
    assert reply.text == f"{ERROR_PREFIX} HTTP 500"
    assert chat.messages[-1] == reply
    assert chat.context_uploaded is False
    assert chat.gateway_session_id is None

    _, ok = _send(manager, db, chat, "Hi again", student)
    assert ok
    assert len(gateway.input_bodies()[-1]["messages"]) == 3


def test_empty_assistant_reply_shows_placeholder(manager, gateway, db, student, biology):
    gateway.input_replies = [(200, {"chat_id": "gw-9", "messages": []})]
    chat = manager.start_subject_chat(biology.id, "Biology")

    reply, ok = _send(manager, db, chat, "Hi", student)

    assert ok
    assert reply.text == "..."
    assert chat.gateway_session_id == "gw-9"


def test_agenda_chat_sends_agenda_context(manager, gateway, db, student):
    chat = manager.start_agenda_chat()

    _send(manager, db, chat, "What is due this week?", student)

    context = gateway.input_bodies()[0]["messages"][1]["contents"][0]["value"]
    assert context.startswith("Agenda data provided to assistant:")


def test_blank_busy_and_unknown_sends_are_rejected(manager, gateway, db, student):
    chat = manager.start_agenda_chat()

    with pytest.raises(ValueError):
        _send(manager, db, chat, "   ", student)

    chat.busy = True
    with pytest.raises(ChatBusyError):
        _send(manager, db, chat, "Hi", student)
    chat.busy = False

    with pytest.raises(ChatNotFoundError):
        manager.send_user_message(db, "missing", "Hi", user_id=student.id)

    assert gateway.input_bodies() == []
    assert len(chat.messages) == 1


def test_busy_flag_is_released_after_a_failure(manager, gateway, db, student):
    gateway.input_replies = [(502, {})]
    chat = manager.start_agenda_chat()

    _send(manager, db, chat, "Hi", student)

    assert chat.busy is False


# ---------- registry ----------
def test_registry_keeps_one_manager_per_user(mabot_client):
    registry = ChatRegistry(ContextAssembler(), mabot_client)

    mine = registry.for_user(1)
    mine.start_agenda_chat()

    assert registry.for_user(1) is mine
    assert registry.for_user(2) is not mine

    registry.discard(1)
    assert mine.list_chats() == []
    assert registry.for_user(1).list_chats() == []
