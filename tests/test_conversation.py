"""Tests for the conversation domain objects."""

from datetime import datetime, timedelta

from app.core.conversation import Conversation, Message


def _conversation():
    created = datetime(2024, 1, 1, 12, 0, 0)
    conversation = Conversation(user_id="u1", title="Test")
    conversation.metadata.created = created
    conversation.metadata.updated = created
    conversation.append(Message(role="system", content="You are helpful", timestamp=created))
    conversation.append(Message(role="assistant", content="Hi!", timestamp=created))
    return conversation


def test_append_refreshes_updated():
    conversation = _conversation()
    later = conversation.metadata.created + timedelta(seconds=42)
    conversation.append(Message(role="user", content="hello", timestamp=later))

    assert conversation.metadata.updated == later
    assert conversation.metadata.updated >= conversation.metadata.created


def test_public_view_hides_system_messages():
    conversation = _conversation()
    data = conversation.to_public_dict()

    assert [m["role"] for m in data["messages"]] == ["assistant"]
    assert conversation.system_prompt == "You are helpful"
    assert data["userId"] == "u1"


def test_message_audio_url_only_when_present():
    assert "audioUrl" not in Message(role="user", content="x").to_dict()
    assert Message(role="user", content="x", audio_url="/audio/a.mp3").to_dict()["audioUrl"] == "/audio/a.mp3"


def test_message_from_stored_dict():
    stored = {"role": "assistant", "content": "Hi", "timestamp": "2024-01-01T12:00:00", "audioUrl": "/audio/x.mp3"}
    message = Message.from_dict(stored)
    assert message.timestamp == datetime(2024, 1, 1, 12, 0, 0)
    assert message.audio_url == "/audio/x.mp3"


def test_duration_is_whole_seconds_since_creation():
    conversation = _conversation()
    conversation.refresh_duration(conversation.metadata.created + timedelta(seconds=90, milliseconds=700))
    assert conversation.metadata.duration == 90


def test_merge_intents_keeps_first_seen_order():
    conversation = _conversation()
    conversation.metadata.merge_intents(["purchase", "cancellation"])
    conversation.metadata.merge_intents(["question", "purchase"])
    assert conversation.metadata.intents == ["purchase", "cancellation", "question"]


def test_transcript_and_audio_urls():
    conversation = _conversation()
    conversation.append(Message(role="user", content="hello", audio_url="/audio/u.webm"))
    assert conversation.transcript().splitlines()[-1] == "user: hello"
    assert conversation.audio_urls == ["/audio/u.webm"]
    assert conversation.user_message_count == 1


def test_assistant_append_keeps_sentiment():
    conversation = _conversation()
    conversation.metadata.sentiment = "urgent"

    conversation.append(Message(role="assistant", content="Let me check that for you."))

    assert conversation.metadata.sentiment == "urgent"


def test_transcript_excludes_system_prompt():
    conversation = _conversation()
    assert conversation.transcript() == "assistant: Hi!"
