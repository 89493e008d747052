from __future__ import annotations

import asyncio

import pytest

from backend.app.ai.companion import ChatCompanion
from backend.app.ai.local_llm import generate_local_reply
from backend.app.ai.openai_client import AIUnavailable
from backend.app.ai.templates import COMFORT_SUFFIX
from backend.app.services.conversation import ConversationStore


class _FakeClient:
    def __init__(self, reply: str | Exception = "", available: bool = True) -> None:
        self.available = available
        self._reply = reply
        self.calls: list[list[dict[str, str]]] = []

    async def complete(self, messages, *, kind: str = "chat") -> str:
        self.calls.append([dict(message) for message in messages])
        if isinstance(self._reply, Exception):
            raise self._reply
        return self._reply


class _RecordingStorage:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.rows: list[tuple[str, str, str]] = []

    async def add_chat_message(self, *, user_id, sender, message, timestamp=None):
        if self.fail:
            raise RuntimeError("disk full")
        self.rows.append((user_id, sender, message))


def _companion(client, storage=None, limit: int = 16) -> tuple[ChatCompanion, ConversationStore]:
    conversations = ConversationStore("sys", limit=limit)
    companion = ChatCompanion(
        conversations=conversations,
        client=client,
        storage=storage or _RecordingStorage(),
    )
    return companion, conversations


@pytest.mark.anyio
async def test_scripted_reply_without_generator() -> None:
    storage = _RecordingStorage()
    companion, conversations = _companion(_FakeClient(available=False), storage)

    reply = await companion.reply("u1", "I feel sad today")
    await companion.drain()

    assert reply == generate_local_reply("I feel sad today")
    assert [turn.role for turn in conversations.snapshot("u1")] == ["system", "user", "assistant"]
    assert storage.rows == [("u1", "user", "I feel sad today"), ("u1", "assistant", reply)]


@pytest.mark.anyio
async def test_generated_reply_uses_buffer_with_comfort_suffix() -> None:
    client = _FakeClient("You are doing great.")
    companion, conversations = _companion(client)

    reply = await companion.reply("u1", "rough day")
    await companion.drain()

    assert reply == "You are doing great."
    sent = client.calls[0]
    assert sent[0] == {"role": "system", "content": "sys"}
    assert sent[-1] == {"role": "user", "content": f"rough day{COMFORT_SUFFIX}"}
    # the stored turn keeps the raw message
    assert conversations.snapshot("u1")[1].content == "rough day"


@pytest.mark.anyio
async def test_generator_failure_discards_user_turn() -> None:
    storage = _RecordingStorage()
    companion, conversations = _companion(_FakeClient(AIUnavailable("down")), storage)

    with pytest.raises(AIUnavailable):
        await companion.reply("u1", "hello?")
    await companion.drain()

    assert [turn.role for turn in conversations.snapshot("u1")] == ["system"]
    assert storage.rows == [("u1", "user", "hello?")]


@pytest.mark.anyio
async def test_empty_generated_reply_is_unavailable() -> None:
    companion, conversations = _companion(_FakeClient(""))
    with pytest.raises(AIUnavailable):
        await companion.reply("u1", "hello?")
    assert len(conversations.snapshot("u1")) == 1


@pytest.mark.anyio
async def test_persistence_failure_never_reaches_caller() -> None:
    companion, _ = _companion(_FakeClient(available=False), _RecordingStorage(fail=True))
    reply = await companion.reply("u1", "hello")
    await companion.drain()
    assert reply


@pytest.mark.anyio
async def test_long_conversation_stays_bounded() -> None:
    companion, conversations = _companion(_FakeClient(available=False), limit=6)
    for index in range(10):
        await companion.reply("u1", f"message {index}")
    await companion.drain()
    turns = conversations.snapshot("u1")
    assert len(turns) <= 6
    assert turns[0].role == "system"
    assert turns[-1].role == "assistant"


@pytest.mark.anyio
async def test_forget_resets_buffer() -> None:
    companion, conversations = _companion(_FakeClient(available=False))
    await companion.reply("u1", "hello")
    await companion.drain()
    await companion.forget("u1")
    assert "u1" not in conversations


@pytest.mark.anyio
@pytest.mark.parametrize("error", [asyncio.CancelledError(), TypeError("sdk bug")])
async def test_any_failure_keeps_buffer_in_pairs(error: BaseException) -> None:
    client = _FakeClient(error)
    companion, conversations = _companion(client, limit=5)

    with pytest.raises(type(error)):
        await companion.reply("u1", "lost message")
    assert [turn.role for turn in conversations.snapshot("u1")] == ["system"]

    client._reply = "ok"
    for index in range(3):
        await companion.reply("u1", f"message {index}")
    await companion.drain()

    roles = [turn.role for turn in conversations.snapshot("u1")]
    assert roles == ["system", "user", "assistant", "user", "assistant"]


class _SlowClient:
    available = True

    async def complete(self, messages, *, kind: str = "chat") -> str:
        await asyncio.sleep(0.01)
        return f"reply to {messages[-1]['content'].split(' try ')[0]}"


@pytest.mark.anyio
async def test_concurrent_replies_for_one_user_are_serialised() -> None:
    companion, conversations = _companion(_SlowClient())

    await asyncio.gather(
        companion.reply("u1", "first"),
        companion.reply("u1", "second"),
    )
    await companion.drain()

    turns = conversations.snapshot("u1")
    assert [turn.role for turn in turns] == ["system", "user", "assistant", "user", "assistant"]
    for user_turn, assistant_turn in ((turns[1], turns[2]), (turns[3], turns[4])):
        assert assistant_turn.content == f"reply to {user_turn.content}"


@pytest.mark.anyio
async def test_forget_waits_for_in_flight_reply() -> None:
    companion, conversations = _companion(_SlowClient())

    reply = asyncio.create_task(companion.reply("u1", "hello"))
    await asyncio.sleep(0)
    await companion.forget("u1")
    await reply
    await companion.drain()

    assert "u1" not in conversations
