from __future__ import annotations

import asyncio
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Literal

Role = Literal["system", "user", "assistant"]

DEFAULT_HISTORY_LIMIT = 16


@dataclass(frozen=True)
class ConversationTurn:
    role: Role
    content: str

    def as_message(self) -> dict[str, str]:
        return asdict(self)


class ConversationStore:
    """In-memory per-user chat buffers seeded with one system turn.

    A buffer never grows past ``limit`` turns. When it does, the oldest
    user/assistant pair right after the system turn is dropped, so the system
    instruction stays at index 0.
    """

    def __init__(self, system_prompt: str, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 3:
            raise ValueError("limit must leave room for the system turn and one exchange")
        self._system_turn = ConversationTurn("system", system_prompt)
        self._limit = limit
        self._buffers: dict[str, list[ConversationTurn]] = {}
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def limit(self) -> int:
        return self._limit

    def lock(self, user_id: str) -> asyncio.Lock:
        """Lock serialising read-modify-write cycles on one user's buffer."""

        return self._locks[user_id]

    def _buffer(self, user_id: str) -> list[ConversationTurn]:
        buffer = self._buffers.get(user_id)
        if buffer is None:
            buffer = [self._system_turn]
            self._buffers[user_id] = buffer
        return buffer

    def append_turn_and_maybe_trim(
        self, user_id: str, role: Role, content: str
    ) -> list[ConversationTurn]:
        buffer = self._buffer(user_id)
        buffer.append(ConversationTurn(role, content))
        while len(buffer) > self._limit:
            del buffer[1:3]
        return list(buffer)

    def snapshot(self, user_id: str) -> list[ConversationTurn]:
        return list(self._buffer(user_id))

    def discard_last(self, user_id: str) -> ConversationTurn | None:
        buffer = self._buffers.get(user_id)
        if not buffer or len(buffer) == 1:
            return None
        return buffer.pop()

    def reset(self, user_id: str) -> None:
        self._buffers.pop(user_id, None)
        self._locks.pop(user_id, None)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._buffers

    def __len__(self) -> int:
        return len(self._buffers)


__all__ = ["ConversationStore", "ConversationTurn", "DEFAULT_HISTORY_LIMIT", "Role"]
