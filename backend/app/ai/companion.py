from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..metrics import CHAT_PERSIST_FAILURES
from ..services.conversation import ConversationStore, Role
from ..services.storage import StorageService
from .local_llm import generate_local_reply
from .openai_client import AIUnavailable, OpenAIClient
from .templates import COMFORT_SUFFIX

logger = logging.getLogger(__name__)


class ChatCompanion:
    """Answers chat messages using the per-user conversation buffer as context.

    Every user and assistant turn is mirrored to the store by a detached task;
    a failed write is logged and counted but never reaches the caller.
    """

    def __init__(
        self,
        *,
        conversations: ConversationStore,
        client: OpenAIClient,
        storage: StorageService,
    ) -> None:
        self._conversations = conversations
        self._client = client
        self._storage = storage
        self._pending: set[asyncio.Task[None]] = set()

    async def reply(self, user_id: str, message: str) -> str:
        async with self._conversations.lock(user_id):
            turns = self._conversations.append_turn_and_maybe_trim(user_id, "user", message)
            self._mirror(user_id, "user", message)

            if self._client.available:
                context = [turn.as_message() for turn in turns]
                context[-1]["content"] = f"{message}{COMFORT_SUFFIX}"
                try:
                    response = await self._client.complete(context, kind="chat")
                    if not response:
                        raise AIUnavailable("empty chat response")
                except BaseException:
                    # keep the buffer in user/assistant pairs
                    self._conversations.discard_last(user_id)
                    raise
            else:
                response = generate_local_reply(message)

            self._conversations.append_turn_and_maybe_trim(user_id, "assistant", response)
            self._mirror(user_id, "assistant", response)
            return response

    def _mirror(self, user_id: str, sender: Role, message: str) -> None:
        task = asyncio.create_task(
            self._persist(user_id, sender, message, datetime.utcnow()),
            name=f"chat-mirror-{sender}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _persist(
        self, user_id: str, sender: str, message: str, timestamp: datetime
    ) -> None:
        try:
            await self._storage.add_chat_message(
                user_id=user_id,
                sender=sender,
                message=message,
                timestamp=timestamp,
            )
        except Exception as exc:
            CHAT_PERSIST_FAILURES.inc()
            logger.warning(
                "Failed to persist chat turn: %s",
                exc,
                extra={"user_id": user_id},
                exc_info=True,
            )

    async def drain(self) -> None:
        """Wait for in-flight transcript writes."""

        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def forget(self, user_id: str) -> None:
        """Drop a user's buffer once any in-flight reply for them has finished."""

        async with self._conversations.lock(user_id):
            self._conversations.reset(user_id)
