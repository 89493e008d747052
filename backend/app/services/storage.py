from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import or_, select, text
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..db.models import ChatMessage, MoodEntry, SettingEntry, User


class StorageService:
    """Persist users, mood entries and chat transcripts."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def healthcheck(self) -> None:
        async with self._session_factory() as session:
            await session.execute(text("SELECT 1"))

    # -- settings helpers ------------------------------------------------
    async def get_setting(self, key: str) -> str | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SettingEntry).where(SettingEntry.key == key)
            )
            entry = result.scalar_one_or_none()
            return entry.value if entry else None

    # -- user management -------------------------------------------------
    async def create_user(self, *, username: str, email: str, password_hash: str) -> User:
        async with self._session_factory() as session:
            user = User(username=username, email=email, password_hash=password_hash)
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    async def find_user_by_email_or_username(self, email: str, username: str) -> User | None:
        async with self._session_factory() as session:
            return await session.scalar(
                select(User).where(or_(User.email == email, User.username == username)).limit(1)
            )

    async def get_user_by_email(self, email: str) -> User | None:
        async with self._session_factory() as session:
            return await session.scalar(select(User).where(User.email == email))

    async def get_user_by_id(self, user_id: str) -> User | None:
        async with self._session_factory() as session:
            return await session.get(User, user_id)

    async def delete_user(self, user_id: str) -> bool:
        async with self._session_factory() as session:
            user = await session.get(User, user_id)
            if user is None:
                return False
            await session.delete(user)
            await session.commit()
            return True

    # -- mood entries ----------------------------------------------------
    async def add_mood_entry(self, *, user_id: str, mood: str, note: str | None) -> MoodEntry:
        now = datetime.utcnow()
        async with self._session_factory() as session:
            entry = MoodEntry(
                user_id=user_id,
                mood=mood,
                note=note or "",
                date=now.date(),
                created_at=now,
            )
            session.add(entry)
            await session.commit()
            await session.refresh(entry)
            return entry

    async def list_mood_entries(
        self,
        *,
        user_id: str,
        limit: int | None = None,
    ) -> Sequence[MoodEntry]:
        """Entries newest first."""

        query = (
            select(MoodEntry)
            .where(MoodEntry.user_id == user_id)
            .order_by(MoodEntry.created_at.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        async with self._session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def list_moods_by_date(self, user_id: str) -> Sequence[MoodEntry]:
        """Entries in ascending date order, insertion order within a day."""

        async with self._session_factory() as session:
            result = await session.execute(
                select(MoodEntry)
                .where(MoodEntry.user_id == user_id)
                .order_by(MoodEntry.date.asc(), MoodEntry.created_at.asc())
            )
            return list(result.scalars().all())

    async def recent_moods(self, user_id: str, limit: int = 7) -> list[str]:
        """Mood symbols of the latest ``limit`` entries, oldest first."""

        entries = await self.list_mood_entries(user_id=user_id, limit=limit)
        return [entry.mood for entry in reversed(entries)]

    # -- chat transcript -------------------------------------------------
    async def add_chat_message(
        self,
        *,
        user_id: str,
        sender: str,
        message: str,
        timestamp: datetime | None = None,
    ) -> ChatMessage:
        async with self._session_factory() as session:
            row = ChatMessage(
                user_id=user_id,
                sender=sender,
                message=message,
                timestamp=timestamp or datetime.utcnow(),
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return row

    async def list_chat_messages(
        self, user_id: str, limit: int = 100
    ) -> Sequence[ChatMessage]:
        """Latest ``limit`` messages, oldest first."""

        async with self._session_factory() as session:
            result = await session.execute(
                select(ChatMessage)
                .where(ChatMessage.user_id == user_id)
                .order_by(ChatMessage.timestamp.desc(), ChatMessage.id.desc())
                .limit(limit)
            )
            rows = list(result.scalars().all())
        rows.reverse()
        return rows


__all__ = ["StorageService"]
