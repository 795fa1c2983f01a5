"""
Storage interfaces for the four aggregates the backend persists.

The SQLAlchemy classes next to this module are the only implementations;
services depend on these interfaces so another store can be dropped in.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence

from study_buddy.models.chat import ChatMessage
from study_buddy.models.mood import MoodLog
from study_buddy.models.subject import Subject
from study_buddy.models.user import User


class UserStore(ABC):
    @abstractmethod
    async def get(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    async def add(self, name: str, email: str, password_hash: str) -> User: ...

    @abstractmethod
    async def touch_last_login(self, user: User, when: datetime) -> None: ...


class SubjectStore(ABC):
    @abstractmethod
    async def list(self) -> List[Subject]: ...

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Subject]: ...


class ChatMessageStore(ABC):
    @abstractmethod
    def add(self, message: ChatMessage) -> None:
        """Stage a message; it is written on the session's next commit."""

    @abstractmethod
    async def history(self, user_id: int, subject_id: int, limit: Optional[int] = None) -> List[ChatMessage]: ...

    @abstractmethod
    async def get_for_user(self, message_id: int, user_id: int) -> Optional[ChatMessage]: ...

    @abstractmethod
    async def delete_for(self, user_id: int, subject_id: int) -> int: ...


class MoodLogStore(ABC):
    @abstractmethod
    def add(self, entry: MoodLog) -> None: ...

    @abstractmethod
    async def recent(self, user_id: int, since: Optional[datetime] = None) -> Sequence[MoodLog]: ...

    @abstractmethod
    async def delete_for(self, user_id: int, subject_id: int) -> int: ...
