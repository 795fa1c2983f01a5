from typing import Dict, Tuple

from study_buddy.utils.logger import get_logger

logger = get_logger("study_buddy.services.context_cache")


class ContextCache:
    """
    Reference text uploaded per (user, subject).

    Lives for the lifetime of the process only: nothing is persisted, entries
    never expire, and separate server processes do not share entries.
    Concurrent writers for the same pair resolve last-write-wins.
    """

    def __init__(self):
        self._entries: Dict[Tuple[int, str], str] = {}

    def store(self, user_id: int, subject: str, text: str) -> None:
        self._entries[(user_id, subject)] = text
        logger.info("Context stored", extra={"user_id": user_id, "subject": subject, "characters": len(text)})

    def fetch(self, user_id: int, subject: str) -> str:
        return self._entries.get((user_id, subject), "")

    def __len__(self) -> int:
        return len(self._entries)


# One cache per process; routes receive it through get_context_cache
context_cache = ContextCache()


def get_context_cache() -> ContextCache:
    return context_cache
