from datetime import datetime
from pydantic import BaseModel
from typing import List, Optional

from study_buddy.models.mood import MoodLog


class MoodLogItem(BaseModel):
    id: int
    subject: str
    score: float
    magnitude: float
    message: Optional[str] = None
    timestamp: datetime

    @classmethod
    def from_entry(cls, entry: MoodLog) -> "MoodLogItem":
        return cls(
            id=entry.id,
            subject=entry.subject.name,
            score=entry.score,
            magnitude=entry.magnitude,
            message=entry.message,
            timestamp=entry.timestamp,
        )


class MoodLogList(BaseModel):
    moodLogs: List[MoodLogItem]
