from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Optional

from study_buddy.models.chat import ChatMessage


class ChatRequest(BaseModel):
    userId: Optional[int] = None
    message: str = Field(min_length=1)
    subject: str = Field(min_length=1)


class SentimentOut(BaseModel):
    score: float
    magnitude: float


class ChatResponse(BaseModel):
    aiResponse: str
    sentiment: SentimentOut
    usingFallback: bool = False


class ContextUpload(BaseModel):
    userId: Optional[int] = None
    subject: str = Field(min_length=1)
    fileName: Optional[str] = None
    content: str


class ContextUploadResponse(BaseModel):
    message: str
    fileName: Optional[str] = None
    characters: int


class ChatHistoryItem(BaseModel):
    id: int
    sender: str
    text: str
    timestamp: datetime
    subject: str
    isSaved: bool
    sentimentScore: Optional[float] = None
    sentimentMagnitude: Optional[float] = None

    @classmethod
    def from_message(cls, message: ChatMessage) -> "ChatHistoryItem":
        return cls(
            id=message.id,
            sender=message.sender,
            text=message.text,
            timestamp=message.timestamp,
            subject=message.subject.name,
            isSaved=message.is_saved,
            sentimentScore=message.sentiment_score,
            sentimentMagnitude=message.sentiment_magnitude,
        )


class ChatHistoryList(BaseModel):
    history: List[ChatHistoryItem]


class ClearHistoryRequest(BaseModel):
    subject: str = Field(min_length=1)


class SavedFlagUpdate(BaseModel):
    saved: bool


class SavedFlagResponse(BaseModel):
    id: int
    isSaved: bool


class MessageResponse(BaseModel):
    message: str
