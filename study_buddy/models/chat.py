from sqlalchemy import Column, Integer, String, ForeignKey, Text, DateTime, Boolean, Float, CheckConstraint, Index
from sqlalchemy.orm import relationship
from study_buddy.core.database import Base
from study_buddy.utils.timeutils import utcnow

SENDERS = ("user", "ai", "system")

class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    sender = Column(String(10), nullable=False)
    text = Column(Text, nullable=False)
    is_saved = Column(Boolean, default=False, nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    sentiment_score = Column(Float, nullable=True)
    sentiment_magnitude = Column(Float, nullable=True)

    user = relationship("User", back_populates="chat_messages")
    subject = relationship("Subject", lazy="joined")

    __table_args__ = (
        CheckConstraint("sender IN ('user', 'ai', 'system')", name="ck_chat_messages_sender"),
        Index("idx_chat_user_subject_time", "user_id", "subject_id", "timestamp"),
    )
