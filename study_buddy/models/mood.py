from sqlalchemy import Column, Integer, ForeignKey, Text, DateTime, Float, CheckConstraint, Index
from sqlalchemy.orm import relationship
from study_buddy.core.database import Base
from study_buddy.utils.timeutils import utcnow

class MoodLog(Base):
    """Sentiment of one user message, recorded alongside the chat turn."""
    __tablename__ = "mood_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    score = Column(Float, nullable=False)
    magnitude = Column(Float, nullable=False)
    message = Column(Text)

    user = relationship("User", back_populates="mood_logs")
    subject = relationship("Subject", lazy="joined")

    __table_args__ = (
        CheckConstraint("score >= -1 AND score <= 1", name="ck_mood_logs_score"),
        CheckConstraint("magnitude >= 0 AND magnitude <= 1", name="ck_mood_logs_magnitude"),
        Index("idx_mood_user_time", "user_id", "timestamp"),
    )
