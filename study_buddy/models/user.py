from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from study_buddy.core.database import Base
from study_buddy.utils.timeutils import utcnow

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    avatar_color = Column(String(16), default="#4361ee")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)

    chat_messages = relationship("ChatMessage", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    mood_logs = relationship("MoodLog", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
