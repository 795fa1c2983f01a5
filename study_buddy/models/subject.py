from sqlalchemy import Column, Integer, String
from study_buddy.core.database import Base

class Subject(Base):
    """Tutoring topic; reference data seeded at startup."""
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)
    color = Column(String(16), nullable=False)
    icon = Column(String(50), nullable=False)
