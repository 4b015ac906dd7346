from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from examly.models.base import Base
from datetime import datetime
import pytz

# Set PKT timezone
PKT = pytz.timezone('Asia/Karachi')

class Chapter(Base):
    __tablename__ = "chapters"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    chapterNo = Column(Integer, nullable=False)
    subject_id = Column(String, ForeignKey("subjects.id"), nullable=False)
    class_id = Column(String, ForeignKey("classes.id"), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(PKT))

    subject = relationship("Subject", back_populates="chapters")
    topics = relationship("Topic", back_populates="chapter", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Chapter(id={self.id}, chapterNo={self.chapterNo}, name={self.name})>"
