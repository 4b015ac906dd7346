from sqlalchemy import Column, String, ForeignKey
from sqlalchemy.orm import relationship
from examly.models.base import Base

class Topic(Base):
    __tablename__ = "topics"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    chapter_id = Column(String, ForeignKey("chapters.id"), nullable=False)

    chapter = relationship("Chapter", back_populates="topics")

    def __repr__(self):
        return f"<Topic(id={self.id}, name={self.name})>"
