from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from examly.models.base import Base
from datetime import datetime
import pytz

# Set PKT timezone
PKT = pytz.timezone('Asia/Karachi')

class Subject(Base):
    __tablename__ = "subjects"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(PKT))

    chapters = relationship("Chapter", back_populates="subject")

    def __repr__(self):
        return f"<Subject(id={self.id}, name={self.name})>"
