from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from examly.models.base import Base
from datetime import datetime
import pytz

# Set PKT timezone
PKT = pytz.timezone('Asia/Karachi')

class SchoolClass(Base):
    __tablename__ = "classes"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)  # e.g. '9', '10', 'job-prep'
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(PKT))

    class_subjects = relationship("ClassSubject", back_populates="school_class", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<SchoolClass(id={self.id}, name={self.name})>"
