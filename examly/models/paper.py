from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from examly.models.base import Base
from datetime import datetime
import pytz

# Set PKT timezone
PKT = pytz.timezone('Asia/Karachi')

class Paper(Base):
    __tablename__ = "papers"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    created_by = Column(String, ForeignKey("profiles.id"), nullable=False)
    class_name = Column(String, nullable=True)
    subject_name = Column(String, nullable=True)
    paperPdf = Column(String, nullable=True)  # public URL in the papers bucket
    paperKey = Column(String, nullable=True)  # public URL in the key bucket
    created_at = Column(DateTime, default=lambda: datetime.now(PKT))

    questions = relationship("PaperQuestion", back_populates="paper", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Paper(id={self.id}, title={self.title})>"

class PaperQuestion(Base):
    __tablename__ = "paper_questions"

    id = Column(Integer, primary_key=True)
    paper_id = Column(String, ForeignKey("papers.id"), nullable=False)
    question_id = Column(String, ForeignKey("questions.id"), nullable=False)
    order_number = Column(Integer, nullable=False)
    question_type = Column(String, nullable=False)

    # Each position of a paper holds one question
    __table_args__ = (
        UniqueConstraint('paper_id', 'order_number', name='unique_paper_order'),
    )

    paper = relationship("Paper", back_populates="questions")

    def __repr__(self):
        return f"<PaperQuestion(paper_id={self.paper_id}, order={self.order_number}, question_id={self.question_id})>"
