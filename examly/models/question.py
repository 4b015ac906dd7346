from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from examly.models.base import Base
from datetime import datetime
import pytz

# Set PKT timezone
PKT = pytz.timezone('Asia/Karachi')

class Question(Base):
    __tablename__ = "questions"

    id = Column(String, primary_key=True)
    question_text = Column(Text, nullable=False)
    question_text_ur = Column(Text, nullable=True)
    option_a = Column(String, nullable=True)
    option_b = Column(String, nullable=True)
    option_c = Column(String, nullable=True)
    option_d = Column(String, nullable=True)
    option_a_ur = Column(String, nullable=True)
    option_b_ur = Column(String, nullable=True)
    option_c_ur = Column(String, nullable=True)
    option_d_ur = Column(String, nullable=True)
    correct_option = Column(String(1), nullable=True)  # 'A', 'B', 'C', 'D'
    answer_text = Column(Text, nullable=True)
    difficulty = Column(String, nullable=False, default="medium")  # 'easy', 'medium', 'hard'
    question_type = Column(String, nullable=False)  # 'mcq', 'short', 'long'
    source_type = Column(String, nullable=False, default="book")  # 'book', 'past_paper', 'model_paper', 'custom'
    subject_id = Column(String, ForeignKey("subjects.id"), nullable=False)
    chapter_id = Column(String, ForeignKey("chapters.id"), nullable=True)
    topic_id = Column(String, ForeignKey("topics.id"), nullable=True)
    class_subject_id = Column(String, ForeignKey("class_subjects.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(PKT))

    chapter = relationship("Chapter")

    def __repr__(self):
        return f"<Question(id={self.id}, type={self.question_type}, text={self.question_text[:20]})>"
