from sqlalchemy import Column, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from examly.models.base import Base

class ClassSubject(Base):
    __tablename__ = "class_subjects"

    id = Column(String, primary_key=True)
    class_id = Column(String, ForeignKey("classes.id"), nullable=False)
    subject_id = Column(String, ForeignKey("subjects.id"), nullable=False)

    # A subject is offered once per class
    __table_args__ = (
        UniqueConstraint('class_id', 'subject_id', name='unique_class_subject'),
    )

    school_class = relationship("SchoolClass", back_populates="class_subjects")
    subject = relationship("Subject")

    def __repr__(self):
        return f"<ClassSubject(id={self.id}, class_id={self.class_id}, subject_id={self.subject_id})>"
