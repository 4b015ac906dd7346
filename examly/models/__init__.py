from .base import Base
from .school_class import SchoolClass
from .subject import Subject
from .class_subject import ClassSubject
from .chapter import Chapter
from .topic import Topic
from .question import Question
from .paper import Paper, PaperQuestion
from .profile import Package, Profile, UserPackage

__all__ = [
    "Base", "SchoolClass", "Subject", "ClassSubject", "Chapter", "Topic",
    "Question", "Paper", "PaperQuestion", "Package", "Profile", "UserPackage",
]
