from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Text
from examly.models.base import Base
from datetime import datetime
import pytz

# Set PKT timezone
PKT = pytz.timezone('Asia/Karachi')

class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True)  # Supabase UID
    full_name = Column(String, nullable=True)
    email = Column(String, unique=True, nullable=True)
    role = Column(String, default="teacher")  # 'admin', 'teacher', 'student'
    institution = Column(String, nullable=True)
    logo = Column(Text, nullable=True)  # URL or data: URI
    cellno = Column(String, nullable=True)
    papers_generated = Column(Integer, default=0)
    subscription_status = Column(String, default="inactive")
    trial_given = Column(Boolean, default=False)
    trial_ends_at = Column(DateTime, nullable=True)
    referral_code = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(PKT))

    def __repr__(self):
        return f"<Profile(id={self.id}, role={self.role})>"

class Package(Base):
    __tablename__ = "packages"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)  # 'paper_pack' or 'subscription'
    paper_quantity = Column(Integer, nullable=True)
    duration_days = Column(Integer, nullable=True)

    def __repr__(self):
        return f"<Package(id={self.id}, name={self.name}, type={self.type})>"

class UserPackage(Base):
    __tablename__ = "user_packages"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False)
    package_id = Column(String, ForeignKey("packages.id"), nullable=True)
    is_active = Column(Boolean, default=True)
    is_trial = Column(Boolean, default=False)
    papers_remaining = Column(Integer, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(PKT))

    def __repr__(self):
        return f"<UserPackage(id={self.id}, user_id={self.user_id}, is_trial={self.is_trial})>"
