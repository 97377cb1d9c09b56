from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base


class Candidate(Base):
    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=True)
    location = Column(String(255), nullable=True)
    current_position = Column(String(255), nullable=True)
    profile = Column(String(100), nullable=True)  # e.g. Manual Tester, Automation Tester
    # JSON-encoded text: either a free-text blob or a list of structured entries.
    experience = Column(Text, nullable=True)
    education = Column(Text, nullable=True)
    skills = Column(JSON, nullable=True)  # list[str], order preserved
    languages = Column(Text, nullable=True)
    certifications = Column(Text, nullable=True)
    hobbies = Column(Text, nullable=True)
    birth_date = Column(String(20), nullable=True)
    summary = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    availability = Column(String(5), nullable=False, default="no")  # yes | no
    linkedin_url = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default="active")  # active | interviewing | placed | inactive
    resume_path = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
