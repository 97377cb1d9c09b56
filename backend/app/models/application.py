from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base


class Application(Base):
    """A public job-application submission awaiting staff review.

    Status only ever moves pending -> approved or pending -> rejected. Approval
    copies the personal fields into a new Candidate; no link is kept.
    """
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), index=True, nullable=False)
    phone = Column(String(50), nullable=True)
    current_position = Column(String(255), nullable=True)
    profile = Column(String(100), nullable=True)
    experience = Column(Text, nullable=True)
    education = Column(Text, nullable=True)
    skills = Column(JSON, nullable=True)
    languages = Column(Text, nullable=True)
    certifications = Column(Text, nullable=True)
    hobbies = Column(Text, nullable=True)
    birth_date = Column(String(20), nullable=True)
    summary = Column(Text, nullable=True)
    availability = Column(String(5), nullable=False, default="no")
    cover_letter = Column(Text, nullable=True)
    resume_path = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
