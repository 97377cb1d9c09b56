from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    contact_person = Column(String(255), nullable=True)
    contact_function = Column(String(255), nullable=True)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    # Free text; the public lead form joins street, city, postal code and country.
    address = Column(Text, nullable=True)
    industry = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="active")  # active | inactive | lead | pending
    notes = Column(Text, nullable=True)
    vat_number = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
