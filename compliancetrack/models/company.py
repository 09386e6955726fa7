# compliancetrack/models/company.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from compliancetrack.db.base import Base


class Company(Base):
    """Tenant: a company profile whose obligations are isolated from other companies'."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False, index=True)
    registration_number = Column(String(64), nullable=True, index=True)  # VAT / company number
    industry_sector = Column(String(100), nullable=True)

    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)

    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    responsible_person = Column(String(255), nullable=True)
    responsible_person_title = Column(String(255), nullable=True)
    employee_count = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    members = relationship(
        "CompanyMember",
        back_populates="company",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
