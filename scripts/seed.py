#!/usr/bin/env python3
"""
Demo seed:
- Ensures a demo user, one company owned by that user and a handful of
  obligations spread across categories, severities and deadlines.
- Safe to run multiple times (idempotent).
"""
import os
import sys
from datetime import date, timedelta

# enable 'compliancetrack.' imports
sys.path.append(os.getcwd())

from sqlalchemy.orm import Session

from compliancetrack.core.security import get_password_hash
from compliancetrack.db.session import SessionLocal, engine
from compliancetrack.models import Base
from compliancetrack.models.company import Company
from compliancetrack.models.company_member import CompanyMember
from compliancetrack.models.obligation import Obligation
from compliancetrack.models.user import User

DEMO_OBLIGATIONS = [
    # title, category, days from today, recurrence, status, severity
    ("Quarterly VAT return", "tax_financial", 5, "quarterly", "pending", "high"),
    ("Annual financial statements", "tax_financial", 60, "annual", "in_progress", "high"),
    ("Payroll withholding filing", "tax_financial", -3, "monthly", "pending", "medium"),
    ("Fire safety certificate renewal", "licenses_permits", 20, "annual", "pending", "medium"),
    ("Food handling permit", "licenses_permits", 120, "annual", "completed", "low"),
    ("GDPR records of processing review", "regulatory_legal", 10, "annual", "pending", "high"),
    ("Workplace safety training", "regulatory_legal", 2, "one_time", "in_progress", "low"),
]


def ensure_user(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user:
        return user
    user = User(
        email=email,
        full_name="Demo Owner",
        is_active=True,
        hashed_password=get_password_hash(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def ensure_company(db: Session, owner: User, name: str) -> Company:
    company = (
        db.query(Company)
        .join(CompanyMember, CompanyMember.company_id == Company.id)
        .filter(CompanyMember.user_id == owner.id, Company.name == name)
        .first()
    )
    if company:
        return company
    company = Company(
        name=name,
        registration_number="IT01234567890",
        industry_sector="Retail",
        city="Milan",
        country="Italy",
        employee_count=25,
    )
    db.add(company)
    db.flush()
    db.add(CompanyMember(company_id=company.id, user_id=owner.id, role="owner"))
    db.commit()
    db.refresh(company)
    return company


def ensure_obligations(db: Session, company: Company, owner: User) -> int:
    today = date.today()
    created = 0
    for title, category, offset, recurrence, status, severity in DEMO_OBLIGATIONS:
        exists = (
            db.query(Obligation)
            .filter(Obligation.company_id == company.id, Obligation.title == title)
            .first()
        )
        if exists:
            continue
        db.add(
            Obligation(
                company_id=company.id,
                created_by=owner.id,
                title=title,
                category=category,
                deadline=today + timedelta(days=offset),
                recurrence=recurrence,
                status=status,
                risk_level=severity,
                assigned_to="Demo Owner",
            )
        )
        created += 1
    db.commit()
    return created


def main():
    email = os.environ.get("SEED_DEMO_EMAIL", "demo@example.com")
    password = os.environ.get("SEED_DEMO_PASSWORD", "ChangeMe123!")

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = ensure_user(db, email, password)
        company = ensure_company(db, user, "Demo Company S.r.l.")
        n = ensure_obligations(db, company, user)
        print(f"OK: demo user {user.email} (id={user.id}), company id={company.id}, {n} obligations added")
    finally:
        db.close()


if __name__ == "__main__":
    main()
