from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import CheckConstraint, Column, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

NOTES_MAX_LENGTH = 500


def utcnow() -> datetime:
    """Naive UTC timestamp; every datetime column is stored this way."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class Category(str, Enum):
    # income
    CLIENT_PAYMENTS = "clientPayments"
    ROYALTIES = "royalties"
    AFFILIATE_EARNINGS = "affiliateEarnings"
    FREELANCE_PLATFORMS = "freelancePlatforms"
    PASSIVE_INCOME = "passiveIncome"

    # expense
    SOFTWARE_SUBSCRIPTIONS = "softwareSubscriptions"
    MARKETING = "marketing"
    OFFICE_SUPPLIES = "officeSupplies"
    INTERNET_PHONE = "internetPhone"
    EDUCATION = "education"
    TRANSPORTATION = "transportation"
    CO_WORKING_SPACE = "coWorkingSpace"
    FREELANCE_PLATFORM_FEES = "freelancePlatformFees"
    WEBSITE_HOSTING = "websiteHosting"
    BUSINESS_MEALS = "businessMeals"
    TAX_ACCOUNTING = "taxAccounting"
    INSURANCE_LEGAL = "insuranceLegal"
    MISCELLANEOUS = "miscellaneous"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(150), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    transactions = relationship("Transaction", back_populates="user", cascade="all, delete-orphan")


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_transactions_amount_non_negative"),
        Index("ix_transactions_user_id_date", "user_id", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # enum membership is checked in crud.add_transaction, not by the database
    transaction_type = Column(String(10), nullable=False)
    category = Column(String(50), nullable=False)
    amount = Column(Float, nullable=False)
    date = Column(DateTime, nullable=False)
    notes = Column(String(NOTES_MAX_LENGTH), nullable=True)

    user = relationship("User", back_populates="transactions")
