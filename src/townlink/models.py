from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .db import Base


STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
BUSINESS_STATUSES = (STATUS_PENDING, STATUS_APPROVED)

MIN_RATING = 1
MAX_RATING = 5

# Largest id an INTEGER primary key can hold on every supported backend.
MAX_ID = 2**31 - 1


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Business(Base):
    __tablename__ = "businesses"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'approved')", name="businesses_status_check"),
        Index("businesses_status_idx", "status"),
        Index("businesses_category_idx", "category"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    email: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    website: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    hours: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    image: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=STATUS_PENDING, server_default=STATUS_PENDING)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now, server_default=func.now())

    reviews: Mapped[list[Review]] = relationship(
        "Review", back_populates="business", cascade="all, delete-orphan", passive_deletes=True
    )


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="reviews_rating_check"),
        Index("reviews_business_idx", "business_id"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)
    reviewer_name: Mapped[str] = mapped_column(Text, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now, server_default=func.now())

    business: Mapped[Business] = relationship("Business", back_populates="reviews")
