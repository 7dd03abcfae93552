from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import NotFoundError, ValidationError
from .models import (
    BUSINESS_STATUSES,
    MAX_ID,
    MAX_RATING,
    MIN_RATING,
    STATUS_PENDING,
    Business,
    Review,
    utc_now,
)
from .ratings import load_average_ratings


logger = logging.getLogger(__name__)

REQUIRED_BUSINESS_FIELDS = ("name", "category", "location", "description")
OPTIONAL_BUSINESS_FIELDS = ("phone", "email", "website", "hours", "image")
REQUIRED_REVIEW_FIELDS = ("reviewer_name", "text", "rating")


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _missing(fields: Mapping[str, Any], names: tuple[str, ...]) -> list[str]:
    missing = []
    for name in names:
        value = fields.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


def _parse_coordinate(value: Any, name: str, limit: float) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Field '{name}' must be a number.")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Field '{name}' must be a number.") from None
    if not -limit <= number <= limit:
        raise ValidationError(f"Field '{name}' must be between {-limit:g} and {limit:g}.")
    return number


def parse_rating(value: Any) -> int:
    """Coerce a submitted rating to an int in [1, 5] or raise ValidationError."""
    if value is None or isinstance(value, bool):
        raise ValidationError("Rating must be a whole number between 1 and 5.")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError("Rating must be a whole number between 1 and 5.")
        value = int(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped.lstrip("-").isdigit():
            raise ValidationError("Rating must be a whole number between 1 and 5.")
        value = int(stripped)
    elif not isinstance(value, int):
        raise ValidationError("Rating must be a whole number between 1 and 5.")
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError("Rating must be a whole number between 1 and 5.")
    return value


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        # SQLite hands DateTime(timezone=True) values back naive; they were written as UTC.
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def serialize_business(row: Business, average: float) -> dict:
    return {
        "id": row.id,
        "name": row.name,
        "category": row.category,
        "location": row.location,
        "description": row.description,
        "phone": row.phone,
        "email": row.email,
        "website": row.website,
        "hours": row.hours,
        "image": row.image,
        "latitude": row.latitude,
        "longitude": row.longitude,
        "status": row.status,
        "created_at": _isoformat(row.created_at),
        "average_rating": average,
    }


def serialize_review(row: Review) -> dict:
    return {
        "id": row.id,
        "business_id": row.business_id,
        "reviewer_name": row.reviewer_name,
        "text": row.text,
        "rating": row.rating,
        "created_at": _isoformat(row.created_at),
    }


def _valid_id(business_id: int) -> bool:
    return 1 <= business_id <= MAX_ID


def _load_business(session: Session, business_id: int) -> Business:
    if not _valid_id(business_id):
        raise NotFoundError("Business not found.")
    row = session.get(Business, business_id, populate_existing=True)
    if row is None:
        raise NotFoundError("Business not found.")
    return row


def _business_exists(session: Session, business_id: int) -> bool:
    if not _valid_id(business_id):
        return False
    found = session.execute(select(Business.id).where(Business.id == business_id)).scalar_one_or_none()
    return found is not None


def create_business(session: Session, fields: Mapping[str, Any]) -> dict:
    missing = _missing(fields, REQUIRED_BUSINESS_FIELDS)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}.")

    row = Business(
        **{name: _clean_text(fields.get(name)) for name in REQUIRED_BUSINESS_FIELDS},
        **{name: _clean_text(fields.get(name)) for name in OPTIONAL_BUSINESS_FIELDS},
        latitude=_parse_coordinate(fields.get("latitude"), "latitude", 90.0),
        longitude=_parse_coordinate(fields.get("longitude"), "longitude", 180.0),
        status=STATUS_PENDING,
        created_at=utc_now(),
    )
    session.add(row)
    session.flush()
    return serialize_business(row, 0.0)


def list_businesses(
    session: Session,
    status: Optional[str] = None,
    category: Optional[str] = None,
) -> list[dict]:
    """List businesses newest first; ``status=None`` means every status."""
    stmt = select(Business).order_by(Business.created_at.desc(), Business.id.desc())
    if status is not None:
        if status not in BUSINESS_STATUSES:
            raise ValidationError(f"Unknown status '{status}'.")
        stmt = stmt.where(Business.status == status)
    if category:
        stmt = stmt.where(Business.category == category)

    rows = session.execute(stmt).scalars().all()
    averages = load_average_ratings(session, [row.id for row in rows])
    return [serialize_business(row, averages[row.id]) for row in rows]


def list_categories(session: Session, status: Optional[str] = None) -> list[str]:
    stmt = select(Business.category).group_by(Business.category).order_by(Business.category)
    if status is not None:
        stmt = stmt.where(Business.status == status)
    return [category for category in session.execute(stmt).scalars().all() if category]


def get_business(session: Session, business_id: int) -> dict:
    row = _load_business(session, business_id)
    averages = load_average_ratings(session, [row.id])
    return serialize_business(row, averages[row.id])


def update_business_status(session: Session, business_id: int, new_status: str) -> dict:
    if new_status not in BUSINESS_STATUSES:
        raise ValidationError(f"Unknown status '{new_status}'.")
    if not _valid_id(business_id):
        raise NotFoundError("Business not found.")

    result = session.execute(
        update(Business)
        .where(Business.id == business_id)
        .values(status=new_status)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError("Business not found.")
    return get_business(session, business_id)


def delete_business(session: Session, business_id: int) -> dict:
    record = get_business(session, business_id)
    # Reviews go with the row through ON DELETE CASCADE.
    result = session.execute(
        delete(Business)
        .where(Business.id == business_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError("Business not found.")
    return record


def validate_review(fields: Mapping[str, Any]) -> dict:
    """Return the cleaned reviewer_name, text and rating, or raise ValidationError."""
    missing = _missing(fields, REQUIRED_REVIEW_FIELDS)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}.")
    return {
        "reviewer_name": _clean_text(fields.get("reviewer_name")),
        "text": _clean_text(fields.get("text")),
        "rating": parse_rating(fields.get("rating")),
    }


def create_review(session: Session, business_id: int, fields: Mapping[str, Any]) -> dict:
    cleaned = validate_review(fields)

    if not _business_exists(session, business_id):
        raise NotFoundError("Business not found.")

    row = Review(
        business_id=business_id,
        **cleaned,
        created_at=utc_now(),
    )
    session.add(row)
    try:
        session.flush()
    except IntegrityError:
        # The business was deleted between the existence check and the insert.
        logger.warning("Review insert lost its business %s to a concurrent delete", business_id)
        raise NotFoundError("Business not found.") from None
    return serialize_review(row)


def list_reviews(session: Session, business_id: int) -> list[dict]:
    if not _business_exists(session, business_id):
        raise NotFoundError("Business not found.")
    rows = session.execute(
        select(Review)
        .where(Review.business_id == business_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    ).scalars().all()
    return [serialize_review(row) for row in rows]
