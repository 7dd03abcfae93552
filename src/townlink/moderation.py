"""Business visibility state machine.

``pending`` is where every submission starts and is never shown to the public.
``approved`` is the only publicly visible state. Rejecting resets a business
to ``pending``; deleting is final and takes the business's reviews with it.
Every transition is an explicit admin action and a single statement against
the store, and repeating one lands on the same state.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from .directory import (
    create_business,
    create_review,
    delete_business,
    get_business,
    list_businesses,
    list_reviews,
    update_business_status,
    validate_review,
)
from .errors import NotFoundError
from .models import STATUS_APPROVED, STATUS_PENDING


logger = logging.getLogger(__name__)

PUBLIC_STATUS = STATUS_APPROVED


def is_public(record: Mapping[str, Any]) -> bool:
    return record.get("status") == PUBLIC_STATUS


def submit_business(session: Session, fields: Mapping[str, Any]) -> dict:
    record = create_business(session, fields)
    logger.info("Business %s submitted for approval (category=%s)", record["id"], record["category"])
    return record


def approve_business(session: Session, business_id: int) -> dict:
    record = update_business_status(session, business_id, STATUS_APPROVED)
    logger.info("Business %s approved", business_id)
    return record


def reject_business(session: Session, business_id: int) -> dict:
    record = update_business_status(session, business_id, STATUS_PENDING)
    logger.info("Business %s reset to pending", business_id)
    return record


def remove_business(session: Session, business_id: int) -> dict:
    record = delete_business(session, business_id)
    logger.info("Business %s deleted with its reviews", business_id)
    return record


def list_public(session: Session, category: Optional[str] = None) -> list[dict]:
    return list_businesses(session, status=PUBLIC_STATUS, category=category)


def list_for_admin(session: Session, status: Optional[str] = None, category: Optional[str] = None) -> list[dict]:
    return list_businesses(session, status=status, category=category)


def list_pending(session: Session) -> list[dict]:
    return list_businesses(session, status=STATUS_PENDING)


def get_visible_business(session: Session, business_id: int, include_unapproved: bool = False) -> dict:
    record = get_business(session, business_id)
    if not include_unapproved and not is_public(record):
        # Non-approved businesses answer exactly like missing ids.
        raise NotFoundError("Business not found.")
    return record


def submit_review(session: Session, business_id: int, fields: Mapping[str, Any], include_unapproved: bool = False) -> dict:
    """Attach a review to a business the caller is allowed to see.

    Fields are checked first, so a malformed review is rejected without a
    store lookup.
    """
    validate_review(fields)
    get_visible_business(session, business_id, include_unapproved=include_unapproved)
    record = create_review(session, business_id, fields)
    logger.info("Review %s added to business %s (rating=%s)", record["id"], business_id, record["rating"])
    return record


def list_visible_reviews(session: Session, business_id: int, include_unapproved: bool = False) -> list[dict]:
    get_visible_business(session, business_id, include_unapproved=include_unapproved)
    return list_reviews(session, business_id)
