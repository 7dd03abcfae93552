from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from townlink.directory import create_review, list_reviews
from townlink.errors import NotFoundError, ValidationError
from townlink.models import STATUS_APPROVED, STATUS_PENDING
from townlink.moderation import (
    approve_business,
    get_visible_business,
    list_for_admin,
    list_pending,
    list_public,
    list_visible_reviews,
    reject_business,
    remove_business,
    submit_business,
    submit_review,
)


def test_submission_is_hidden_until_approved(db_session: Session, business_fields):
    record = submit_business(db_session, business_fields)

    assert record["status"] == STATUS_PENDING
    assert list_public(db_session) == []
    assert [row["id"] for row in list_pending(db_session)] == [record["id"]]
    with pytest.raises(NotFoundError):
        get_visible_business(db_session, record["id"])

    approve_business(db_session, record["id"])

    assert [row["id"] for row in list_public(db_session)] == [record["id"]]
    assert list_pending(db_session) == []
    assert get_visible_business(db_session, record["id"])["status"] == STATUS_APPROVED


def test_approve_twice_stays_approved(db_session: Session, business_fields):
    record = submit_business(db_session, business_fields)

    approve_business(db_session, record["id"])
    again = approve_business(db_session, record["id"])

    assert again["status"] == STATUS_APPROVED


def test_reject_resets_to_pending(db_session: Session, business_fields):
    record = submit_business(db_session, business_fields)
    approve_business(db_session, record["id"])

    rejected = reject_business(db_session, record["id"])

    assert rejected["status"] == STATUS_PENDING
    assert list_public(db_session) == []
    assert get_visible_business(db_session, record["id"], include_unapproved=True)["status"] == STATUS_PENDING


def test_admin_listing_sees_every_status(db_session: Session, business_fields):
    pending = submit_business(db_session, business_fields)
    approved = submit_business(db_session, {**business_fields, "name": "Approved One"})
    approve_business(db_session, approved["id"])

    assert {row["id"] for row in list_for_admin(db_session)} == {pending["id"], approved["id"]}
    assert [row["id"] for row in list_for_admin(db_session, status=STATUS_PENDING)] == [pending["id"]]


def test_transitions_on_missing_business_are_not_found(db_session: Session):
    for action in (approve_business, reject_business, remove_business):
        with pytest.raises(NotFoundError):
            action(db_session, 777)


def test_remove_business_is_irreversible(db_session: Session, business_fields):
    record = submit_business(db_session, business_fields)
    approve_business(db_session, record["id"])
    create_review(db_session, record["id"], {"reviewer_name": "Dee", "text": "Fine", "rating": 3})
    db_session.commit()

    removed = remove_business(db_session, record["id"])
    db_session.commit()

    assert removed["average_rating"] == 3.0
    assert list_for_admin(db_session) == []
    with pytest.raises(NotFoundError):
        list_reviews(db_session, record["id"])
    with pytest.raises(NotFoundError):
        approve_business(db_session, record["id"])


def test_reviews_follow_business_visibility(db_session: Session, business_fields):
    record = submit_business(db_session, business_fields)
    review = {"reviewer_name": "Eli", "text": "Early visit", "rating": 4}

    with pytest.raises(NotFoundError):
        submit_review(db_session, record["id"], review)
    with pytest.raises(NotFoundError):
        list_visible_reviews(db_session, record["id"])
    with pytest.raises(ValidationError):
        submit_review(db_session, record["id"], {**review, "rating": True})

    submit_review(db_session, record["id"], review, include_unapproved=True)
    assert len(list_visible_reviews(db_session, record["id"], include_unapproved=True)) == 1

    approve_business(db_session, record["id"])
    assert [row["reviewer_name"] for row in list_visible_reviews(db_session, record["id"])] == ["Eli"]
