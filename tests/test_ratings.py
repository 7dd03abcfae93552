from __future__ import annotations

from sqlalchemy.orm import Session

from townlink.directory import create_business, create_review, get_business, list_businesses
from townlink.ratings import average_rating, load_average_ratings, mean_rating


def _add_reviews(db: Session, business_id: int, ratings: list[int]) -> None:
    for index, rating in enumerate(ratings):
        create_review(db, business_id, {"reviewer_name": f"r{index}", "text": "ok", "rating": rating})


def test_mean_rating_of_nothing_is_zero():
    assert mean_rating([]) == 0
    assert mean_rating([4, 5]) == 4.5
    assert mean_rating([1, 2, 2]) == 1.67


def test_unreviewed_business_reports_zero(db_session: Session, business_fields):
    business = create_business(db_session, business_fields)

    assert average_rating(db_session, business["id"]) == 0
    assert get_business(db_session, business["id"])["average_rating"] == 0


def test_average_matches_arithmetic_mean(db_session: Session, business_fields):
    business = create_business(db_session, business_fields)
    ratings = [5, 3, 4, 4, 1]
    _add_reviews(db_session, business["id"], ratings)

    assert average_rating(db_session, business["id"]) == mean_rating(ratings) == 3.4


def test_load_average_ratings_covers_every_requested_id(db_session: Session, business_fields):
    reviewed = create_business(db_session, business_fields)
    quiet = create_business(db_session, {**business_fields, "name": "Quiet"})
    _add_reviews(db_session, reviewed["id"], [4, 5])

    averages = load_average_ratings(db_session, [reviewed["id"], quiet["id"], 404])

    assert averages == {reviewed["id"]: 4.5, quiet["id"]: 0.0, 404: 0.0}
    assert load_average_ratings(db_session, []) == {}


def test_listing_reflects_new_reviews_immediately(db_session: Session, business_fields):
    business = create_business(db_session, business_fields)
    assert list_businesses(db_session)[0]["average_rating"] == 0

    _add_reviews(db_session, business["id"], [2])
    assert list_businesses(db_session)[0]["average_rating"] == 2.0

    _add_reviews(db_session, business["id"], [5])
    assert list_businesses(db_session)[0]["average_rating"] == 3.5
