"""Average rating derived from reviews at read time.

Nothing here is stored on the business row: every listing or detail read asks
the reviews table again, so a freshly written review is visible immediately.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .models import Review

NO_RATING = 0.0


def _rounded(value) -> float:
    # AVG over an integer column comes back as Decimal on PostgreSQL.
    return round(float(value), 2)


def mean_rating(ratings: Sequence[int]) -> float:
    if not ratings:
        return NO_RATING
    return _rounded(sum(ratings) / len(ratings))


def load_average_ratings(session: Session, business_ids: Iterable[int]) -> dict[int, float]:
    """Return ``{business_id: average}`` for every id asked for, ``0.0`` when unreviewed."""
    ids = list(business_ids)
    averages = {business_id: NO_RATING for business_id in ids}
    if not ids:
        return averages

    rows = session.execute(
        select(Review.business_id, func.avg(Review.rating))
        .where(Review.business_id.in_(ids))
        .group_by(Review.business_id)
    ).all()
    for business_id, average in rows:
        if average is not None:
            averages[business_id] = _rounded(average)
    return averages


def average_rating(session: Session, business_id: int) -> float:
    return load_average_ratings(session, [business_id])[business_id]
