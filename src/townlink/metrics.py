from __future__ import annotations

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from .models import BUSINESS_STATUSES, STATUS_APPROVED, Business, Review
from .ratings import NO_RATING


def collect_metrics(session: Session) -> dict:
    status_rows = session.execute(
        select(Business.status, func.count(Business.id)).group_by(Business.status)
    ).all()
    by_status = {status: 0 for status in BUSINESS_STATUSES}
    for status, count in status_rows:
        by_status[status] = int(count)

    review_totals = session.execute(
        select(
            func.count(Review.id),
            func.avg(Review.rating),
            func.sum(case((Business.status == STATUS_APPROVED, 1), else_=0)),
        ).select_from(Review).join(Business, Review.business_id == Business.id)
    ).first()
    review_count, review_average, public_reviews = review_totals or (0, None, 0)

    category_count = session.execute(
        select(func.count(func.distinct(Business.category))).where(Business.status == STATUS_APPROVED)
    ).scalar()

    return {
        "businesses": {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "public_categories": int(category_count or 0),
        },
        "reviews": {
            "total": int(review_count or 0),
            "on_public_businesses": int(public_reviews or 0),
            "average_rating": round(float(review_average), 2) if review_average is not None else NO_RATING,
        },
    }
