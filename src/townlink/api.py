from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, StrictInt
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import is_admin, require_admin
from .config import load_config
from .db import session_scope
from .directory import list_categories
from .errors import DirectoryError, StoreError, ValidationError
from .metrics import collect_metrics
from .moderation import (
    PUBLIC_STATUS,
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


logger = logging.getLogger(__name__)

# Input validation limits
MAX_NAME_LENGTH = 200
MAX_CATEGORY_LENGTH = 100
MAX_LOCATION_LENGTH = 300
MAX_TEXT_LENGTH = 5000
MAX_CONTACT_LENGTH = 500


class BusinessSubmitRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: Optional[str] = Field(None, max_length=MAX_NAME_LENGTH)
    category: Optional[str] = Field(None, max_length=MAX_CATEGORY_LENGTH)
    location: Optional[str] = Field(None, max_length=MAX_LOCATION_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_TEXT_LENGTH)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=254)
    website: Optional[str] = Field(None, max_length=MAX_CONTACT_LENGTH)
    hours: Optional[str] = Field(None, max_length=MAX_CONTACT_LENGTH)
    image: Optional[str] = Field(None, max_length=2000)
    latitude: Optional[float] = Field(None, ge=-90.0, le=90.0)
    longitude: Optional[float] = Field(None, ge=-180.0, le=180.0)


class ReviewSubmitRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    business_id: Optional[StrictInt] = None
    reviewer_name: Optional[str] = Field(None, max_length=MAX_NAME_LENGTH)
    text: Optional[str] = Field(None, max_length=MAX_TEXT_LENGTH)
    # Left untyped so booleans and strings reach parse_rating instead of being coerced.
    rating: Optional[Any] = None


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "Invalid request: " + "; ".join(parts) if parts else "Invalid request."


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DirectoryError)
    async def handle_directory_error(request: Request, exc: DirectoryError) -> JSONResponse:
        if isinstance(exc, StoreError):
            logger.error(
                "Store failure on %s %s: %s",
                request.method,
                request.url.path,
                exc.cause or exc,
                exc_info=exc.cause or exc,
            )
            return _error_response(exc.status_code, "Internal server error.")
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(400, _describe_validation_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "Route not found." if exc.status_code == 404 else str(exc.detail)
        return _error_response(exc.status_code, message)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Uncaught error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error_response(500, "Unexpected server error.")


def create_app() -> FastAPI:
    config = load_config()
    app = FastAPI(title="TownLink Directory API", version="0.1.0")
    app.state.admin_key = config.admin_key
    if not config.admin_key:
        logger.warning("ADMIN_KEY is not set; every admin request will be rejected")

    _register_error_handlers(app)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.post("/api/businesses", status_code=201)
    def api_submit_business(payload: BusinessSubmitRequest) -> dict:
        with session_scope() as session:
            return submit_business(session, payload.model_dump())

    @app.get("/api/businesses")
    def api_list_businesses(
        category: Optional[str] = Query(default=None, max_length=MAX_CATEGORY_LENGTH),
        status: Optional[str] = Query(default=None, max_length=20),
        admin: bool = Depends(is_admin),
    ) -> list[dict]:
        with session_scope() as session:
            if admin:
                return list_for_admin(session, status=status, category=category)
            # The public only ever sees approved businesses, whatever status was asked for.
            return list_public(session, category=category)

    @app.get("/api/businesses/categories")
    def api_business_categories() -> list[str]:
        with session_scope() as session:
            return list_categories(session, status=PUBLIC_STATUS)

    @app.get("/api/businesses/{business_id}")
    def api_get_business(business_id: int, admin: bool = Depends(is_admin)) -> dict:
        with session_scope() as session:
            return get_visible_business(session, business_id, include_unapproved=admin)

    @app.put("/api/businesses/{business_id}/approve", dependencies=[Depends(require_admin)])
    def api_approve_business(business_id: int) -> dict:
        with session_scope() as session:
            return approve_business(session, business_id)

    @app.put("/api/businesses/{business_id}/reject", dependencies=[Depends(require_admin)])
    def api_reject_business(business_id: int) -> dict:
        with session_scope() as session:
            return reject_business(session, business_id)

    @app.delete("/api/businesses/{business_id}", dependencies=[Depends(require_admin)])
    def api_delete_business(business_id: int) -> dict:
        with session_scope() as session:
            record = remove_business(session, business_id)
        return {"message": "Business deleted.", "business": record}

    @app.get("/api/businesses/{business_id}/reviews")
    def api_business_reviews(business_id: int, admin: bool = Depends(is_admin)) -> list[dict]:
        with session_scope() as session:
            return list_visible_reviews(session, business_id, include_unapproved=admin)

    @app.post("/api/businesses/{business_id}/reviews", status_code=201)
    def api_submit_business_review(
        business_id: int, payload: ReviewSubmitRequest, admin: bool = Depends(is_admin)
    ) -> dict:
        with session_scope() as session:
            return submit_review(
                session, business_id, payload.model_dump(exclude={"business_id"}), include_unapproved=admin
            )

    @app.post("/api/reviews", status_code=201)
    def api_submit_review(payload: ReviewSubmitRequest, admin: bool = Depends(is_admin)) -> dict:
        if payload.business_id is None:
            raise ValidationError("Missing required fields: business_id.")
        with session_scope() as session:
            return submit_review(
                session, payload.business_id, payload.model_dump(exclude={"business_id"}), include_unapproved=admin
            )

    @app.get("/api/reviews/{business_id}")
    def api_reviews_legacy(business_id: int, admin: bool = Depends(is_admin)) -> list[dict]:
        with session_scope() as session:
            return list_visible_reviews(session, business_id, include_unapproved=admin)

    @app.get("/api/metrics", dependencies=[Depends(require_admin)])
    def api_metrics() -> dict:
        with session_scope() as session:
            return collect_metrics(session)

    # --- Legacy admin routes used by the standalone admin page ---

    @app.get("/admin/pending-businesses", dependencies=[Depends(require_admin)])
    def admin_pending_businesses() -> list[dict]:
        with session_scope() as session:
            return list_pending(session)

    @app.post("/admin/approve/{business_id}", dependencies=[Depends(require_admin)])
    def admin_approve_business(business_id: int) -> dict:
        with session_scope() as session:
            return approve_business(session, business_id)

    @app.delete("/admin/delete/{business_id}", dependencies=[Depends(require_admin)])
    def admin_delete_business(business_id: int) -> dict:
        with session_scope() as session:
            record = remove_business(session, business_id)
        return {"message": "Business deleted.", "business": record}

    return app


app = create_app()
