from __future__ import annotations

import hmac
import logging
from typing import Optional

from fastapi import Header, Request

from .errors import UnauthorizedError


logger = logging.getLogger(__name__)

ADMIN_KEY_HEADER = "x-admin-key"


def admin_key_matches(presented: Optional[str], expected: Optional[str]) -> bool:
    """Constant-time comparison of the presented admin key with the configured one.

    A missing key on either side never matches, so an unconfigured server
    refuses every admin call.
    """
    if not presented or not expected:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


def _expected_key(request: Request) -> Optional[str]:
    return getattr(request.app.state, "admin_key", None)


def require_admin(
    request: Request,
    x_admin_key: Optional[str] = Header(default=None, alias=ADMIN_KEY_HEADER),
) -> None:
    if not admin_key_matches(x_admin_key, _expected_key(request)):
        client_host = request.client.host if request.client else None
        logger.warning("Rejected admin request %s %s from %s", request.method, request.url.path, client_host)
        raise UnauthorizedError()


def is_admin(
    request: Request,
    x_admin_key: Optional[str] = Header(default=None, alias=ADMIN_KEY_HEADER),
) -> bool:
    return admin_key_matches(x_admin_key, _expected_key(request))
