# marketplace/middleware/activity_logger.py
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from marketplace.core.db import get_db
from marketplace.utils.activity_helpers import log_user_activity

logger = logging.getLogger(__name__)

MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class ActivityLoggerMiddleware(BaseHTTPMiddleware):
    """
    Records rejected write attempts by authenticated users. Successful writes
    are logged by the services inside their own transaction.
    """

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        # get_current_user leaves plain ids on request.state; the ORM user is
        # expired by the time the request session has closed
        user_id = getattr(request.state, "user_id", None)
        username = getattr(request.state, "user_email", None)
        if user_id is None or request.method not in MUTATING_METHODS or response.status_code < 400:
            return response

        message = f"Rejected {request.method} on {request.url.path} ({response.status_code})"
        session_factory = request.app.dependency_overrides.get(get_db, get_db)
        try:
            async for db in session_factory():
                await log_user_activity(db, user_id=user_id, username=username, message=message, commit=True)
        except Exception:
            logger.warning("Failed to log activity for user %s", user_id, exc_info=True)

        return response
