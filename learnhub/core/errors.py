"""
LearnHub business errors

Every error carries the HTTP status the API layer answers with, so services
raise these and routers never translate by hand.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LearnHubError(Exception):
    status_code = 400
    default_detail = "Request could not be processed"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFound(LearnHubError):
    status_code = 404
    default_detail = "Resource not found"


class Forbidden(LearnHubError):
    status_code = 403
    default_detail = "Not authorized to perform this action"


class InvalidModule(LearnHubError):
    default_detail = "Module does not belong to this course"


class InvalidStatus(LearnHubError):
    default_detail = "Invalid status"


class AlreadyIssued(LearnHubError):
    default_detail = "A certificate for this user and course has already been issued"


class AlreadyReferred(LearnHubError):
    default_detail = "This user has already been referred"


class CodeNotFound(LearnHubError):
    status_code = 404
    default_detail = "Referrer with this code not found"


class EmailTaken(LearnHubError):
    default_detail = "A user with this email already exists"


class GenerationExhausted(LearnHubError):
    status_code = 500
    default_detail = "Could not generate a unique identifier"


class NotificationFailure(LearnHubError):
    """Raised by notifiers, always caught by notify_safely"""
    status_code = 502
    default_detail = "Notification delivery failed"


# ==================== HTTP MAPPING ====================

async def learnhub_error_handler(request: Request, exc: LearnHubError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": "Internal server error"})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(LearnHubError, learnhub_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
