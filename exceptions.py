"""
Application exceptions and their HTTP handlers
"""

import logging
from datetime import datetime
from functools import wraps

from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError


logger = logging.getLogger(__name__)


class MediTrackError(Exception):
    """Base class for application errors"""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(MediTrackError):
    """Requested row does not exist or is not visible to the caller"""
    status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(MediTrackError):
    """Caller is not allowed to read or write the row"""
    status_code = status.HTTP_403_FORBIDDEN


class InvalidTransitionError(MediTrackError):
    """Dose log is already in a terminal state"""
    status_code = status.HTTP_409_CONFLICT


class ConflictError(MediTrackError):
    """Row violates a uniqueness rule"""
    status_code = status.HTTP_409_CONFLICT


class TransientPersistenceError(MediTrackError):
    """Database unreachable or timed out; safe to retry on the next cycle"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def wrap_transient_errors(func):
    """
    Re-raise driver connectivity failures and pool timeouts of an async
    service method as TransientPersistenceError
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (OperationalError, PoolTimeoutError) as e:
            logger.warning(f"Transient database error in {func.__name__}: {e}")
            raise TransientPersistenceError("Database temporarily unavailable") from e
    return wrapper


async def meditrack_exception_handler(request: Request, exc: MediTrackError):
    """Render application errors in the API's error envelope"""
    if isinstance(exc, AuthorizationError):
        # The client should never attempt these; surface them loudly
        logger.error(f"Authorization error on {request.method} {request.url.path}: {exc.detail}")
    elif isinstance(exc, TransientPersistenceError):
        logger.warning(f"Transient error on {request.method} {request.url.path}: {exc.detail}")
    else:
        logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "message": exc.detail,
            "status_code": exc.status_code,
            "timestamp": datetime.utcnow().isoformat()
        }
    )
