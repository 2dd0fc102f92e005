import logging
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Failure reported to the caller as ``{"message": ...}``."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    pass


class NotFoundError(StoreError):
    pass


class ConflictError(StoreError):
    pass


class UnauthorizedError(StoreError):
    pass


class ForbiddenError(StoreError):
    pass


class InternalError(StoreError):
    status_code = 500


@contextmanager
def internal_failure(message: str):
    """Turn anything that is not a StoreError into an InternalError.

    The original exception is logged; only ``message`` reaches the caller.
    """
    try:
        yield
    except StoreError:
        raise
    except Exception:
        logger.exception(message)
        raise InternalError(message)
