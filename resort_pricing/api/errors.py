"""Mapping of domain errors to HTTP responses."""
import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, status
from prometheus_client import Counter

from resort_pricing.domain.exceptions import DomainException

logger = logging.getLogger(__name__)


def domain_http_exception(e: DomainException) -> HTTPException:
    """HTTPException carrying the domain error code and its status."""
    return HTTPException(
        status_code=e.status_code,
        detail={"code": e.code, "message": e.message},
    )


def internal_http_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"code": "INTERNAL_ERROR", "message": "Internal server error"},
    )


def status_label(e: DomainException) -> str:
    """Metric label for a domain error."""
    if e.status_code == status.HTTP_404_NOT_FOUND:
        return "not_found"
    if e.status_code == status.HTTP_409_CONFLICT:
        return "conflict"
    if e.status_code >= 500:
        return "unavailable"
    return "invalid"


@contextmanager
def handle_errors(counter: Counter, operation: str) -> Iterator[None]:
    """Count the outcome of an endpoint and translate domain errors."""
    try:
        yield
    except DomainException as e:
        logger.warning(f"{operation} failed: [{e.code}] {e.message}")
        counter.labels(operation=operation, status=status_label(e)).inc()
        raise domain_http_exception(e)
    except HTTPException as e:
        counter.labels(operation=operation, status=str(e.status_code)).inc()
        raise
    except Exception as e:
        logger.exception(f"Unexpected error in {operation}: {e}")
        counter.labels(operation=operation, status="internal_error").inc()
        raise internal_http_exception()
    else:
        counter.labels(operation=operation, status="success").inc()
