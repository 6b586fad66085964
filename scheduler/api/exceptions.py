import structlog
from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from ..domain.errors import (
    ConcurrentModification,
    ConsistencyViolation,
    InvalidGrade,
    ScheduleMissing,
)

logger = structlog.get_logger()


def exception_handler(exc, context):
    """Map scheduler errors onto HTTP responses; everything else goes to DRF."""
    if isinstance(exc, InvalidGrade):
        exc = ValidationError({"rating": [str(exc)]})
    elif isinstance(exc, ScheduleMissing):
        exc = NotFound(str(exc))
    elif isinstance(exc, ConcurrentModification):
        logger.warning("concurrent_modification_surfaced", error=str(exc))
        return Response(
            {"error": "The card was modified concurrently, please retry.", "retry": True},
            status=status.HTTP_409_CONFLICT,
        )
    elif isinstance(exc, ConsistencyViolation):
        logger.error("consistency_violation", error=str(exc))
        return Response(
            {"error": "Internal consistency error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return drf_exception_handler(exc, context)
