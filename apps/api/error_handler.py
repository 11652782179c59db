"""
Error handling utilities for ChefOS API.
Turns domain and data-access failures into logged HTTP errors. Every record
carries the operation plus whichever org/user it concerned.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException

logger = logging.getLogger(__name__)

Context = Optional[Dict[str, Any]]


def _context(
    operation: str,
    org_id: Optional[str] = None,
    user_id: Optional[str] = None,
    extra_context: Context = None,
) -> Dict[str, Any]:
    context = {"operation": operation, **(extra_context or {})}
    if org_id:
        context["org_id"] = str(org_id)
    if user_id:
        context["user_id"] = str(user_id)
    return context


class APIError:
    """Builds HTTPExceptions for routers, logging each failure once."""

    @staticmethod
    def handle_database_error(
        operation: str,
        error: Exception,
        org_id: Optional[str] = None,
        user_id: Optional[str] = None,
        extra_context: Context = None,
    ) -> HTTPException:
        """
        A query or commit failed.

        Logged at ERROR with the traceback; the client only sees which
        operation failed.

        Returns:
            HTTPException with status 500
        """
        logger.error(
            f"{operation} failed in the database: {error}",
            extra=_context(operation, org_id, user_id, extra_context),
            exc_info=True,
        )
        return HTTPException(status_code=500, detail=f"Could not {operation}")

    @staticmethod
    def handle_unavailable_error(
        operation: str,
        error: Exception,
        org_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> HTTPException:
        """
        The duty store could not be read. Reported as 503 so callers
        never mistake it for an empty roster.
        """
        logger.error(
            f"Store unavailable, cannot {operation}: {error}",
            extra=_context(operation, org_id, user_id),
        )
        return HTTPException(status_code=503, detail=f"Cannot {operation} right now, try again shortly")

    @staticmethod
    def handle_validation_error(
        operation: str,
        error: Exception,
        org_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> HTTPException:
        """Request was well formed but rejected by domain rules (400)."""
        logger.warning(
            f"Rejected {operation}: {error}",
            extra=_context(operation, org_id, user_id),
        )
        return HTTPException(status_code=400, detail=str(error))

    @staticmethod
    def handle_not_found_error(
        resource: str,
        resource_id: str,
        org_id: Optional[str] = None,
    ) -> HTTPException:
        """
        Args:
            resource: Kind of record, e.g. 'Ingredient' or 'Duty'
            resource_id: The id that was looked up
            org_id: Organization the lookup was scoped to

        Returns:
            HTTPException with status 404
        """
        logger.warning(
            f"{resource} {resource_id} not found",
            extra=_context(f"find {resource.lower()}", org_id, extra_context={"resource_id": resource_id}),
        )
        return HTTPException(status_code=404, detail=f"{resource} {resource_id} not found")

    @staticmethod
    def handle_generic_error(operation: str, error: Exception) -> HTTPException:
        """Anything unexpected: full traceback in the logs, generic 500 to the client."""
        logger.exception(f"Unhandled error in {operation}: {error}", extra=_context(operation))
        return HTTPException(status_code=500, detail="Internal server error")

    @staticmethod
    def log_operation_start(
        operation: str,
        org_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> None:
        logger.debug(f"{operation}: started", extra=_context(operation, org_id, user_id))

    @staticmethod
    def log_operation_success(
        operation: str,
        org_id: Optional[str] = None,
        user_id: Optional[str] = None,
        extra_context: Context = None,
    ) -> None:
        logger.info(f"{operation}: done", extra=_context(operation, org_id, user_id, extra_context))
