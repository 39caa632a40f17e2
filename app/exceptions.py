"""
Domain exceptions
Raised by the services, mapped to HTTP responses in main.py
"""
from typing import Any, Dict, Optional

from fastapi import status


class WorkOrderError(Exception):
    """Base exception for all work-order domain errors"""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(WorkOrderError):
    """Requested resource does not exist"""

    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(WorkOrderError):
    """Input failed a business rule"""

    status_code = 422


class InvalidTransitionError(WorkOrderError):
    """Status change not allowed from the current status"""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot move a work order from '{current}' to '{target}'",
            details={"current_status": current, "target_status": target},
        )


class PermissionDeniedError(WorkOrderError):
    """Caller is not allowed to perform the action"""

    status_code = status.HTTP_403_FORBIDDEN
