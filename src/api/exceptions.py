"""Custom exceptions for the QRRec API.

Defines specific exception types for better error handling and reporting.
"""

from typing import Any, Dict, Optional


class QRRecException(Exception):
    """Base exception for QRRec errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class ProductNotFoundError(QRRecException):
    """Raised when a product id is not in the catalog."""

    def __init__(self, product_id: str):
        message = f"Product '{product_id}' not found in catalog."
        super().__init__(
            message=message,
            status_code=404,
            details={"product_id": product_id},
        )


class SnapshotNotConfiguredError(QRRecException):
    """Raised when a snapshot operation is requested without a snapshot path."""

    def __init__(self):
        super().__init__(
            message="No snapshot path configured. Set QRREC_SNAPSHOT_PATH.",
            status_code=409,
        )


class SnapshotNotFoundError(QRRecException):
    """Raised when the behavior snapshot file cannot be found."""

    def __init__(self, snapshot_path: str):
        message = f"Snapshot not found at '{snapshot_path}'."
        super().__init__(
            message=message,
            status_code=404,
            details={"snapshot_path": snapshot_path},
        )


class SnapshotLoadError(QRRecException):
    """Raised when a behavior snapshot fails to load."""

    def __init__(self, snapshot_path: str, error: Exception):
        message = f"Failed to load snapshot from '{snapshot_path}': {str(error)}"
        super().__init__(
            message=message,
            status_code=500,
            details={
                "snapshot_path": snapshot_path,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )
