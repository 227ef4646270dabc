"""
Catalog Backend: Custom Exception Hierarchy
============================================

What:  Application-specific exceptions, each mapped to one HTTP status.
How:   Each exception carries a user-facing message, an optional context dict
       (logged, never returned) and a `status_code`. Global exception
       handlers registered in main.py turn them into the JSON error envelope
       `{"success": false, "message": ...}`.
Who:   Raised by services; caught by the global handlers.

Exception Hierarchy:
    CatalogError (base)          → 500
    ├── ValidationError          → 400 (missing / malformed field)
    ├── UploadError              → 400 (bad payload) or 500 (provider failure)
    ├── NotFoundError            → 404
    ├── ConflictError            → 400 (delete blocked by dependents)
    └── PersistenceError         → 500 (unexpected database failure)
"""

from typing import Any, Dict, Optional


class CatalogError(Exception):
    """
    Base exception for all catalog application errors.

    Attributes:
        message:     User-facing error description (safe to return)
        context:     Additional debug info (logged but NOT returned to client)
        status_code: HTTP status used by the global handler
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatalogError):
    """
    Raised when client input fails validation.

    When:    Required field missing or blank, number that does not parse,
             malformed reference id.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UploadError(CatalogError):
    """
    Raised when an image could not be stored on the media host.

    Two flavours share this type:
        - payload problems (empty, too large, wrong type): HTTP 400
        - provider problems (not configured, rejected, timeout): HTTP 500

    `slot` names the form field (img, image1..image5) the file came from.
    """

    def __init__(
        self,
        message: str = "File upload failed.",
        slot: Optional[str] = None,
        status_code: int = 500,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if slot:
            ctx["slot"] = slot
        super().__init__(message=message, context=ctx)
        self.slot = slot
        self.status_code = status_code


class NotFoundError(CatalogError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found
    Message: "<Resource> not found." (matches what API clients already expect)
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found.", context=ctx)
        self.resource = resource


class ConflictError(CatalogError):
    """
    Raised when a delete is refused because other records reference the target.

    `blocked_by` names the dependent kind (e.g. "subcategories", "products").
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str,
        blocked_by: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["blocked_by"] = blocked_by
        super().__init__(message=message, context=ctx)
        self.blocked_by = blocked_by


class PersistenceError(CatalogError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the SQL error is
    logged server-side only.
    HTTP:    500 Internal Server Error
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
