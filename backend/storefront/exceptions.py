"""
Storefront Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the product and order pipelines.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, the document store and the multipart ingestor;
       caught by the handlers in main.py.

Exception Hierarchy:
    StorefrontError (base)
    ├── ValidationError          → 400 Bad Request (missing/invalid fields)
    ├── ParseError               → 400 Bad Request (malformed multipart body)
    ├── NotFoundError            → 404 Not Found
    ├── FileStorageError         → 500 Internal Server Error (temp files)
    └── DependencyError          → 500 Internal Server Error
        ├── DatabaseError            (MongoDB failure)
        └── ImageUploadError         (Cloudinary failure)
"""

from typing import Any, Dict, List, Optional


class StorefrontError(Exception):
    """
    Base exception for all Storefront application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (field names, error types)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """
    Raised when client input fails validation.

    When:    Missing required order fields, invalid gender, non-numeric price.
    HTTP:    400 Bad Request

    Example response:
        {
            "success": false,
            "error": "validation_error",
            "message": "All fields are required",
            "details": {"missing": ["phone"]}
        }
    """

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


class MissingFieldsError(ValidationError):
    """
    Raised when one or more required fields are absent or blank.

    The message stays general; the missing names travel in the context.
    """

    def __init__(
        self,
        missing: List[str],
        message: str = "All fields are required",
    ):
        super().__init__(message=message, context={"missing": list(missing)})
        self.missing = list(missing)


class ParseError(StorefrontError):
    """
    Raised when a multipart request body cannot be parsed.

    When:    Truncated body, missing boundary, wrong Content-Type.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Form parse error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(StorefrontError):
    """
    Raised when a requested resource does not exist.

    When:    DELETE /api/products/{id} with an unknown (or malformed) id.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(StorefrontError):
    """
    Raised when temporary upload files cannot be written or read.

    When:    Disk full, permission denied, upload dir not writable.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DependencyError(StorefrontError):
    """
    Raised when an external collaborator (database, image host) fails.

    HTTP:    500 Internal Server Error
    The response carries the raw error type and message in `details`.
    """

    def __init__(
        self,
        message: str = "An upstream dependency failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(DependencyError):
    """Raised when a MongoDB operation fails."""

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ImageUploadError(DependencyError):
    """
    Raised when the hosted image service rejects or fails an upload.

    When:    Network failure, bad credentials, quota exceeded.
    """

    def __init__(
        self,
        message: str = "Image upload failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
