"""
Petstagram Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the data access layer and API.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and the database layer; caught by global handlers
       or by the application lifespan during startup.

Exception Hierarchy:
    PetstagramError (base)
    ├── ValidationError          → 400 Bad Request
    ├── NotFoundError            → 404 Not Found
    ├── StorageError             → 500 Internal Server Error
    │   └── ConflictError        → 409 Conflict
    └── SchemaError              → startup failure (never reaches a client)
        └── SchemaAlreadyExists  → benign, logged at INFO and ignored

Propagation:
    Storage-layer errors propagate to the calling handler as-is. Services
    never retry a failed query; the only retries happen during startup
    schema setup (see database.py).
"""

from typing import Any, Dict, Optional


class PetstagramError(Exception):
    """
    Base exception for all Petstagram application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client
                  for server-side errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PetstagramError):
    """
    Raised when input fails validation.

    When:    A feed payload has the wrong shape, an unknown sort order is
             requested, or an update carries no fields.
    HTTP:    400 Bad Request
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


class NotFoundError(PetstagramError):
    """
    Raised when a requested entity does not exist.

    When:    Read, update or delete by identifier matches no row. This
             includes deleting a Like that was never added.
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
        self.resource = resource
        self.resource_id = resource_id


class StorageError(PetstagramError):
    """
    Raised when a query fails at runtime.

    When:    Connection lost mid-query, pool exhausted, constraint violation.
    HTTP:    500 Internal Server Error

    The client message is always generic. Constraint names, SQL and driver
    errors go into `context` and are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConflictError(StorageError):
    """
    Raised when an insert collides with a unique constraint that the caller
    is expected to handle, e.g. registering credentials for a user ID that
    already has them.

    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class SchemaError(PetstagramError):
    """
    Raised when schema setup fails for a reason other than the table
    already existing (connection refused, permission denied, ...).

    When:    Application startup, via SchemaReport.raise_for_errors().
    """

    def __init__(
        self,
        message: str = "Database schema setup failed",
        table: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if table:
            ctx["table"] = table
        super().__init__(message=message, context=ctx)
        self.table = table


class SchemaAlreadyExists(SchemaError):
    """
    The table being created is already present. Not an error condition:
    repeated process launches against the same database hit this on every
    table.
    """

    def __init__(self, table: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Table {table} already exists",
            table=table,
            context=context,
        )
