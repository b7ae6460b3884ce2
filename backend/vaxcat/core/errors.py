"""Module: errors.

Typed failures raised by the catalog services. Each carries the HTTP status
the API layer should answer with; ``main`` renders them into the JSON
envelope. ``detail`` holds diagnostics (driver messages and the like) that
are logged but never sent to clients.
"""

from typing import Any


class CatalogError(Exception):
    status_code = 500

    def __init__(self, message: str, *, data: Any = None, detail: str | None = None):
        super().__init__(message)
        self.message = message
        self.data = data
        self.detail = detail


class ValidationError(CatalogError):
    """Malformed or missing input."""

    status_code = 400


class Conflict(CatalogError):
    """Uniqueness or business-rule violation."""

    status_code = 400


class NotFound(CatalogError):
    """Missing id, or a filtered listing that matched nothing."""

    status_code = 404


class InternalError(CatalogError):
    """Unexpected persistence failure."""

    status_code = 500
