"""Error taxonomy for the category hierarchy.

Every failure surfaced by the category components carries a stable code
(``VALIDATION_ERROR``, ``CONFLICT``, ``NOT_FOUND``, ``RESOURCE_UNAVAILABLE``,
``PARTIAL_CASCADE_FAILURE``) and the HTTP status the API layer maps it to.
"""

from __future__ import annotations


class CategoryError(Exception):
    """Base exception for all category hierarchy failures."""

    code = "INTERNAL_ERROR"
    http_status = 500

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}


class CategoryValidationError(CategoryError):
    """Rejected input: empty name or slug, self-parenting, cycles, depth."""

    code = "VALIDATION_ERROR"
    http_status = 400

    def __init__(self, field: str, message: str):
        super().__init__(message, field=field)
        self.field = field


class CategoryConflictError(CategoryError):
    """Slug collision on an explicit slug, or delete of a node with children."""

    code = "CONFLICT"
    http_status = 409


class CategoryNotFoundError(CategoryError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, message: str = "Category not found", **details):
        super().__init__(message, **details)


class StoreUnavailableError(CategoryError):
    """The category store could not be reached.

    Only the operation name reaches callers; driver diagnostics are logged.
    """

    code = "RESOURCE_UNAVAILABLE"
    http_status = 503

    def __init__(self, operation: str):
        super().__init__(f"Category store unavailable during {operation}", operation=operation)
        self.operation = operation


class PartialCascadeFailure(CategoryError):
    """An ancestor cascade aborted on one or more branches.

    Nodes listed in ``updated_ids`` keep their recomputed caches; the subtrees
    below ``failed_ids`` were not visited.
    """

    code = "PARTIAL_CASCADE_FAILURE"
    http_status = 500

    def __init__(self, root_id: str, updated_ids: list[str], failed_ids: list[str]):
        super().__init__(
            f"Ancestor cascade from {root_id} failed on {len(failed_ids)} branch(es)",
            root_id=root_id,
            updated_ids=list(updated_ids),
            failed_ids=list(failed_ids),
            first_failed_id=failed_ids[0] if failed_ids else None,
        )
        self.root_id = root_id
        self.updated_ids = list(updated_ids)
        self.failed_ids = list(failed_ids)

    @property
    def first_failed_id(self) -> str | None:
        return self.failed_ids[0] if self.failed_ids else None
