"""Custom exception classes."""

from typing import List, Optional


class RecipeBoxException(Exception):
    """Base exception for RecipeBox application."""

    pass


class ValidationError(RecipeBoxException):
    """Raised when request input validation fails."""

    pass


class ImageProcessingError(RecipeBoxException):
    """Raised when an uploaded image cannot be used."""

    pass


class GeminiError(RecipeBoxException):
    """Raised when a Gemini API call fails."""

    pass


class EmptyResponseError(GeminiError):
    """Raised when Gemini returns no usable content."""

    pass


class SchemaViolation:
    """One failed constraint on the extracted recipe JSON."""

    def __init__(self, field: str, constraint: str) -> None:
        self.field = field
        self.constraint = constraint

    def to_dict(self) -> dict:
        return {"field": self.field, "constraint": self.constraint}

    def __repr__(self) -> str:
        return f"SchemaViolation(field={self.field!r}, constraint={self.constraint!r})"


class SchemaViolationError(RecipeBoxException):
    """
    Raised when extracted JSON does not satisfy the recipe schema.

    Carries one `SchemaViolation` per failed constraint so callers can tell
    the user which field was wrong.
    """

    def __init__(self, message: str, violations: Optional[List[SchemaViolation]] = None) -> None:
        super().__init__(message)
        self.violations: List[SchemaViolation] = list(violations or [])

    def details(self) -> List[dict]:
        return [v.to_dict() for v in self.violations]


class MalformedJSONError(SchemaViolationError):
    """Raised when extracted content is not a JSON object at all."""

    pass


class EmptyBatchError(RecipeBoxException):
    """Raised when the merge engine is called with no candidates."""

    pass


class StorageError(RecipeBoxException):
    """Raised when the recipe store call fails."""

    def __init__(self, message: str, configured: bool = True) -> None:
        super().__init__(message)
        self.configured = configured


class RecipeNotFoundError(RecipeBoxException):
    """Raised when a stored recipe does not exist."""

    pass
