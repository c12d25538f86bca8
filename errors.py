# errors.py
"""
Exceptions raised while mapping scale set configuration.

Both kinds are plain configuration rejections: they are returned to the
caller unchanged and never retried.
"""

from typing import Optional


class ScaleSetError(ValueError):
    """Base class for every scale set configuration error."""


class ParseError(ScaleSetError):
    """An Azure resource ID could not be parsed or is missing a segment."""

    def __init__(self, message: str, resource_id: str, segment: Optional[str] = None):
        super().__init__(message)
        self.resource_id = resource_id
        self.segment = segment


class ValidationError(ScaleSetError):
    """A configuration block broke one of its option or cross-field rules."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
