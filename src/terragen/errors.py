"""
Error types raised by terrain synthesis and meshing.
"""

from typing import List, Optional


class InvalidArgument(ValueError):
    """
    Raised when a caller passes a value the terrain pipeline cannot honor.

    Requested sizes are never clamped, so every bad dimension, iteration
    count, chunk size or option surfaces here instead.
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors) if errors else [message]
