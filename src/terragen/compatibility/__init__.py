"""
Application options and their file formats.

Reads the <ApplicationOptions> XML layout as well as JSON.
"""

from .options import ApplicationOptions, RenderMode
from .options_validator import OptionsValidator

__all__ = ["ApplicationOptions", "RenderMode", "OptionsValidator"]
