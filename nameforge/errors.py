"""
Exceptions raised by nameforge.
"""


class NameforgeError(Exception):
    """Base class for nameforge errors."""


class InputPathError(NameforgeError):
    """The input path is missing, unreadable or not a valid image."""
