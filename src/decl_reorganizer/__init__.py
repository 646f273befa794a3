"""
Declaration reorganizer - reorders the declarations of a source file
into a canonical order while keeping comments and cursor in place.
"""

__version__ = "1.0.0"
