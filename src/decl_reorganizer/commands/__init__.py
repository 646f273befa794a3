"""
Command handlers used by the CLI
"""

from .cleanup import CleanUpCommand, DeclarationProcessor

__all__ = ["CleanUpCommand", "DeclarationProcessor"]
