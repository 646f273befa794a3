"""
Base interface for declaration parsers
"""

import logging
from abc import ABC, abstractmethod

from decl_reorganizer.core.code_items import DeclarationItem
from decl_reorganizer.core.comment_helper import CodeLanguage
from decl_reorganizer.core.document import Document

logger = logging.getLogger(__name__)


class DeclarationParser(ABC):
    """Turns a document into a flat list of declaration items"""

    language: CodeLanguage = CodeLanguage.UNKNOWN

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def parse(self, document: Document) -> list[DeclarationItem]:
        """
        Parse a document's declarations.

        Items are returned flat, nested declarations included; spans must be
        created on the document's buffer. Sibling spans never overlap, and
        declarations sharing one definition share their start offset.

        Raises:
            ParseUnavailable: the document cannot be parsed
        """
        pass
