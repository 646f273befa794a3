"""
Retrieves the declaration items of a document
"""

import logging

from decl_reorganizer.core.code_items import DeclarationItem
from decl_reorganizer.core.document import Document
from decl_reorganizer.core.errors import LazyValueLoadFailure, ParseUnavailable
from decl_reorganizer.core.regions import CodeRegionService
from decl_reorganizer.parsers import get_parser

logger = logging.getLogger(__name__)


class CodeItemRetriever:
    """Parses a document into a flat item list, regions included"""

    def retrieve(
        self,
        document: Document,
        load_lazy_values: bool = False,
    ) -> list[DeclarationItem]:
        """
        Retrieve every declaration item of a document.

        Args:
            document: Document to parse
            load_lazy_values: Also compute each item's deferred values

        Returns:
            Flat list of items; empty when the document cannot be parsed

        Raises:
            ValueError: document is None
        """
        if document is None:
            raise ValueError("A document is required to retrieve code items")

        code_items = self._build_code_items(document)
        code_items.extend(
            CodeRegionService(document.language).retrieve_regions(document.buffer)
        )

        if load_lazy_values:
            self._load_lazy_values(document, code_items)

        return code_items

    def _build_code_items(self, document: Document) -> list[DeclarationItem]:
        try:
            parser = get_parser(document.language)
            if parser is None:
                raise ParseUnavailable(
                    f"No declaration parser for {document.language.value} files"
                )
            return parser.parse(document)
        except ParseUnavailable as e:
            logger.error(f"Unable to build code model for '{document.name}': {e}")
            return []

    @staticmethod
    def _load_lazy_values(
        document: Document,
        code_items: list[DeclarationItem],
    ) -> None:
        for item in code_items:
            try:
                item.load_lazy_values()
            except LazyValueLoadFailure as e:
                logger.error(f"Lazy value failure in '{document.name}': {e}")
