"""
Clean up of one document: retrieve, reorganize and pad its declarations
"""

import logging
from dataclasses import dataclass

from decl_reorganizer.core.blank_lines import BlankLineInsertService, BlankLinePolicy
from decl_reorganizer.core.code_items import KindCodeItem
from decl_reorganizer.core.comment_helper import CodeLanguage
from decl_reorganizer.core.config import Config
from decl_reorganizer.core.document import Document
from decl_reorganizer.core.item_comparer import CodeItemTypeComparer
from decl_reorganizer.core.regions import CodeRegionService
from decl_reorganizer.core.reorganizer import CodeItemReorganizer
from decl_reorganizer.core.retriever import CodeItemRetriever
from decl_reorganizer.core.tree_builder import CodeTreeBuilder

logger = logging.getLogger(__name__)


@dataclass
class CleanUpSummary:
    """What a clean up pass did to a document"""

    items: int = 0
    moves: int = 0
    paddings: int = 0
    regions_removed: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.moves or self.paddings or self.regions_removed)


class CleanUpManager:
    """Runs the whole clean up of a document as one undoable unit"""

    def __init__(self, config: Config | None = None):
        self.config = config or Config()
        self._retriever = CodeItemRetriever()
        self._tree_builder = CodeTreeBuilder()

    def execute(self, document: Document) -> CleanUpSummary:
        """
        Clean up a document in place.

        Args:
            document: Document whose buffer is edited

        Returns:
            CleanUpSummary of the pass

        Raises:
            ValueError: document is None
        """
        if document is None:
            raise ValueError("A document is required for clean up")

        buffer = document.buffer
        summary = CleanUpSummary()
        policy = BlankLinePolicy(self.config.padding.get_padded_kinds())

        with buffer.undo_transaction(f"Clean up {document.name}"):
            code_items = [
                item
                for item in self._retriever.retrieve(document)
                if item.kind != KindCodeItem.USING_STATEMENT
            ]

            if self.config.reorganize.remove_existing_regions:
                region_service = CodeRegionService(document.language)
                remaining = region_service.cleanup_existing_regions(buffer, code_items)
                summary.regions_removed = len(code_items) - len(remaining)
                code_items = remaining

            summary.items = len(code_items)
            code_items = self._tree_builder.build(code_items)

            reorganizer = CodeItemReorganizer(
                buffer,
                comparer=CodeItemTypeComparer(
                    self.config.reorganize.secondary_order_by_name
                ),
                blank_line_policy=policy,
                language=document.language,
                order_significant_attributes=(
                    self.config.reorganize.order_significant_attributes
                ),
            )
            if self._reorganizes_top_level(document):
                reorganizer.reorganize(code_items)
            else:
                for item in code_items:
                    if item.children and reorganizer.should_reorganize_children(
                        item
                    ):
                        reorganizer.reorganize(item.children)
            summary.moves = reorganizer.moves_performed

            if self.config.padding.enabled:
                summary.paddings = self._padding_service(
                    document, policy
                ).insert_paddings(code_items)

        logger.info(
            f"Cleaned up {document.name}: {summary.items} items, "
            f"{summary.moves} moves, {summary.paddings} blank lines added"
        )
        return summary

    def _reorganizes_top_level(self, document: Document) -> bool:
        return (
            document.language != CodeLanguage.PYTHON
            or self.config.reorganize.reorganize_module_level
        )

    def _padding_service(
        self,
        document: Document,
        policy: BlankLinePolicy,
    ) -> BlankLineInsertService:
        padding = self.config.padding
        top_level = (
            padding.python_top_level_blank_lines
            if document.language == CodeLanguage.PYTHON
            else padding.blank_lines
        )
        return BlankLineInsertService(
            document.buffer,
            policy,
            language=document.language,
            blank_lines=padding.blank_lines,
            top_level_blank_lines=top_level,
        )
